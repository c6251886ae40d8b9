"""
Distribution Math
Counting, discrete and continuous distribution functions used by the probability verifier
"""

import math
from types import MappingProxyType
from typing import Optional


# Lanczos approximation, g = 7
_LANCZOS_G = 7
_LANCZOS = (
    0.99999999999980993, 676.5203681218851, -1259.1392167224028,
    771.32342877765313, -176.61502916214059, 12.507343278686905,
    -0.13857109526572012, 9.9843695780195716e-6, 1.5056327351493116e-7,
)

# Acklam's rational approximation of the inverse normal CDF
_ACKLAM_A = (-3.969683028665376e+01, 2.209460984245205e+02, -2.759285104469687e+02,
             1.383577518672690e+02, -3.066479806614716e+01, 2.506628277459239e+00)
_ACKLAM_B = (-5.447609879822406e+01, 1.615858368580409e+02, -1.556989798598866e+02,
             6.680131188771972e+01, -1.328068155288572e+01)
_ACKLAM_C = (-7.784894002430293e-03, -3.223964580411365e-01, -2.400758277161838e+00,
             -2.549732539343734e+00, 4.374664141464968e+00, 2.938163982698783e+00)
_ACKLAM_D = (7.784695709041462e-03, 3.224671290700398e-01, 2.445134137142996e+00,
             3.754408661907416e+00)

BETACF_MAX_ITER = 200
BETACF_EPS = 3e-14
FPMIN = 1e-300

# Two-sided critical z for common confidence levels
Z_STAR = MappingProxyType({
    0.80: 1.2815515655446004,
    0.90: 1.6448536269514722,
    0.95: 1.959963984540054,
    0.98: 2.3263478740408408,
    0.99: 2.5758293035489004,
    0.999: 3.2905267314919255,
})

# Two-sided critical t for 90 / 95 / 99 % confidence, df 1..30
T_STAR = MappingProxyType({
    0.90: (6.314, 2.920, 2.353, 2.132, 2.015, 1.943, 1.895, 1.860, 1.833, 1.812,
           1.796, 1.782, 1.771, 1.761, 1.753, 1.746, 1.740, 1.734, 1.729, 1.725,
           1.721, 1.717, 1.714, 1.711, 1.708, 1.706, 1.703, 1.701, 1.699, 1.697),
    0.95: (12.706, 4.303, 3.182, 2.776, 2.571, 2.447, 2.365, 2.306, 2.262, 2.228,
           2.201, 2.179, 2.160, 2.145, 2.131, 2.120, 2.110, 2.101, 2.093, 2.086,
           2.080, 2.074, 2.069, 2.064, 2.060, 2.056, 2.052, 2.048, 2.045, 2.042),
    0.99: (63.657, 9.925, 5.841, 4.604, 4.032, 3.707, 3.499, 3.355, 3.250, 3.169,
           3.106, 3.055, 3.012, 2.977, 2.947, 2.921, 2.898, 2.878, 2.861, 2.845,
           2.831, 2.819, 2.807, 2.797, 2.787, 2.779, 2.771, 2.763, 2.756, 2.750),
})


# -------------------------
# Gamma and counting
# -------------------------
def log_gamma(z: float) -> float:
    """ln Γ(z) by the Lanczos approximation (reflection below 0.5)."""
    if z < 0.5:
        return math.log(math.pi) - math.log(abs(math.sin(math.pi * z))) - log_gamma(1 - z)
    z -= 1
    x = _LANCZOS[0]
    for i in range(1, _LANCZOS_G + 2):
        x += _LANCZOS[i] / (z + i)
    t = z + _LANCZOS_G + 0.5
    return 0.5 * math.log(2 * math.pi) + (z + 0.5) * math.log(t) - t + math.log(x)


def log_factorial(n: int) -> float:
    if n < 0:
        return math.nan
    if n <= 1:
        return 0.0
    return log_gamma(n + 1)


def log_choose(n: int, k: int) -> float:
    if k < 0 or k > n:
        return -math.inf
    k = min(k, n - k)
    return log_factorial(n) - log_factorial(k) - log_factorial(n - k)


def n_choose_k(n: int, k: int) -> float:
    """
    Number of combinations via log-gamma, rounded when it is an exact
    integer within float precision.
    """
    if k < 0 or k > n:
        return 0.0
    value = math.exp(log_choose(n, k))
    return float(round(value)) if value < 2 ** 52 else value


def n_permute_k(n: int, k: int) -> float:
    if k < 0 or k > n:
        return 0.0
    value = math.exp(log_factorial(n) - log_factorial(n - k))
    return float(round(value)) if value < 2 ** 52 else value


# -------------------------
# Discrete distributions
# -------------------------
def binomial_pmf(n: int, k: int, p: float) -> float:
    if k < 0 or k > n:
        return 0.0
    if p <= 0:
        return 1.0 if k == 0 else 0.0
    if p >= 1:
        return 1.0 if k == n else 0.0
    return math.exp(log_choose(n, k) + k * math.log(p) + (n - k) * math.log(1 - p))


def binomial_cdf(n: int, k: int, p: float) -> float:
    """P(X <= k)."""
    return min(1.0, sum(binomial_pmf(n, i, p) for i in range(0, min(k, n) + 1)))


def poisson_pmf(lam: float, k: int) -> float:
    if k < 0:
        return 0.0
    if lam <= 0:
        return 1.0 if k == 0 else 0.0
    return math.exp(-lam + k * math.log(lam) - log_factorial(k))


def poisson_cdf(lam: float, k: int) -> float:
    """P(X <= k)."""
    return min(1.0, sum(poisson_pmf(lam, i) for i in range(0, k + 1)))


def tail_probability(pmf_cdf, k: int, comparison: str) -> float:
    """
    Apply a comparison ("=", "<=", "<", ">=", ">") given a callable pair
    (pmf(k), cdf(k)).
    """
    pmf, cdf = pmf_cdf
    if comparison == "<=":
        return cdf(k)
    if comparison == "<":
        return cdf(k - 1) if k > 0 else 0.0
    if comparison == ">=":
        return 1.0 - cdf(k - 1) if k > 0 else 1.0
    if comparison == ">":
        return 1.0 - cdf(k)
    return pmf(k)


# -------------------------
# Normal
# -------------------------
def normal_cdf(z: float) -> float:
    return 0.5 * (1 + math.erf(z / math.sqrt(2)))


def inverse_normal(p: float) -> float:
    """Acklam's approximation refined with one Halley step."""
    eps = 1e-12
    p = min(1 - eps, max(eps, p))
    a, b, c, d = _ACKLAM_A, _ACKLAM_B, _ACKLAM_C, _ACKLAM_D
    low = 0.02425
    if p < low:
        q = math.sqrt(-2 * math.log(p))
        x = ((((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5])
             / ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1))
    elif p > 1 - low:
        q = math.sqrt(-2 * math.log(1 - p))
        x = -((((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5])
              / ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1))
    else:
        q = p - 0.5
        r = q * q
        x = ((((((a[0] * r + a[1]) * r + a[2]) * r + a[3]) * r + a[4]) * r + a[5]) * q
             / (((((b[0] * r + b[1]) * r + b[2]) * r + b[3]) * r + b[4]) * r + 1))

    e = normal_cdf(x) - p
    u = e * math.sqrt(2 * math.pi) * math.exp(x * x / 2)
    return x - u / (1 + x * u / 2)


def z_star(confidence: float) -> float:
    """Two-sided critical z for a confidence level such as 0.95."""
    for level, value in Z_STAR.items():
        if abs(level - confidence) < 1e-6:
            return value
    return inverse_normal(1 - (1 - confidence) / 2)


# -------------------------
# Student t
# -------------------------
def _betacf(a: float, b: float, x: float) -> float:
    qab, qap, qam = a + b, a + 1, a - 1
    c = 1.0
    d = 1 - qab * x / qap
    if abs(d) < FPMIN:
        d = FPMIN
    d = 1 / d
    h = d
    for m in range(1, BETACF_MAX_ITER + 1):
        m2 = 2 * m
        aa = m * (b - m) * x / ((qam + m2) * (a + m2))
        d = 1 + aa * d
        d = FPMIN if abs(d) < FPMIN else d
        c = 1 + aa / c
        c = FPMIN if abs(c) < FPMIN else c
        d = 1 / d
        h *= d * c

        aa = -(a + m) * (qab + m) * x / ((a + m2) * (qap + m2))
        d = 1 + aa * d
        d = FPMIN if abs(d) < FPMIN else d
        c = 1 + aa / c
        c = FPMIN if abs(c) < FPMIN else c
        d = 1 / d
        delta = d * c
        h *= delta
        if abs(delta - 1) < BETACF_EPS:
            break
    return h


def incomplete_beta(a: float, b: float, x: float) -> float:
    """Regularized incomplete beta I_x(a, b)."""
    if x <= 0:
        return 0.0
    if x >= 1:
        return 1.0
    bt = math.exp(log_gamma(a + b) - log_gamma(a) - log_gamma(b)
                  + a * math.log(x) + b * math.log(1 - x))
    if x < (a + 1) / (a + b + 2):
        return bt * _betacf(a, b, x) / a
    return 1 - bt * _betacf(b, a, 1 - x) / b


def t_cdf(t: float, df: float) -> float:
    if df <= 0:
        return math.nan
    x = df / (df + t * t)
    upper = 1 - 0.5 * incomplete_beta(df / 2, 0.5, x)
    return upper if t >= 0 else 1 - upper


def t_star(confidence: float, df: int) -> float:
    """
    Two-sided critical t. Small df at 90/95/99 % comes from the table;
    anything else falls back to z*.
    """
    for level, row in T_STAR.items():
        if abs(level - confidence) < 1e-6 and 1 <= df <= len(row):
            return row[df - 1]
    return z_star(confidence)


# -------------------------
# Tests
# -------------------------
def p_value(cdf_at_stat: float, stat_abs_cdf: float, tail: Optional[str] = None) -> float:
    """
    p-value from a statistic's CDF. `tail` is "greater", "less" or None for
    two-tailed; `stat_abs_cdf` is the CDF evaluated at |statistic|.
    """
    if tail == "greater":
        return 1 - cdf_at_stat
    if tail == "less":
        return cdf_at_stat
    return 2 * (1 - stat_abs_cdf)


def z_test_p_value(z: float, tail: Optional[str] = None) -> float:
    return p_value(normal_cdf(z), normal_cdf(abs(z)), tail)


def t_test_p_value(t: float, df: float, tail: Optional[str] = None) -> float:
    return p_value(t_cdf(t, df), t_cdf(abs(t), df), tail)
