"""
Finance Verifier
Time value of money: discounted cash flows, annuities, rates, bonds, cost of capital and portfolios
"""

import logging
import math
import re
from typing import List, Optional, Sequence, Tuple

from boardcheck.config import (
    BISECTION_STEPS,
    DOMAIN_EPS,
    IRR_BRACKET,
    MONEY,
    NEWTON_MAX_ITER,
    RATE,
    TABLE,
)
from boardcheck.records import Problem
from boardcheck.utils.quantities import NUM, extract_number_list, find_all_labeled, find_number, find_percent, labeled
from boardcheck.verifiers.base import CheckCollector, Verifier, asked_for, reported_rate, reported_value

logger = logging.getLogger(__name__)


# -------------------------
# Discounted cash flows
# -------------------------
def npv(rate: float, cashflows: Sequence[float]) -> float:
    """CF0 is undiscounted; CFt is discounted t periods."""
    return sum(cf / (1 + rate) ** t for t, cf in enumerate(cashflows))


def _npv_slope(rate: float, cashflows: Sequence[float]) -> float:
    return sum(-t * cf / (1 + rate) ** (t + 1) for t, cf in enumerate(cashflows) if t)


def _bisect(f, lo: float, hi: float) -> float:
    f_lo = f(lo)
    for _ in range(BISECTION_STEPS):
        mid = (lo + hi) / 2
        f_mid = f(mid)
        if f_mid == 0:
            return mid
        if (f_lo < 0) == (f_mid < 0):
            lo, f_lo = mid, f_mid
        else:
            hi = mid
    return (lo + hi) / 2


def irr(cashflows: Sequence[float], guess: float = 0.1) -> Optional[float]:
    """
    Rate with NPV = 0. Newton's method from `guess` first; when it fails to
    converge, bisection on the first sign-changing sub-interval of the
    bracket. None when the series never changes sign there.
    """
    if len(cashflows) < 2:
        return None
    r = guess
    for _ in range(NEWTON_MAX_ITER):
        try:
            f = npv(r, cashflows)
            slope = _npv_slope(r, cashflows)
        except (OverflowError, ZeroDivisionError):
            break
        if not math.isfinite(f) or not math.isfinite(slope) or abs(slope) < DOMAIN_EPS:
            break
        step = f / slope
        r -= step
        if r <= IRR_BRACKET[0]:
            break
        if abs(step) < 1e-12 and abs(npv(r, cashflows)) <= 1e-6:
            return r

    lo, hi = IRR_BRACKET
    grid = [lo + (hi - lo) * k / 200 for k in range(201)]
    values = []
    for x in grid:
        try:
            values.append(npv(x, cashflows))
        except OverflowError:
            values.append(math.nan)
    for (a, fa), (b, fb) in zip(zip(grid, values), zip(grid[1:], values[1:])):
        if math.isnan(fa) or math.isnan(fb):
            continue
        if fa == 0:
            return a
        if (fa < 0) != (fb < 0):
            return _bisect(lambda x: npv(x, cashflows), a, b)
    logger.debug("no sign change for IRR in %s", IRR_BRACKET)
    return None


def mirr(cashflows: Sequence[float], finance_rate: float, reinvest_rate: float) -> Optional[float]:
    n = len(cashflows) - 1
    if n < 1:
        return None
    outflows = sum(cf / (1 + finance_rate) ** t for t, cf in enumerate(cashflows) if cf < 0)
    inflows = sum(cf * (1 + reinvest_rate) ** (n - t) for t, cf in enumerate(cashflows) if cf > 0)
    if outflows >= 0 or inflows <= 0:
        return None
    return (inflows / -outflows) ** (1 / n) - 1


def payback(cashflows: Sequence[float], rate: Optional[float] = None) -> Optional[float]:
    """Periods until cumulative (optionally discounted) flows turn non-negative, interpolated."""
    flows = list(cashflows)
    if rate is not None:
        flows = [cf / (1 + rate) ** t for t, cf in enumerate(flows)]
    cumulative = flows[0] if flows else 0.0
    if cumulative >= 0:
        return 0.0
    for t in range(1, len(flows)):
        if cumulative + flows[t] >= 0:
            return t - 1 + (-cumulative) / flows[t]
        cumulative += flows[t]
    return None


# -------------------------
# Annuities and single sums
# -------------------------
def annuity_factor(rate: float, periods: float) -> float:
    if abs(rate) < DOMAIN_EPS:
        return periods
    return (1 - (1 + rate) ** -periods) / rate


def pv_annuity(payment: float, rate: float, periods: float, due: bool = False) -> float:
    value = payment * annuity_factor(rate, periods)
    return value * (1 + rate) if due else value


def fv_annuity(payment: float, rate: float, periods: float, due: bool = False) -> float:
    if abs(rate) < DOMAIN_EPS:
        value = payment * periods
    else:
        value = payment * ((1 + rate) ** periods - 1) / rate
    return value * (1 + rate) if due else value


def loan_payment(principal: float, rate: float, periods: float, due: bool = False) -> float:
    """Level payment that amortizes `principal`; positive for a positive loan."""
    factor = annuity_factor(rate, periods)
    if due:
        factor *= 1 + rate
    return principal / factor


def growing_annuity(payment: float, rate: float, growth: float, periods: float) -> float:
    if abs(rate - growth) < DOMAIN_EPS:
        return payment * periods / (1 + rate)
    return payment / (rate - growth) * (1 - ((1 + growth) / (1 + rate)) ** periods)


def effective_rate(apr: float, m: Optional[float]) -> float:
    """EAR from a nominal rate; `m` None means continuous compounding."""
    if m is None:
        return math.exp(apr) - 1
    return (1 + apr / m) ** m - 1


def nominal_rate(ear: float, m: float) -> float:
    return m * ((1 + ear) ** (1 / m) - 1)


def bond_price(face: float, coupon_rate: float, ytm: float, years: float, m: int = 1) -> float:
    coupon = face * coupon_rate / m
    periods = years * m
    y = ytm / m
    return coupon * annuity_factor(y, periods) + face / (1 + y) ** periods


def bond_yield(price: float, face: float, coupon_rate: float, years: float, m: int = 1) -> Optional[float]:
    """Annualized (bond-equivalent) yield from the IRR of the bond's cash flows."""
    periods = int(round(years * m))
    if periods < 1:
        return None
    coupon = face * coupon_rate / m
    flows = [-price] + [coupon] * (periods - 1) + [coupon + face]
    y = irr(flows)
    return None if y is None else y * m


def portfolio(w1: float, r1: float, r2: float, s1: Optional[float], s2: Optional[float],
              rho: Optional[float]) -> Tuple[float, Optional[float]]:
    """(expected return, variance) of a two-asset mix."""
    w2 = 1 - w1
    expected = w1 * r1 + w2 * r2
    if s1 is None or s2 is None:
        return expected, None
    rho = 0.0 if rho is None else rho
    variance = (w1 * s1) ** 2 + (w2 * s2) ** 2 + 2 * w1 * w2 * rho * s1 * s2
    return expected, variance


# -------------------------
# Board parsing
# -------------------------
_FREQUENCY = (
    (r"monthly|per\s+month|12\s+times", 12),
    (r"quarterly|per\s+quarter", 4),
    (r"semi-?\s*annual\w*|half-?\s*year\w*|twice\s+a\s+year", 2),
    (r"weekly", 52),
    (r"daily", 365),
    (r"annual\w*|yearly", 1),
)
_RATE_PER_PERIOD = re.compile(r"per\s+(?:month|period|quarter)|/\s*(?:month|period|quarter)|monthly\s+(?:rate|interest)",
                              re.IGNORECASE)
_YEARS = re.compile(rf"{NUM}\s*(?:years?|yrs?)\b", re.IGNORECASE)
_PERIODS = re.compile(rf"{NUM}\s*(?:months|periods|payments|quarters|installments)\b", re.IGNORECASE)
_AT_RATE = re.compile(rf"\bat\s+(?:a\s+rate\s+of\s+)?{NUM}\s*%", re.IGNORECASE)


def _as_rate(value: Optional[float]) -> Optional[float]:
    if value is not None and abs(value) > 1:
        return value / 100
    return value


def find_rate(text: str, *labels) -> Optional[float]:
    """Labeled rate as a fraction; `8%`, `0.08` and `r = 8` all read as 0.08."""
    return _as_rate(find_percent(text, *labels))


def compounding(text: str) -> Optional[int]:
    """Periods per year from the board's wording; None when it says continuous."""
    if re.search(r"continuous\w*", text, re.IGNORECASE):
        return None
    m = find_number(text, labeled("m"))
    if m:
        return int(m)
    for pattern, per_year in _FREQUENCY:
        if re.search(pattern, text, re.IGNORECASE):
            return per_year
    return 1


def timing(text: str, annual_rate: float) -> Tuple[float, Optional[float]]:
    """(rate per period, number of periods) for annuity and lump-sum boards."""
    m = compounding(text) or 1
    per_period = bool(_RATE_PER_PERIOD.search(text))
    rate = annual_rate if per_period else annual_rate / m

    periods = find_number(text, _PERIODS)
    if periods is None:
        years = find_number(text, labeled(r"(?:t|years)"), _YEARS)
        if years is not None:
            periods = years * m
    if periods is None:
        periods = find_number(text, labeled("n"), labeled(r"(?:periods|nper)"))
    return rate, periods


def cash_flows(text: str) -> List[float]:
    """CF0, CF1, ... labels when present, else the first number list on the board."""
    indexed = find_all_labeled(text, "CF")
    if len(indexed) >= 2:
        return [indexed[k] for k in sorted(indexed, key=int)]
    return extract_number_list(text) if re.search(r"\[|cash\s*flows?\s*[:\-]|\bcf\s*[:\-]", text, re.IGNORECASE) else []


_TARGETS = (
    (r"\bmirr\b|modified\s+internal", "mirr"),
    (r"\birr\b|internal\s+rate", "irr"),
    (r"\bnpv\b|net\s+present\s+value", "npv"),
    (r"discounted\s+payback", "dpb"),
    (r"payback", "payback"),
    (r"\bytm\b|yield\s+to\s+maturity", "ytm"),
    (r"bond\s+price|price\s+of\s+the\s+bond", "price"),
    (r"\bear\b|\beff\b|effective\s+(?:annual\s+)?rate", "ear"),
    (r"\bapr\b|nominal\s+rate", "apr"),
    (r"\bwacc\b|weighted\s+average\s+cost", "wacc"),
    (r"\bcapm\b|required\s+return|expected\s+return|cost\s+of\s+equity", "capm"),
    (r"\bcagr\b|compound\s+annual\s+growth", "cagr"),
    (r"\beaa\b|equivalent\s+annual", "eaa"),
    (r"\bpmt\b|payment", "pmt"),
    (r"future\s+value|\bfv\b", "fv"),
    (r"present\s+value|\bpv\b", "pv"),
)


class FinanceVerifier(Verifier):
    """
    Textbook corporate finance.

    Rates are fractions throughout (`8%` -> 0.08). Dollar answers are
    compared with a tolerance that absorbs three-decimal factor tables;
    rates with a tolerance of five basis points.
    """

    name = "finance"
    subject = "finance"
    method = "finance-tvm"
    trigger = re.compile(
        r"\b(npv|irr|mirr|pmt|annuit\w*|perpetuit\w*|present\s*value|future\s*value|cash\s*flows?|loan|mortgage|"
        r"interest|compound\w*|apr|ear|bond|coupon|ytm|yield\s*to\s*maturity|payback|capm|beta|wacc|portfolio|"
        r"cagr|eaa|discount\s*rate|amorti[sz]\w*)\b",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(npv|irr|mirr|pmt|annuity|perpetuity|present\s*value|future\s*value|cash\s*flows?|loan|bond|coupon)\b",
        r"\b(ytm|payback|capm|wacc|cagr|eaa|apr|ear|compounded|discount\s*rate|portfolio)\b",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        final = problem.final
        money = reported_value(final)
        if money is None:
            return
        rate_rep = reported_rate(final)
        collector.focus(asked_for(text, _TARGETS, fallback=False))

        r = find_rate(text, labeled(r"(?:r|i|k|rate|discount\s*rate|interest\s*rate|interest)"), _AT_RATE)
        flows = cash_flows(text)
        due = bool(re.search(r"annuity\s+due|beginning\s+of\s+(?:each\s+)?(?:period|year|month)|in\s+advance", lower))

        self._check_cash_flows(text, lower, flows, r, money, rate_rep, collector)
        if r is not None:
            self._check_time_value(text, lower, r, due, money, collector)
        self._check_rates(text, lower, r, rate_rep, money, collector)

    # -------------------------
    # Project evaluation
    # -------------------------
    def _check_cash_flows(self, text, lower, flows, r, money, rate_rep, collector):
        if len(flows) < 2:
            return
        if r is not None and re.search(r"\bnpv\b|net\s+present\s+value", lower):
            collector.compare("NPV", npv(r, flows), money, TABLE, "NPV mismatch", aliases=("net present value",))
        if re.search(r"\bmirr\b|modified\s+internal", lower):
            finance = find_rate(text, labeled(r"(?:finance|financing)\s*rate")) or r
            reinvest = find_rate(text, labeled(r"reinvest\w*\s*rate")) or r
            if finance is not None and reinvest is not None:
                collector.compare("MIRR", mirr(flows, finance, reinvest), rate_rep, RATE, "MIRR mismatch")
        elif re.search(r"\birr\b|internal\s+rate", lower):
            collector.compare("IRR", irr(flows), rate_rep, RATE, "IRR mismatch", aliases=("internal rate of return",))
        if re.search(r"discounted\s+payback", lower):
            if r is not None:
                collector.compare("DPB", payback(flows, r), money, TABLE, "discounted payback mismatch",
                                  aliases=("discounted payback", "payback"))
        elif "payback" in lower:
            collector.compare("payback", payback(flows), money, TABLE, "payback mismatch", aliases=("pb",))
        if r is not None and re.search(r"\beaa\b|equivalent\s+annual", lower):
            periods = len(flows) - 1
            collector.compare("EAA", npv(r, flows) / annuity_factor(r, periods), money, TABLE, "EAA mismatch",
                              aliases=("equivalent annual annuity",))

    # -------------------------
    # Annuities, perpetuities, single sums, bonds
    # -------------------------
    def _check_time_value(self, text, lower, r, due, money, collector):
        rate, periods = timing(text, r)
        pv = find_number(text, labeled(r"(?:pv|present\s*value|principal|loan(?:\s*amount)?|p)"))
        fv = find_number(text, labeled(r"(?:fv|future\s*value)"))
        pmt = find_number(text, labeled(r"(?:pmt|payment|c|cash\s*flow)"))
        g = find_rate(text, labeled(r"(?:g|growth(?:\s*rate)?)"))

        if re.search(r"perpetuit", lower) and pmt is not None:
            if g is not None and r > g:
                collector.compare("PV", pmt / (r - g), money, MONEY, "growing perpetuity mismatch",
                                  aliases=("value",))
            elif g is None and r > 0:
                collector.compare("PV", pmt / r, money, MONEY, "perpetuity mismatch", aliases=("value",))
            return

        if re.search(r"\bbond\b|coupon", lower):
            face = find_number(text, labeled(r"(?:face(?:\s*value)?|par(?:\s*value)?|f)")) or 1000.0
            coupon = find_rate(text, labeled(r"coupon(?:\s*rate)?"))
            years = find_number(text, labeled(r"(?:t|years|maturity)"), _YEARS)
            ytm = find_rate(text, labeled(r"(?:ytm|yield(?:\s*to\s*maturity)?)"))
            m = 2 if re.search(r"semi-?\s*annual", lower) else 1
            if None not in (coupon, years, ytm):
                collector.compare("price", bond_price(face, coupon, ytm, years, m), money, TABLE,
                                  "bond price mismatch", aliases=("p", "bond price", "pv"))
            return

        if periods is None:
            return
        if g is not None and re.search(r"growing\s+annuity", lower) and pmt is not None:
            collector.compare("PV", growing_annuity(pmt, r, g, periods), money, TABLE, "growing annuity mismatch")
            return

        if re.search(r"\bpmt\b|payment|installment|amorti", lower) and pv is not None and pmt is None:
            collector.compare("PMT", loan_payment(pv, rate, periods, due), abs(money), MONEY, "PMT mismatch",
                              aliases=("payment", "installment"))
        elif pmt is not None and re.search(r"annuit|payments?|deposits?|each\s+(?:year|month)", lower):
            if re.search(r"future\s+value|\bfv\b|accumulate|saving", lower):
                collector.compare("FV", fv_annuity(pmt, rate, periods, due), money, TABLE,
                                  "annuity FV mismatch", aliases=("future value",))
            else:
                collector.compare("PV", pv_annuity(pmt, rate, periods, due), money, TABLE,
                                  "annuity PV mismatch", aliases=("present value",))
        elif pv is not None and fv is None and re.search(r"future\s+value|\bfv\b|grow|compound", lower):
            m = compounding(text)
            if m is None:
                years = periods
                value = pv * math.exp(r * years)
            else:
                value = pv * (1 + rate) ** periods
            collector.compare("FV", value, money, TABLE, "FV mismatch", aliases=("future value", "a", "amount"))
        elif fv is not None and pv is None:
            collector.compare("PV", fv / (1 + rate) ** periods, money, TABLE, "PV mismatch",
                              aliases=("present value",))

    # -------------------------
    # Rates, cost of capital, growth
    # -------------------------
    def _check_rates(self, text, lower, r, rate_rep, money, collector):
        if re.search(r"\bear\b|effective\s+(?:annual\s+)?rate|\beff\b", lower):
            apr = find_rate(text, labeled(r"(?:apr|nominal(?:\s*rate)?)")) or r
            if apr is not None:
                collector.compare("EAR", effective_rate(apr, compounding(text)), rate_rep, RATE, "EAR mismatch",
                                  aliases=("effective rate", "eff"))
        elif re.search(r"\bapr\b|nominal\s+rate", lower):
            ear = find_rate(text, labeled(r"(?:ear|effective(?:\s*annual)?(?:\s*rate)?)"))
            m = compounding(text)
            if ear is not None and m:
                collector.compare("APR", nominal_rate(ear, m), rate_rep, RATE, "APR mismatch", aliases=("nominal",))

        if re.search(r"\bytm\b|yield\s+to\s+maturity", lower):
            price = find_number(text, labeled(r"(?:price|p0?|bond\s*price)"))
            face = find_number(text, labeled(r"(?:face(?:\s*value)?|par(?:\s*value)?|f)")) or 1000.0
            coupon = find_rate(text, labeled(r"coupon(?:\s*rate)?"))
            years = find_number(text, labeled(r"(?:t|years|maturity)"), _YEARS)
            m = 2 if re.search(r"semi-?\s*annual", lower) else 1
            if None not in (price, coupon, years):
                collector.compare("YTM", bond_yield(price, face, coupon, years, m), rate_rep, RATE, "YTM mismatch",
                                  aliases=("yield",))

        rf = find_rate(text, labeled(r"r_?f"), labeled(r"risk[-\s]*free(?:\s*rate)?"))
        beta = find_number(text, labeled(r"(?:β|beta)"))
        if rf is not None and beta is not None:
            rm = find_rate(text, labeled(r"(?:r_?m|e\(r_?m\)|market\s*return)"))
            premium = find_rate(text, labeled(r"(?:mrp|market\s*risk\s*premium)"))
            if premium is None and rm is not None:
                premium = rm - rf
            if premium is not None:
                collector.compare("CAPM", rf + beta * premium, rate_rep, RATE, "CAPM mismatch",
                                  aliases=("e(r)", "re", "ke", "r_e", "k_e", "required return"))

        if re.search(r"\bwacc\b|weighted\s+average\s+cost", lower):
            E = find_number(text, labeled(r"(?:e|equity)"))
            D = find_number(text, labeled(r"(?:d|debt)"))
            re_ = find_rate(text, labeled(r"(?:r_?e|k_?e|cost\s*of\s*equity)"))
            rd = find_rate(text, labeled(r"(?:r_?d|k_?d|cost\s*of\s*debt)"))
            tax = find_rate(text, labeled(r"(?:t|t_?c|tax(?:\s*rate)?)")) or 0.0
            if None not in (E, D, re_, rd) and E + D > 0:
                V = E + D
                collector.compare("WACC", E / V * re_ + D / V * rd * (1 - tax), rate_rep, RATE, "WACC mismatch")

        if re.search(r"portfolio", lower):
            w1 = find_rate(text, labeled(r"w_?1"), labeled(r"w_?a"))
            r1 = find_rate(text, labeled(r"(?:r_?1|e_?1|r_?a)"))
            r2 = find_rate(text, labeled(r"(?:r_?2|e_?2|r_?b)"))
            s1 = find_rate(text, labeled(r"(?:σ|sigma|sd)_?(?:1|a)"))
            s2 = find_rate(text, labeled(r"(?:σ|sigma|sd)_?(?:2|b)"))
            rho = find_number(text, labeled(r"(?:ρ|rho|corr\w*)"))
            if None not in (w1, r1, r2):
                expected, variance = portfolio(w1, r1, r2, s1, s2, rho)
                if re.search(r"variance", lower) and variance is not None:
                    collector.compare("var", variance, money, RATE, "portfolio variance mismatch",
                                      aliases=("variance", "σ^2", "σp^2"))
                elif re.search(r"standard\s+deviation|risk|σ_?p", lower) and variance is not None:
                    collector.compare("σp", math.sqrt(variance), rate_rep, RATE, "portfolio σ mismatch",
                                      aliases=("sd", "sigma", "σ"))
                else:
                    collector.compare("E(Rp)", expected, rate_rep, RATE, "portfolio return mismatch",
                                      aliases=("rp", "e(r)", "return"))

        if re.search(r"\bcagr\b|compound\s+annual\s+growth", lower):
            start = find_number(text, labeled(r"(?:start\w*|begin\w*|initial|pv|bv)"))
            end = find_number(text, labeled(r"(?:end\w*|final|fv|ev)"))
            years = find_number(text, labeled(r"(?:n|t|years)"), _YEARS)
            if None not in (start, end, years) and start > 0 and end > 0 and years > 0:
                collector.compare("CAGR", (end / start) ** (1 / years) - 1, rate_rep, RATE, "CAGR mismatch")
