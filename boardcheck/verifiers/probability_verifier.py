"""
Probability Verifier
Counting, discrete distributions, normal and t probabilities, confidence intervals and sample size
"""

import math
import re
from typing import Optional, Tuple

from boardcheck.config import RATE, STANDARD, TIGHT, Tolerance
from boardcheck.records import Problem
from boardcheck.tools.distributions import (
    binomial_cdf,
    binomial_pmf,
    n_choose_k,
    n_permute_k,
    normal_cdf,
    poisson_cdf,
    poisson_pmf,
    t_star,
    t_test_p_value,
    tail_probability,
    z_star,
    z_test_p_value,
)
from boardcheck.utils.quantities import NUM, find_number, find_percent, labeled, labeled_cs, parse_number
from boardcheck.verifiers.base import CheckCollector, Verifier, reported_fraction, reported_value

# Critical values read off printed tables carry three decimals
CRITICAL = Tolerance(rtol=2e-3, atol=1e-6, abs_tol=5e-3)

_COMBINATION = re.compile(rf"(?:\bC|\bnCr)\s*\(\s*{NUM}\s*,\s*{NUM}\s*\)|{NUM}\s*C\s*{NUM}\b|{NUM}\s+choose\s+{NUM}",
                          re.IGNORECASE)
_PERMUTATION = re.compile(rf"(?:\bP|\bnPr)\s*\(\s*{NUM}\s*,\s*{NUM}\s*\)|{NUM}\s*P\s*{NUM}\b")
_EVENT = re.compile(rf"\bP\s*\(\s*X\s*(<=|>=|≤|≥|<|>|=)\s*{NUM}\s*\)", re.IGNORECASE)
_BETWEEN = re.compile(rf"between\s*{NUM}\s*and\s*{NUM}|P\s*\(\s*{NUM}\s*<=?\s*X\s*<=?\s*{NUM}\s*\)", re.IGNORECASE)
_SYMBOLS = {"≤": "<=", "≥": ">="}

_LEVEL = re.compile(rf"{NUM}\s*%\s*(?:confidence|c\.?i\b|level)", re.IGNORECASE)

_PROBABILITY_WORDS = re.compile(
    r"\bp\s*\(|probab|\barea\b|proportion\s+of|percent(?:age)?\s+of|less\s+than|greater\s+than|more\s+than|"
    r"below|above|between|exceed|at\s+(?:most|least)|cdf",
    re.IGNORECASE,
)


# -------------------------
# Reading the question
# -------------------------
def comparison(text: str) -> Tuple[str, Optional[float]]:
    """
    Event asked about: (operator, k). An explicit `P(X<=3)` wins; otherwise
    the wording picks the operator and k comes from a `k=` label.
    """
    m = _EVENT.search(text)
    if m:
        op = _SYMBOLS.get(m.group(1), m.group(1))
        return op, parse_number(m.group(2))

    lower = text.lower()
    k = find_number(text, labeled_cs("k"), labeled("x"))
    if re.search(r"at\s*most|no\s+more\s+than|or\s+fewer|or\s+less|<=|≤", lower):
        return "<=", k
    if re.search(r"at\s*least|no\s+fewer\s+than|or\s+more|>=|≥", lower):
        return ">=", k
    if re.search(r"fewer\s+than|less\s+than", lower):
        return "<", k
    if re.search(r"more\s+than|greater\s+than", lower):
        return ">", k
    return "=", k


def alternative_tail(text: str) -> Optional[str]:
    """Direction of the alternative: "greater", "less" or None for two-tailed."""
    lower = text.lower()
    if re.search(r"two[-\s]*(?:tailed|sided)|≠|!=|±|not\s+equal", lower):
        return None
    alt = re.search(r"\b(?:h1|ha|h_1|h_a)\s*:\s*[^\n<>]*?([<>])", lower)
    if alt:
        return "greater" if alt.group(1) == ">" else "less"
    if re.search(r"right[-\s]*tailed|upper[-\s]*tailed|greater", lower):
        return "greater"
    if re.search(r"left[-\s]*tailed|lower[-\s]*tailed|\bless\b", lower):
        return "less"
    return None


def confidence_level(text: str) -> float:
    """Confidence level as a fraction; 95 % when the board does not say."""
    level = find_percent(text, _LEVEL, labeled(r"(?:cl|confidence(?:\s*level)?)"))
    if level is None:
        return 0.95
    if level > 1:
        level /= 100
    return level


def _nearest(options, reported: float) -> float:
    return min(options, key=lambda o: abs(o - reported))


class ProbabilityVerifier(Verifier):
    """
    Probability and inference.

    Tails default to the exact event for discrete distributions and to a
    two-tailed p-value for tests, unless the wording says otherwise.
    """

    name = "probability"
    subject = "probability"
    method = "probability-inference"
    trigger = re.compile(
        r"\b(combinations?|permutations?|choose|ncr|npr|binomial|bernoulli|poisson|normal(?:ly)?|gaussian|"
        r"z[-\s]*scores?|t[-\s]*(?:scores?|tests?|statistic)|student'?s?\s*t|confidence\s*interval|"
        r"margin\s*of\s*error|sample\s*size|significance|p[-\s]*value|hypothesis)\b|x\s*~\s*(?:bin|pois|n)\b",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(binomial|poisson|normal|gaussian|combinations?|permutations?|choose|probability)\b",
        r"\b(confidence|margin\s*of\s*error|sample\s*size|p[-\s]*value|hypothesis|z[-\s]*score|t[-\s]*test)\b",
        r"\bp\s*\(",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        rep = reported_value(problem.final)
        if rep is None:
            return
        prob = reported_fraction(problem.final)

        self._check_counting(text, lower, rep, collector)
        self._check_discrete(text, lower, prob, collector)
        self._check_continuous(text, lower, rep, prob, collector)
        self._check_intervals(text, lower, rep, collector)

    # -------------------------
    # Counting
    # -------------------------
    def _check_counting(self, text: str, lower: str, rep: float, collector: CheckCollector) -> None:
        n = find_number(text, labeled_cs("n"))
        k = find_number(text, labeled_cs("k"), labeled_cs("r"))

        if re.search(r"\b(?:ncr|combinations?|choose)\b", lower) or _COMBINATION.search(text):
            m = _COMBINATION.search(text)
            if m:
                groups = [g for g in m.groups() if g is not None]
                n, k = parse_number(groups[0]), parse_number(groups[1])
            if n is not None and k is not None:
                collector.compare("nCr", n_choose_k(round(n), round(k)), rep, TIGHT, "nCr mismatch",
                                  aliases=("c", "combinations", "ways"), always=True)

        if re.search(r"\b(?:npr|permutations?|arrangements?)\b", lower) or _PERMUTATION.search(text):
            m = _PERMUTATION.search(text)
            if m:
                groups = [g for g in m.groups() if g is not None]
                n, k = parse_number(groups[0]), parse_number(groups[1])
            if n is not None and k is not None:
                collector.compare("nPr", n_permute_k(round(n), round(k)), rep, TIGHT, "nPr mismatch",
                                  aliases=("p", "permutations", "arrangements", "ways"), always=True)

    # -------------------------
    # Binomial and Poisson
    # -------------------------
    def _check_discrete(self, text: str, lower: str, prob: Optional[float], collector: CheckCollector) -> None:
        if prob is None:
            return
        op, k = comparison(text)
        if k is None:
            return
        k = round(k)

        if re.search(r"\bbinomial\b|\bbernoulli\b|x\s*~\s*bin", lower):
            n = find_number(text, labeled_cs("n"), labeled("trials"))
            p = find_percent(text, labeled("p"), labeled(r"(?:probability\s*of\s*success|success\s*probability)"))
            if n is not None and p is not None and 0 <= p <= 1:
                n = round(n)
                pair = (lambda i: binomial_pmf(n, i, p), lambda i: binomial_cdf(n, i, p))
                collector.compare("P_bin", tail_probability(pair, k, op), prob, RATE,
                                  "binomial probability mismatch", always=True)

        if re.search(r"\bpoisson\b|x\s*~\s*pois", lower):
            lam = find_number(text, labeled(r"(?:lambda|λ|mean\s*rate|rate|mean|mu|μ)"), labeled_cs("l"))
            if lam is not None and lam >= 0:
                pair = (lambda i: poisson_pmf(lam, i), lambda i: poisson_cdf(lam, i))
                collector.compare("P_pois", tail_probability(pair, k, op), prob, RATE,
                                  "poisson probability mismatch", always=True)

    # -------------------------
    # Normal and t
    # -------------------------
    def _check_continuous(self, text: str, lower: str, rep: float, prob: Optional[float],
                          collector: CheckCollector) -> None:
        tail = alternative_tail(text)
        testing = re.search(r"p[-\s]*value|hypothesis|\btest\b|significan|reject", lower)
        z = find_number(text, labeled("z"))
        t = find_number(text, labeled_cs("t"), labeled(r"t[-\s]*(?:stat(?:istic)?|score)"))

        if testing and prob is not None:
            if z is not None:
                collector.compare("p", z_test_p_value(z, tail), prob, RATE, "z p-value mismatch",
                                  aliases=("p-value", "p_value", "pvalue"))
            elif t is not None:
                df = find_number(text, labeled(r"(?:df|d\.f\.|degrees\s*of\s*freedom)"))
                if df is None:
                    n = find_number(text, labeled_cs("n"))
                    df = None if n is None else n - 1
                if df is not None and df >= 1:
                    collector.compare("p", t_test_p_value(t, round(df), tail), prob, RATE, "t p-value mismatch",
                                      aliases=("p-value", "p_value", "pvalue"))
            return

        if not re.search(r"\bnormal(?:ly)?\b|gaussian|z[-\s]*score|x\s*~\s*n\s*\(", lower):
            return
        mu = find_number(text, labeled(r"(?:mu|μ|mean)"))
        sigma = find_number(text, labeled(r"(?:sigma|σ|std|sd|standard\s*deviation)"))
        if mu is None or sigma is None or sigma <= 0:
            return

        between = _BETWEEN.search(text)
        if between and prob is not None:
            bounds = [parse_number(g) for g in between.groups() if g is not None]
            lo, hi = sorted(bounds[:2])
            area = normal_cdf((hi - mu) / sigma) - normal_cdf((lo - mu) / sigma)
            collector.compare("P", area, prob, RATE, "normal probability mismatch", always=True)
            return

        x = find_number(text, labeled(r"(?:x|value)"))
        if x is None:
            m = _EVENT.search(text)
            x = parse_number(m.group(2)) if m else None
        if x is None:
            return
        score = (x - mu) / sigma

        if not _PROBABILITY_WORDS.search(text) or collector.target is not None:
            collector.compare("z", score, rep, STANDARD, "z-score mismatch", aliases=("z-score", "zscore", "z_score"))
        if _PROBABILITY_WORDS.search(text) and prob is not None:
            op, _ = comparison(text)
            area = 1 - normal_cdf(score) if op in (">", ">=") else normal_cdf(score)
            collector.compare("P", area, prob, RATE, "normal probability mismatch", aliases=("probability", "area"))

    # -------------------------
    # Confidence intervals and sample size
    # -------------------------
    def _check_intervals(self, text: str, lower: str, rep: float, collector: CheckCollector) -> None:
        level = confidence_level(text)
        crit_z = z_star(level)
        n = find_number(text, labeled_cs("n"), labeled(r"sample\s*size"))
        sigma = find_number(text, labeled(r"(?:sigma|σ|population\s*(?:sd|standard\s*deviation))"))
        s = find_number(text, labeled_cs("s"), labeled(r"(?:sd|std|sample\s*(?:sd|standard\s*deviation))"))
        p_hat = find_percent(text, labeled(r"(?:p̂|p\^|p_?hat|sample\s*proportion)"))
        if p_hat is None and "proportion" in lower:
            p_hat = find_percent(text, labeled("p"))

        if re.search(r"confidence\s*interval|\bci\b|margin\s*of\s*error", lower) and n is not None and n > 0 \
                and not re.search(r"sample\s*size|how\s+(?:many|large)", lower):
            center = None
            if p_hat is not None and 0 <= p_hat <= 1:
                half = crit_z * math.sqrt(p_hat * (1 - p_hat) / n)
                center = p_hat
                name = "ME_prop"
            else:
                center = find_number(text, labeled(r"(?:x̄|xbar|x_bar|sample\s*mean|mean)"))
                if sigma is not None:
                    half = crit_z * sigma / math.sqrt(n)
                    name = "ME_mean_z"
                elif s is not None:
                    crit = t_star(level, round(n) - 1) if n < 30 else crit_z
                    half = crit * s / math.sqrt(n)
                    name = "ME_mean_t"
                else:
                    return
            options = [half]
            if center is not None:
                options += [center - half, center + half]
            collector.compare(name, _nearest(options, rep), rep, CRITICAL, "margin of error mismatch",
                              aliases=("me", "moe", "e", "margin", "ci"), always=True)
            return

        if re.search(r"sample\s*size|how\s+(?:many|large)\s+(?:a\s+)?sample", lower):
            margin = find_percent(text, labeled(r"(?:margin\s*of\s*error|margin|moe|me)"), labeled_cs("E"))
            if margin is None or margin <= 0:
                return
            if sigma is not None or (s is not None and p_hat is None):
                spread = sigma if sigma is not None else s
                needed = (crit_z * spread / margin) ** 2
                name = "n_mean"
            else:
                p = p_hat if p_hat is not None else find_percent(text, labeled("p"))
                if p is None or not 0 <= p <= 1:
                    p = 0.5
                needed = crit_z * crit_z * p * (1 - p) / (margin * margin)
                name = "n_prop"
            collector.compare(name, _nearest((needed, math.ceil(needed - 1e-9)), rep), rep, CRITICAL,
                              "sample size mismatch", aliases=("n", "sample size"), always=True)
