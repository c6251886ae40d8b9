"""
Statistics Verifier
Recomputes descriptive statistics for a data list written on the board
"""

import re
from collections import Counter
from typing import List, Optional, Tuple

import numpy as np

from boardcheck.config import LOOSE, STANDARD
from boardcheck.records import Problem
from boardcheck.utils.quantities import extract_number_list
from boardcheck.verifiers.base import CheckCollector, Verifier, asked_for, reported_value

_HAS_LIST = re.compile(r"\[[^\]]*\d|\b(?:data(?:\s*set)?|numbers?|values?|observations?|scores?)\s*[:\-]",
                       re.IGNORECASE)

_TARGETS = (
    (r"\b(?:mean|average)\b", "mean"),
    (r"\bmedian\b", "median"),
    (r"\bmode\b", "mode"),
    (r"\brange\b", "range"),
    (r"\bvariance\b", "variance"),
    (r"\bstandard\s*deviation\b|\bstd\b|\bs\.?d\.?\b", "std"),
)

_ALIASES = {
    "mean": ("average", "avg", "x̄", "xbar", "x_bar", "μ", "mu"),
    "median": ("med", "q2"),
    "mode": ("mo",),
    "range": ("r",),
    "variance": ("var", "s²", "σ²", "s^2", "σ^2", "sigma^2"),
    "std": ("sd", "s", "σ", "sigma", "stdev", "std_dev"),
}


def modes(data: List[float]) -> List[float]:
    """Every most-frequent value; empty when no value repeats."""
    counts = Counter(data)
    top = max(counts.values())
    if top < 2:
        return []
    return [value for value, n in counts.items() if n == top]


def spread(data: np.ndarray, squared: bool) -> Tuple[float, float]:
    """(population, sample) variance or standard deviation."""
    if squared:
        return float(np.var(data, ddof=0)), float(np.var(data, ddof=1))
    return float(np.std(data, ddof=0)), float(np.std(data, ddof=1))


def nearest(options, reported: float) -> Optional[float]:
    options = [o for o in options if o is not None]
    if not options:
        return None
    return min(options, key=lambda o: abs(o - reported))


class StatisticsVerifier(Verifier):
    """
    Descriptive statistics over a bracketed or labeled data list.

    Only the statistic the answer names (or the question asks for) is
    checked; an unnamed answer on a board that asks for nothing specific is
    read as the mean.
    """

    name = "statistics"
    subject = "stats"
    method = "stats-recompute"
    trigger = re.compile(
        r"\b(mean|average|median|mode|range|variance|standard\s*deviation|std|data\s*set)\b",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(mean|average|median|mode|variance|standard\s*deviation)\b",
        r"\bdata(?:\s*set)?\s*[:\-]|\[",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        rep = reported_value(problem.final)
        if rep is None or not _HAS_LIST.search(text):
            return

        data = extract_number_list(text)
        if len(data) < 2:
            return
        values = np.asarray(data, dtype=float)

        collector.focus(asked_for(text, _TARGETS) or "mean")

        if collector.wants("mean", _ALIASES["mean"]):
            collector.compare("mean", float(np.mean(values)), rep, LOOSE, "mean mismatch",
                              aliases=_ALIASES["mean"])

        if collector.wants("median", _ALIASES["median"]):
            collector.compare("median", float(np.median(values)), rep, STANDARD, "median mismatch",
                              aliases=_ALIASES["median"])

        if collector.wants("mode", _ALIASES["mode"]):
            found = modes(data)
            if found:
                collector.compare("mode", nearest(found, rep), rep, STANDARD, "mode mismatch",
                                  aliases=_ALIASES["mode"])

        if collector.wants("range", _ALIASES["range"]):
            collector.compare("range", float(np.ptp(values)), rep, STANDARD, "range mismatch",
                              aliases=_ALIASES["range"])

        if collector.wants("variance", _ALIASES["variance"]):
            collector.compare("variance", nearest(spread(values, squared=True), rep), rep, LOOSE,
                              "variance mismatch (neither population nor sample)",
                              aliases=_ALIASES["variance"])

        if collector.wants("std", _ALIASES["std"]):
            collector.compare("std", nearest(spread(values, squared=False), rep), rep, LOOSE,
                              "standard deviation mismatch (neither population nor sample)",
                              aliases=_ALIASES["std"])
