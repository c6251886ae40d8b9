"""
Verifier Base
Shared plugin contract and the check collector every domain verifier reports through
"""

import logging
import math
import re
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from boardcheck.config import STANDARD, Tolerance
from boardcheck.records import Check, Problem, Quantity, Verification
from boardcheck.tools.calculator import Calculator
from boardcheck.utils.quantities import (
    PatternLike,
    approx_equal,
    count_occurrences,
    final_label,
    find_value,
    parse_number,
    parse_percent_or_number,
    rel_close,
)
from boardcheck.utils.text_normalizer import gather_problem_text, normalize_text
from boardcheck.utils.units import TEMPERATURE_HINTS, UNIT_HINTS, find_in_base, scale_factor, to_kelvin

logger = logging.getLogger(__name__)


# -------------------------
# Reported answer helpers
# -------------------------
def _answer_part(final: Optional[str]) -> str:
    text = normalize_text(final)
    if "=" in text:
        text = text.rsplit("=", 1)[1]
    return text.strip()


def reported_value(final: Optional[str]) -> Optional[float]:
    """
    Numeric value of the final answer: the right-hand side of the last `=`,
    evaluated as an expression when possible (`3/4`, `2*sqrt(2)`).
    """
    part = _answer_part(final)
    if not part:
        return None
    value = Calculator.evaluate(part)
    if value is not None:
        return value
    return parse_number(part)


def reported_fraction(final: Optional[str]) -> Optional[float]:
    """Like reported_value, but `12.5%` reads as 0.125."""
    part = _answer_part(final)
    if "%" in part:
        return parse_percent_or_number(part)
    return reported_value(final)


def reported_rate(final: Optional[str]) -> Optional[float]:
    """Rate as a fraction: `12.5%`, `0.125` and a bare `12.5` all read as 0.125."""
    part = _answer_part(final)
    if "%" in part:
        return parse_percent_or_number(part)
    value = reported_value(final)
    if value is not None and abs(value) > 1:
        return value / 100
    return value


def reported_in_base(final: Optional[str], kind: str) -> Optional[float]:
    """Reported value scaled by its unit prefix (`5 mA` -> 0.005)."""
    part = _answer_part(final)
    quantity = find_value(part, r"(-?\d*\.?\d+(?:e[+-]?\d+)?)", UNIT_HINTS[kind])
    if quantity is None:
        return None
    return quantity.value * scale_factor(kind, quantity.unit)


def reported_quantity(final: Optional[str], kind: str) -> Optional[Quantity]:
    part = _answer_part(final)
    hints = TEMPERATURE_HINTS if kind == "temperature" else UNIT_HINTS.get(kind, ())
    return find_value(part, r"(-?\d*\.?\d+(?:e[+-]?\d+)?)", hints)


def reported_kelvin(final: Optional[str], default_unit: Optional[str] = None) -> Optional[float]:
    """Reported temperature in kelvin; a bare number is read in `default_unit`."""
    quantity = reported_quantity(final, "temperature")
    if quantity is None:
        return None
    return to_kelvin(quantity.value, quantity.unit or default_unit)


def is_finite(*values) -> bool:
    return all(v is not None and isinstance(v, (int, float)) and math.isfinite(v) for v in values)


def disk_area(diameter: Optional[float]) -> Optional[float]:
    """Cross-section of a circle from its diameter."""
    if diameter is None:
        return None
    return math.pi * diameter * diameter / 4


_ASK = re.compile(
    r"\b(?:find|calculate|compute|determine|what\s+(?:is|are|was)|how\s+(?:much|many|far|long|fast|high)|"
    r"evaluate|estimate|solve\s+for|get)\b",
    re.IGNORECASE,
)


def asked_for(text: str, options: Sequence[Tuple[str, str]], fallback: bool = True) -> Optional[str]:
    """
    Name of the quantity a problem asks for. `options` are (pattern, name)
    pairs; the earliest mention after the first question verb wins, else
    (with `fallback`) the earliest mention anywhere.
    """
    ask = _ASK.search(text)
    start = ask.start() if ask else 0
    best = None
    first = None
    for pattern, name in options:
        for m in re.finditer(pattern, text, re.IGNORECASE):
            if first is None or m.start() < first[0]:
                first = (m.start(), name)
            if ask and m.start() > start and (best is None or m.start() < best[0]):
                best = (m.start(), name)
                break
    if best:
        return best[1]
    if fallback and first:
        return first[1]
    return None


def find_in_units(text: str, kind: Optional[str], *labels: PatternLike) -> Optional[float]:
    """First labeled value among `labels`, converted to the base unit of `kind`."""
    for label in labels:
        if kind is None:
            m = find_value(text, label)
            value = None if m is None else m.value
        else:
            value = find_in_base(text, label, kind)
        if value is not None:
            return value
    return None


# -------------------------
# Check collector
# -------------------------
class CheckCollector:
    """
    Accumulates checks for one plugin run.

    When the reported answer is labeled (`I = 5 A`), only checks whose target
    names include that label are kept, so a correct current is not failed
    by an unrelated power formula on the same board. If the label names
    none of the recorded checks, all of them are kept.
    """

    def __init__(self, subject: str, method: str, final: Optional[str] = None):
        self.subject = subject
        self.method = method
        label = final_label(final)
        self.target = label.lower() if label else None
        self.checks: List[Check] = []
        self.unlabeled: List[Check] = []

    def focus(self, name: Optional[str]) -> None:
        """Target `name` when the reported answer carries no label of its own."""
        if self.target is None and name:
            self.target = name.lower()

    def wants(self, name: str, aliases: Iterable[str] = ()) -> bool:
        """True when a check on `name` would be kept for this answer."""
        if self.target is None:
            return True
        names = {name.lower()} | {a.lower() for a in aliases}
        return self.target in names

    def compare(self, name: str, computed: Optional[float], reported: Optional[float],
                tol: Tolerance = STANDARD, reason: Optional[str] = None,
                aliases: Sequence[str] = (), always: bool = False) -> Optional[Check]:
        """
        Record `computed` vs `reported`. Returns the check, or None when an
        input is missing or the check does not target the reported label.
        `always` skips the label filter for checks that are the whole answer.
        """
        if not is_finite(computed, reported):
            return None
        ok = rel_close(computed, reported, tol.rtol, tol.atol) or approx_equal(computed, reported, tol.abs_tol)
        check = Check(
            label=f"{name}={reported:g}",
            ok=ok,
            lhs=computed,
            rhs=reported,
            reason=None if ok else (reason or f"{name} mismatch"),
        )
        if not always and not self.wants(name, aliases):
            self.unlabeled.append(check)
            return None
        self.checks.append(check)
        return check

    def add(self, check: Check) -> Check:
        self.checks.append(check)
        return check

    def fail(self, name: str, reason: str, reported: Optional[float] = None) -> Check:
        return self.add(Check(label=name, ok=False, rhs=reported, reason=reason))

    def __len__(self) -> int:
        return len(self.checks)

    @property
    def recorded(self) -> int:
        """Checks recorded so far, including those filtered out by the label."""
        return len(self.checks) + len(self.unlabeled)

    def verification(self) -> Optional[Verification]:
        checks = self.checks or self.unlabeled
        return Verification.from_checks(self.subject, self.method, checks)


# -------------------------
# Plugin contract
# -------------------------
class Verifier:
    """
    Base class for domain verifiers.

    Subclasses set `name`, `subject`, `method`, a `trigger` regex that decides
    applicability, `keywords` used for ranking, and implement `check()`.
    """

    name: str = ""
    subject: str = ""
    method: str = ""
    trigger: Optional[Pattern] = None
    keywords: Tuple[str, ...] = ()

    def matches(self, problem_text: str) -> bool:
        if self.trigger is None:
            return False
        return bool(self.trigger.search(problem_text))

    def score(self, problem_text: str) -> int:
        """Keyword density: total matches of the `keywords` patterns in the lower-cased text."""
        if not self.keywords:
            return 0
        return count_occurrences(problem_text.lower(), self.keywords)

    def problem_text(self, problem: Problem) -> str:
        return gather_problem_text(problem.question, problem.raw_text, problem.steps)

    def run(self, problem: Problem) -> Optional[Verification]:
        text = self.problem_text(problem)
        if not text or not self.matches(text):
            return None
        collector = CheckCollector(self.subject, self.method, problem.final)
        self.check(problem, text, collector)
        verification = collector.verification()
        if verification is not None:
            logger.debug("%s recorded %d check(s)", self.name, len(verification.checks))
        return verification

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        raise NotImplementedError
