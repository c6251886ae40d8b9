"""
Calculus Verifier
Numeric checks for integrals, derivatives, limits and critical points
"""

import re
from typing import Callable, List, Optional, Tuple

from boardcheck.config import LIMIT_STEPS, NUMERIC, SAMPLE_AGREEMENT, SAMPLE_POINTS, SIMPSON_INTERVALS
from boardcheck.records import Check, Problem
from boardcheck.tools.calculator import Calculator
from boardcheck.utils.candidates import candidates_from_final
from boardcheck.utils.quantities import NUM, approx_equal, rel_close
from boardcheck.utils.text_normalizer import normalize_text
from boardcheck.verifiers.base import CheckCollector, Verifier, reported_value

Function = Callable[[float], Optional[float]]

# Expressions end at the first clause boundary
_STOP = re.compile(r"\s*(?:[;?]|,\s|\.\s|\.$|\s(?:at|from|where|for|when|if|and|as)\s|\bdx\b|$)", re.IGNORECASE)

_DEF_INTEGRAL_SUB = re.compile(rf"∫\s*_?\s*\{{?\s*{NUM}\s*\}}?\s*\^\s*\{{?\s*{NUM}\s*\}}?\s*(.+?)\s*d\s*x", re.IGNORECASE)
_DEF_INTEGRAL_WORDS = re.compile(rf"integral\s+of\s+(.+?)\s*(?:dx\s*)?from\s*{NUM}\s*to\s*{NUM}", re.IGNORECASE)
_DEF_INTEGRAL_TAIL = re.compile(rf"∫\s*(.+?)\s*d\s*x\s*from\s*{NUM}\s*to\s*{NUM}", re.IGNORECASE)
_INDEF_INTEGRAL = re.compile(r"∫(?!\s*_?\s*\{?\s*-?[\d.]+\s*\}?\s*\^)\s*(.+?)\s*d\s*x", re.IGNORECASE)
_INDEF_WORDS = re.compile(r"(?:indefinite\s+integral|antiderivative)\s+of\s+(.+)", re.IGNORECASE)
_FUNCTION_DEF = re.compile(r"\b(?:f\s*\(\s*x\s*\)|y)\s*=\s*(.+)", re.IGNORECASE)
_D_DX = re.compile(r"d\s*/\s*dx\s*(?:of\s+)?(.+)", re.IGNORECASE)
_AT_POINT = re.compile(rf"\bat\s*x\s*=\s*{NUM}", re.IGNORECASE)
_PRIME_AT = re.compile(rf"f'\s*\(\s*{NUM}\s*\)")
_LIMIT_BRACES = re.compile(r"\blim\s*_?\s*\{?\s*x\s*(?:->|→|-->)\s*(-?\d*\.?\d+)\s*\}?\s*(?:of\s+)?(.+)", re.IGNORECASE)
_LIMIT_WORDS = re.compile(rf"limit\s+as\s+x\s*(?:->|→|approaches|tends\s+to)\s*{NUM}\s*,?\s*of\s+(.+)", re.IGNORECASE)
_LIMIT_OF_FIRST = re.compile(rf"limit\s+of\s+(.+?)\s+as\s+x\s*(?:->|→|approaches|tends\s+to)\s*{NUM}", re.IGNORECASE)


def clause(text: str) -> str:
    """Cut an expression at the first clause boundary."""
    m = _STOP.search(text)
    return text[:m.start()].strip() if m else text.strip()


# -------------------------
# Numerical methods
# -------------------------
def simpson(f: Function, a: float, b: float, n: int = SIMPSON_INTERVALS) -> Optional[float]:
    """Composite Simpson's rule; None if f is undefined anywhere on the grid."""
    if n % 2:
        n += 1
    h = (b - a) / n
    total = 0.0
    for i in range(n + 1):
        fx = f(a + i * h)
        if fx is None:
            return None
        weight = 1 if i in (0, n) else (4 if i % 2 else 2)
        total += weight * fx
    return h / 3 * total


def derivative(f: Function, x0: float) -> Optional[float]:
    h = max(1e-5, abs(x0) * 1e-5)
    right, left = f(x0 + h), f(x0 - h)
    if right is None or left is None:
        return None
    return (right - left) / (2 * h)


def second_derivative(f: Function, x0: float) -> Optional[float]:
    h = max(1e-4, abs(x0) * 1e-4)
    right, mid, left = f(x0 + h), f(x0), f(x0 - h)
    if None in (right, mid, left):
        return None
    return (right - 2 * mid + left) / (h * h)


def two_sided_limit(f: Function, a: float) -> Optional[float]:
    values = []
    for h in LIMIT_STEPS:
        for x in (a - h, a + h):
            v = f(x)
            if v is not None:
                values.append(v)
    if len(values) < 2:
        return None
    return sum(values) / len(values)


def sample_agreement(lhs: Function, rhs: Function) -> Tuple[int, int]:
    """(agreeing, usable) sample counts over the fixed sample grid."""
    agree = total = 0
    for x in SAMPLE_POINTS:
        a, b = lhs(x), rhs(x)
        if a is None or b is None:
            continue
        total += 1
        if rel_close(a, b, 2e-2, 1e-4) or approx_equal(a, b, 1e-3):
            agree += 1
    return agree, total


def _strip_answer(final: str) -> str:
    text = normalize_text(final)
    text = re.sub(r"\+\s*c\b\s*$", "", text, flags=re.IGNORECASE)
    text = re.sub(r"constant\s+of\s+integration", "", text, flags=re.IGNORECASE)
    if "=" in text:
        text = text.rsplit("=", 1)[1]
    return text.strip()


def _mentions_x(expr: str) -> bool:
    return "x" in Calculator.expression_variables(expr)


class CalculusVerifier(Verifier):
    """
    Bounded numerical checks: nothing is solved symbolically.

    Integrals use Simpson's rule, derivatives central differences, and
    expression answers are compared with a reference function by sampling.
    """

    name = "calculus"
    subject = "calculus"
    method = "calculus-numeric"
    trigger = re.compile(
        r"\b(derivative|differentiate|d/dx|dy/dx|integral|integrate|antiderivative|limit|lim|critical|"
        r"maximum|minimum|max|min|stationary)\b|∫|f'",
        re.IGNORECASE,
    )
    keywords = (r"∫", r"\bd/dx\b", r"\blim\b", r"\bdy/dx\b", r"\b(derivative|integral|limit|critical)\b")

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        final = problem.final or ""
        reported = reported_value(final)

        definite = self._definite_integral(text)
        if definite is not None:
            integrand, a, b = definite
            f = Calculator.compile_function(integrand)
            value = simpson(f, a, b) if f else None
            collector.compare(f"∫_{a:g}^{b:g} {integrand} dx", value, reported, NUMERIC,
                              "definite integral mismatch", always=True)
            return

        indefinite = self._indefinite_integral(text)
        if indefinite is not None:
            self._antiderivative(indefinite, final, collector)
            return

        limit = self._limit(text)
        if limit is not None:
            expr, a = limit
            f = Calculator.compile_function(expr)
            estimate = two_sided_limit(f, a) if f else None
            collector.compare(f"lim x->{a:g}", estimate, reported, NUMERIC, "limit mismatch", always=True)
            return

        lower = text.lower()
        if re.search(r"\b(critical|stationary|maximum|minimum|max|min|optimi[sz]e)\b", lower):
            if self._critical_points(text, lower, final, collector):
                return

        self._derivative(text, final, reported, collector)

    # -------------------------
    # Parsing
    # -------------------------
    @staticmethod
    def _definite_integral(text: str) -> Optional[Tuple[str, float, float]]:
        m = _DEF_INTEGRAL_SUB.search(text)
        if m:
            return m.group(3).strip(), float(m.group(1)), float(m.group(2))
        m = _DEF_INTEGRAL_WORDS.search(text)
        if m:
            return m.group(1).strip(), float(m.group(2)), float(m.group(3))
        m = _DEF_INTEGRAL_TAIL.search(text)
        if m:
            return m.group(1).strip(), float(m.group(2)), float(m.group(3))
        return None

    @staticmethod
    def _indefinite_integral(text: str) -> Optional[str]:
        m = _INDEF_INTEGRAL.search(text)
        if m:
            return m.group(1).strip()
        m = _INDEF_WORDS.search(text)
        if m:
            return clause(m.group(1))
        return None

    @staticmethod
    def _limit(text: str) -> Optional[Tuple[str, float]]:
        m = _LIMIT_BRACES.search(text)
        if m:
            return clause(m.group(2)), float(m.group(1))
        m = _LIMIT_WORDS.search(text)
        if m:
            return clause(m.group(2)), float(m.group(1))
        m = _LIMIT_OF_FIRST.search(text)
        if m:
            return clause(m.group(1)), float(m.group(2))
        return None

    @staticmethod
    def _function(text: str) -> Optional[str]:
        m = _FUNCTION_DEF.search(text)
        if m:
            return clause(m.group(1))
        m = _D_DX.search(text)
        if m:
            expr = clause(m.group(1))
            if expr.startswith("(") and expr.endswith(")"):
                expr = expr[1:-1]
            return expr
        return None

    # -------------------------
    # Checks
    # -------------------------
    def _antiderivative(self, integrand: str, final: str, collector: CheckCollector) -> None:
        answer = _strip_answer(final)
        f = Calculator.compile_function(integrand)
        big_f = Calculator.compile_function(answer) if answer and _mentions_x(answer) else None
        if f is None or big_f is None:
            return
        agree, total = sample_agreement(lambda x: derivative(big_f, x), f)
        if total == 0:
            return
        ok = agree / total >= SAMPLE_AGREEMENT
        collector.add(Check(
            label=f"d/dx(F) matches integrand on {agree}/{total} samples",
            ok=ok,
            reason=None if ok else "antiderivative check failed",
        ))

    def _derivative(self, text: str, final: str, reported: Optional[float],
                    collector: CheckCollector) -> None:
        expr = self._function(text)
        if not expr:
            return
        f = Calculator.compile_function(expr)
        if f is None:
            return

        at = _AT_POINT.search(text) or _PRIME_AT.search(text) or _AT_POINT.search(normalize_text(final))
        answer = _strip_answer(final)
        if at is not None and not _mentions_x(answer):
            x0 = float(at.group(1))
            collector.compare(f"f'({x0:g})", derivative(f, x0), reported, NUMERIC,
                              "derivative at point mismatch", always=True)
            return

        g = Calculator.compile_function(answer) if answer and _mentions_x(answer) else None
        if g is None:
            return
        agree, total = sample_agreement(lambda x: derivative(f, x), g)
        if total == 0:
            return
        ok = agree / total >= SAMPLE_AGREEMENT
        collector.add(Check(
            label=f"f'(x) expression matches numeric on {agree}/{total} samples",
            ok=ok,
            reason=None if ok else "derivative expression disagrees with numeric check",
        ))

    def _critical_points(self, text: str, lower: str, final: str, collector: CheckCollector) -> bool:
        m = _FUNCTION_DEF.search(text)
        if not m:
            return False
        f = Calculator.compile_function(clause(m.group(1)))
        if f is None:
            return False

        xs: List[float] = []
        for candidate in candidates_from_final(final, ("x",)):
            value = candidate.value("x")
            if value is not None and value not in xs:
                xs.append(value)

        want_max = bool(re.search(r"\b(maximum|max)\b", lower))
        want_min = bool(re.search(r"\b(minimum|min)\b", lower))
        for x0 in xs:
            slope = derivative(f, x0)
            if slope is None:
                continue
            stationary = abs(slope) <= 1e-3
            reasons = [] if stationary else ["f'(x*) not ~ 0"]
            curvature = second_derivative(f, x0) if (want_max or want_min) else None
            if curvature is not None:
                if want_max and not curvature < -1e-6:
                    reasons.append("f''(x*) not < 0")
                elif want_min and not want_max and not curvature > 1e-6:
                    reasons.append("f''(x*) not > 0")
            collector.add(Check(
                label=f"critical x={x0:g}",
                ok=not reasons,
                lhs=slope,
                rhs=0.0,
                reason="; ".join(reasons) or None,
            ))
        return bool(xs)
