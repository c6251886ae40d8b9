"""
Algebra Verifier
Checks reported roots by substituting them into the board's equation
"""

import re
from typing import List, Optional, Tuple

from boardcheck.config import RESIDUAL_TOL
from boardcheck.records import Check, Problem
from boardcheck.tools.calculator import CONSTANTS, FUNCTIONS, Calculator
from boardcheck.utils.candidates import candidates_from_final
from boardcheck.utils.text_normalizer import normalize_text
from boardcheck.verifiers.base import CheckCollector, Verifier


_WORD = re.compile(r"[A-Za-z_]{2,}")
_SINGLE_LETTER = re.compile(r"(?<![A-Za-z_])([A-Za-z])(?![A-Za-z_(])")


def _is_math(fragment: str) -> bool:
    if not fragment.strip() or ":" in fragment:
        return False
    return all(w in FUNCTIONS or w in CONSTANTS for w in _WORD.findall(fragment))


def _trim_side(side: str, leading: bool) -> str:
    """
    Drop surrounding prose ("Solve 2x+3", "11, find x") until only the math
    expression is left.
    """
    tokens = side.strip().rstrip(".?!").split()
    if leading:
        for i in range(len(tokens)):
            candidate = " ".join(tokens[i:])
            if _is_math(candidate):
                return candidate
    else:
        for j in range(len(tokens), 0, -1):
            candidate = " ".join(tokens[:j]).rstrip(",;")
            if _is_math(candidate):
                return candidate
    return ""


def equation_source(problem: Problem) -> str:
    """First step `before` containing `=`, else the question, else the raw text."""
    for step in problem.steps:
        if step.before and "=" in step.before:
            return step.before
    return problem.question or problem.raw_text or ""


def split_equation(text: str) -> Optional[Tuple[str, str]]:
    line = next((ln for ln in normalize_text(text).split("\n") if "=" in ln), "")
    if line.count("=") < 1:
        return None
    lhs, rhs = line.split("=", 1)
    rhs = rhs.split("=", 1)[0]
    lhs, rhs = _trim_side(lhs, leading=True), _trim_side(rhs, leading=False)
    if not lhs or not rhs:
        return None
    return lhs, rhs


def pick_variable(equation: str) -> Optional[str]:
    """Prefer x, then y, else the first single-letter name."""
    found: List[str] = []
    for m in _SINGLE_LETTER.finditer(equation):
        letter = m.group(1)
        if letter == "e" or letter in found:
            continue
        found.append(letter)
    for preferred in ("x", "y"):
        if preferred in found:
            return preferred
    return found[0] if found else None


class AlgebraVerifier(Verifier):
    """
    Substitutes every candidate from the final answer into `lhs = rhs`.

    Domain problems (x = 0 in 1/x, sqrt of a negative) fail the candidate with
    the evaluator's reason instead of a residual.
    """

    name = "algebra"
    subject = "algebra"
    method = "algebra-substitution"
    trigger = re.compile(r"=")
    keywords = (r"=", r"\bsolve\b", r"\bx\b", r"\by\b", r"\^2\b")

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        sides = split_equation(equation_source(problem))
        if sides is None:
            return
        lhs, rhs = sides
        variable = pick_variable(f"{lhs} {rhs}") or "x"
        names = Calculator.expression_variables(f"({lhs})-({rhs})") or [variable]
        ordered = [variable] + [n for n in names if n != variable]

        for candidate in candidates_from_final(problem.final, ordered):
            if candidate.literal is not None:
                continue
            values = dict(candidate.assignment)
            if variable not in values:
                value = candidate.value(variable)
                if value is None:
                    continue
                values = {variable: value}

            left = Calculator.inspect(lhs, values)
            right = Calculator.inspect(rhs, values)
            issue = left.issue or right.issue
            if issue:
                collector.add(Check(label=candidate.label, ok=False, reason=issue))
                continue
            if left.value is None or right.value is None:
                collector.add(Check(label=candidate.label, ok=False, reason="invalid expression"))
                continue

            ok = abs(left.value - right.value) <= RESIDUAL_TOL
            collector.add(Check(
                label=candidate.label,
                ok=ok,
                lhs=left.value,
                rhs=right.value,
                reason=None if ok else "residual not zero",
            ))
