"""
Statics Verifier
Planar force resultants, equilibrium, moments, friction limits and simple beam reactions
"""

import math
import re
from typing import List, Tuple

from boardcheck.config import G_ENGINEERING, LOOSE
from boardcheck.records import Check, Problem
from boardcheck.utils.quantities import NUM, final_label, labeled, labeled_cs, parse_number
from boardcheck.utils.units import to_radians
from boardcheck.verifiers.base import CheckCollector, Verifier, find_in_units, reported_in_base, reported_value

_EQUILIBRIUM_TOL = 1e-3

_COMPONENT_X = re.compile(rf"(?<![\w.])F\w*?x\s*=\s*{NUM}", re.IGNORECASE)
_COMPONENT_Y = re.compile(rf"(?<![\w.])F\w*?y\s*=\s*{NUM}", re.IGNORECASE)
_POLAR_AT = re.compile(rf"(?<![\w.])F(\d*)\s*=\s*{NUM}\s*(?:k?n\b)?\s*(?:at|@|,)\s*{NUM}\s*(°|deg\w*|rad\w*)?",
                       re.IGNORECASE)
_POLAR_LABEL = re.compile(rf"(?<![\w.])F(\d*)\s*=\s*{NUM}[^\n]*?(?:θ|theta|angle)\1\s*=\s*{NUM}\s*(°|deg\w*|rad\w*)?",
                          re.IGNORECASE)


def _angle(value: float, unit: str) -> float:
    """Board angles are degrees unless marked as radians."""
    if unit and unit.lower().startswith("rad"):
        return value
    return to_radians(value, "°")


def component_forces(text: str) -> Tuple[float, float, int]:
    """(ΣFx, ΣFy, count) over every `F..x=` / `F..y=` label."""
    fx = [parse_number(m.group(1)) for m in _COMPONENT_X.finditer(text)]
    fy = [parse_number(m.group(1)) for m in _COMPONENT_Y.finditer(text)]
    fx = [v for v in fx if v is not None]
    fy = [v for v in fy if v is not None]
    return sum(fx), sum(fy), len(fx) + len(fy)


def polar_forces(text: str) -> List[Tuple[float, float]]:
    """(magnitude, angle in radians from +x) for forces written with a direction."""
    found = []
    seen = set()
    for pattern in (_POLAR_AT, _POLAR_LABEL):
        for m in pattern.finditer(text):
            if m.group(1) in seen:
                continue
            magnitude, angle = parse_number(m.group(2)), parse_number(m.group(3))
            if magnitude is None or angle is None:
                continue
            seen.add(m.group(1))
            found.append((magnitude, _angle(angle, m.group(4) or "")))
    return found


class StaticsVerifier(Verifier):
    """
    Rigid bodies in the plane.

    Forces may be given as components (`F1x=`, `F1y=`) or in polar form
    (`F1=100 N at 30°`); angles are measured counter-clockwise from +x.
    """

    name = "statics"
    subject = "statics"
    method = "statics-2d"
    trigger = re.compile(
        r"Σ[fm]|\b(sum\s*of\s*forces|resultant|equilibrium|free\s*body|fbd|moment|torque|reactions?|support|"
        r"friction|normal\s*force|pin|roller|simply\s*supported|statics?)\b|(?<![\w.])F\w*?[xy]\s*=",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(resultant|equilibrium|free\s*body|reactions?|simply\s*supported|statics|moment)\b",
        r"σf|σm|\bf\w*?[xy]\s*=",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        final = problem.final
        rep = reported_value(final)
        newtons = reported_in_base(final, "force")

        sum_x, sum_y, components = component_forces(text)
        polar = polar_forces(text)
        for magnitude, angle in polar:
            sum_x += magnitude * math.cos(angle)
            sum_y += magnitude * math.sin(angle)
        resultant = math.hypot(sum_x, sum_y)

        if components or polar:
            if re.search(r"\b(?:resultant|net)\s*force|\bresultant\b|\|r\|", lower):
                collector.compare("R", resultant, newtons, LOOSE, "resultant mismatch",
                                  aliases=("|r|", "f_net", "fnet", "f_r", "fr"))
            if re.search(r"equilibrium|σf\s*=\s*0", lower):
                ok = resultant <= _EQUILIBRIUM_TOL
                collector.add(Check(label="ΣF≈0", ok=ok, lhs=resultant, rhs=0.0,
                                    reason=None if ok else "not in equilibrium (ΣF≠0)"))

        if rep is None:
            return

        # Moment of a force about a point
        if re.search(r"\bmoment\b|\btorque\b|σm", lower):
            F = find_in_units(text, "force", labeled_cs("F"), labeled("force"))
            d = find_in_units(text, "length", labeled_cs("d"), labeled_cs("r"), labeled(r"(?:lever\s*)?arm"),
                              labeled("distance"))
            theta = find_in_units(text, "angle", labeled(r"(?:θ|theta|angle)"))
            if F is not None and d is not None:
                moment = F * d * math.sin(theta) if theta is not None else F * d
                collector.compare("M", moment, reported_in_base(final, "moment"), LOOSE, "moment mismatch",
                                  aliases=("τ", "tau", "torque", "moment"))

        # Weight
        m = find_in_units(text, "mass", labeled_cs("m"), labeled("mass"))
        g = find_in_units(text, None, labeled_cs("g")) or G_ENGINEERING
        if m is not None and re.search(r"\bweight\b|w\s*=\s*m\s*\*?\s*g", lower):
            collector.compare("W", m * g, newtons, LOOSE, "W=mg mismatch", aliases=("weight", "fg"))

        # Dry friction
        mu = find_in_units(text, None, labeled(r"(?:μ|mu)(?:_?s)?"), labeled(r"coefficient\s*of\s*(?:static\s*)?friction"))
        if mu is not None and re.search(r"friction|μ|\bmu\b", lower):
            normal = find_in_units(text, "force", labeled_cs("N"), labeled(r"normal\s*force"))
            if normal is None and m is not None:
                normal = m * g
            if normal is not None:
                limit = mu * normal
                if re.search(r"\bmax\w*|limit\w*|threshold|impending", lower):
                    collector.compare("F_max", limit, newtons, LOOSE, "μN mismatch",
                                      aliases=("f", "f_f", "ff", "friction"))
                else:
                    required = find_in_units(text, "force", labeled(r"F_?(?:req|required|applied|a)?"))
                    if required is not None:
                        ok = required <= limit + 1e-6
                        collector.add(Check(label="no-slip", ok=ok, lhs=required, rhs=limit,
                                            reason=None if ok else "required friction exceeds μN"))

        # Simply supported beam with one point load
        if re.search(r"simply\s*supported|pin\b.*roller|reactions?", lower):
            L = find_in_units(text, "length", labeled_cs("L"), labeled("span"))
            a = find_in_units(text, "length", labeled_cs("a"), labeled_cs("x"))
            W = find_in_units(text, "force", labeled_cs("W"), labeled_cs("P"), labeled("load"))
            if None not in (L, a, W) and L > 0 and 0 <= a <= L:
                rb = W * a / L
                ra = W - rb
                label = (final_label(final) or "").lower()
                asks_b = bool(re.search(r"\bR_?B\b|reaction\s+at\s+B\b", text)) or label in ("rb", "r_b", "b")
                asks_a = bool(re.search(r"\bR_?A\b|reaction\s+at\s+A\b", text)) or label in ("ra", "r_a", "a")
                if asks_b and not asks_a:
                    collector.compare("RB", rb, newtons, LOOSE, "RB mismatch", always=True)
                elif asks_a and not asks_b:
                    collector.compare("RA", ra, newtons, LOOSE, "RA mismatch", always=True)
                elif newtons is not None:
                    nearest = min((ra, rb), key=lambda r: abs(r - newtons))
                    collector.compare("RA/RB", nearest, newtons, LOOSE, "reaction mismatch", always=True)
