"""
Materials Verifier
Axial stress and strain, Hooke's law, Poisson effect, thermal strain, bending, torsion and beam shear
"""

import math
import re

from boardcheck.config import TIGHT
from boardcheck.records import Problem
from boardcheck.utils.quantities import find_percent, labeled, labeled_cs
from boardcheck.verifiers.base import (
    CheckCollector,
    Verifier,
    asked_for,
    disk_area,
    find_in_units,
    reported_fraction,
    reported_in_base,
    reported_value,
)


# -------------------------
# Section properties
# -------------------------
def rectangle_inertia(b: float, h: float) -> float:
    return b * h ** 3 / 12


def circle_inertia(d: float) -> float:
    return math.pi * d ** 4 / 64


def polar_moment(d: float) -> float:
    """J of a solid round shaft."""
    return math.pi * d ** 4 / 32


_TARGETS = (
    (r"thermal\s+stress", "σ_th"),
    (r"bending\s+stress", "σ_b"),
    (r"shear\s+stress", "τ"),
    (r"angle\s+of\s+twist|\btwist\b", "φ"),
    (r"lateral\s+strain", "ε_t"),
    (r"change\s+in\s+diameter|Δd", "Δd"),
    (r"elongation|deformation|change\s+in\s+length|ΔL|extension", "Δl"),
    (r"young'?s?\s+modulus|modulus\s+of\s+elasticity", "e"),
    (r"\bstrain\b", "ε"),
    (r"\bstress\b", "σ"),
)


class MaterialsVerifier(Verifier):
    """
    Strength of materials for prismatic members in SI units.

    Stresses and moduli are compared in pascals and lengths in metres, so a
    final of `100 MPa` matches a computed 1e8 Pa.
    """

    name = "materials"
    subject = "materials"
    method = "materials-mechanics"
    trigger = re.compile(
        r"\b(stress|strain|young'?s?|modulus|elongation|poisson|thermal\s*expansion|bending|torsion|torque|"
        r"shear|twist|deformation|beam|shaft)\b|σ|ε|τ",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(stress|strain|young'?s?\s*modulus|poisson|elongation|bending|torsion|shear\s*stress|twist)\b",
        r"σ|ε|τ|\b(mpa|gpa)\b",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        final = problem.final
        if reported_value(final) is None:
            return
        collector.focus(asked_for(text, _TARGETS, fallback=False))
        pascals = reported_in_base(final, "pressure")
        meters = reported_in_base(final, "length")
        strain_rep = reported_fraction(final)
        radians = reported_value(final)
        if final and re.search(r"°|deg", final, re.IGNORECASE):
            radians = reported_in_base(final, "angle")

        F = find_in_units(text, "force", labeled_cs("F"), labeled(r"(?:axial\s*)?(?:force|load)"))
        A = find_in_units(text, "area", labeled_cs("A"), labeled("area"))
        L = find_in_units(text, "length", labeled_cs("L"), labeled("length"))
        dL = find_in_units(text, "length", labeled(r"(?:Δ|delta\s*)L"), labeled("elongation"))
        E = find_in_units(text, "pressure", labeled_cs("E"), labeled(r"young'?s?\s*modulus"))
        sigma = find_in_units(text, "pressure", labeled(r"(?:σ|sigma)"), labeled("stress"))
        eps = find_percent(text, labeled(r"(?:ε|epsilon)"), labeled("strain"))
        d = find_in_units(text, "length", labeled_cs("d"), labeled("diameter"), labeled_cs("D"))
        b = find_in_units(text, "length", labeled_cs("b"), labeled("width"))
        h = find_in_units(text, "length", labeled_cs("h"), labeled("height"), labeled("depth"))
        if A is None and d is not None and re.search(r"rod|bar|wire|cable|round|circular", lower):
            A = disk_area(d)

        # σ = F/A, ε = ΔL/L
        if F is not None and A and re.search(r"stress|σ|sigma", lower):
            collector.compare("σ", F / A, pascals, TIGHT, "σ=F/A mismatch", aliases=("sigma", "stress", "s"))
        if dL is not None and L and re.search(r"strain|ε|epsilon", lower):
            collector.compare("ε", dL / L, strain_rep, TIGHT, "ε=ΔL/L mismatch", aliases=("epsilon", "strain", "e"))

        # Hooke's law for whichever of σ, ε, E is missing
        if E:
            if sigma is not None and eps is None:
                collector.compare("ε", sigma / E, strain_rep, TIGHT, "ε=σ/E mismatch", aliases=("epsilon", "strain"))
            elif eps is not None and sigma is None:
                collector.compare("σ", E * eps, pascals, TIGHT, "σ=Eε mismatch", aliases=("sigma", "stress"))
        elif sigma is not None and eps:
            collector.compare("E", sigma / eps, pascals, TIGHT, "E=σ/ε mismatch", aliases=("young's modulus", "modulus"))

        # Axial deformation
        if None not in (F, L, A, E) and A * E != 0:
            collector.compare("ΔL", F * L / (A * E), meters, TIGHT, "ΔL=FL/(AE) mismatch",
                              aliases=("dl", "delta_l", "elongation", "δ"))

        # Poisson effect
        nu = find_in_units(text, None, labeled(r"(?:ν|nu)"), labeled(r"poisson'?s?\s*ratio"))
        if nu is not None:
            axial = eps
            if axial is None and sigma is not None and E:
                axial = sigma / E
            if axial is None and dL is not None and L:
                axial = dL / L
            if axial is not None:
                lateral = -nu * axial
                collector.compare("ε_t", lateral, strain_rep, TIGHT, "ε_t = -ν ε mismatch",
                                  aliases=("lateral strain", "eps_t", "ε_lat"))
                if d is not None:
                    collector.compare("Δd", d * lateral, meters, TIGHT, "Δd = d ε_t mismatch",
                                      aliases=("dd", "delta_d"))

        # Thermal expansion, or thermal stress when the member is restrained
        alpha = find_in_units(text, None, labeled(r"(?:α|alpha)"), labeled(r"coefficient\s*of\s*thermal\s*expansion"))
        dT = find_in_units(text, "temperature_delta", labeled(r"(?:Δ|delta\s*)T"), labeled("dT"),
                           labeled(r"temperature\s*change"))
        if alpha is not None and dT is not None:
            if E is not None and re.search(r"constrain|restrain|fixed|thermal\s*stress", lower):
                collector.compare("σ_th", E * alpha * dT, pascals, TIGHT, "σ = EαΔT mismatch",
                                  aliases=("σ", "sigma", "stress", "thermal stress"))
            elif L is not None:
                collector.compare("ΔL", alpha * L * dT, meters, TIGHT, "ΔL = αLΔT mismatch",
                                  aliases=("dl", "delta_l", "elongation", "δ"))

        # Flexure σ = Mc/I
        M = find_in_units(text, "moment", labeled_cs("M"), labeled(r"bending\s*moment"))
        if M is not None and re.search(r"bending|flexur|beam", lower):
            inertia = find_in_units(text, None, labeled_cs("I"), labeled(r"moment\s*of\s*inertia"))
            c = find_in_units(text, "length", labeled_cs("c"))
            if inertia is None and b is not None and h is not None:
                inertia = rectangle_inertia(b, h)
                c = h / 2 if c is None else c
            elif inertia is None and d is not None:
                inertia = circle_inertia(d)
                c = d / 2 if c is None else c
            if inertia and c is not None:
                collector.compare("σ_b", M * c / inertia, pascals, TIGHT, "σ = Mc/I mismatch",
                                  aliases=("σ", "sigma", "stress", "bending stress"))

        # Torsion of a round shaft
        T = find_in_units(text, "moment", labeled_cs("T"), labeled("torque"))
        J = find_in_units(text, None, labeled_cs("J"), labeled(r"polar\s*moment"))
        if T is not None:
            r = find_in_units(text, "length", labeled_cs("r"), labeled("radius"))
            if re.search(r"torsion|shear\s*stress|τ|tau|shaft", lower):
                if J and r is not None:
                    collector.compare("τ", T * r / J, pascals, TIGHT, "τ = Tr/J mismatch",
                                      aliases=("tau", "τ_max", "shear stress"))
                elif d:
                    collector.compare("τ", 16 * T / (math.pi * d ** 3), pascals, TIGHT, "τ_max solid shaft mismatch",
                                      aliases=("tau", "τ_max", "shear stress"))
            G = find_in_units(text, "pressure", labeled_cs("G"), labeled(r"shear\s*modulus"))
            if G and L is not None and re.search(r"twist|φ|phi", lower):
                J = J if J else (polar_moment(d) if d else None)
                if J:
                    collector.compare("φ", T * L / (J * G), radians, TIGHT, "φ = TL/(JG) mismatch",
                                      aliases=("phi", "θ", "theta", "angle of twist"))

        # Transverse shear in a rectangular beam
        V = find_in_units(text, "force", labeled_cs("V"), labeled(r"shear\s*force"))
        if V is not None and b and h and re.search(r"shear\s*stress|τ|tau", lower) and T is None:
            collector.compare("τ", 1.5 * V / (b * h), pascals, TIGHT, "τ_max = 1.5V/(bh) mismatch",
                              aliases=("tau", "τ_max", "shear stress"))
