"""
Heat Transfer Verifier
Steady conduction, convection, radiation and fins, one heat-flow model per board
"""

import math
import re
from typing import Optional

from boardcheck.config import LOOSE, STANDARD, STEFAN_BOLTZMANN
from boardcheck.records import Problem
from boardcheck.utils.quantities import find_all_labeled, labeled, labeled_cs
from boardcheck.utils.units import find_temperature
from boardcheck.verifiers.base import (
    CheckCollector,
    Verifier,
    disk_area,
    find_in_units,
    reported_in_base,
    reported_value,
)

_Q_ALIASES = ("q", "q_dot", "heat rate", "heat flow", "q_fin", "q_rad", "q_conv", "p")


def _kelvin(text: str, *labels) -> Optional[float]:
    for label in labels:
        found = find_temperature(text, label)
        if found is not None:
            return found[0]
    return None


def fin_heat_rate(h: float, perimeter: float, k: float, area: float, excess: float, length: float) -> float:
    """Straight fin of uniform section with an adiabatic tip."""
    m = math.sqrt(h * perimeter / (k * area))
    return math.sqrt(h * perimeter * k * area) * excess * math.tanh(m * length)


class HeatVerifier(Verifier):
    """
    Steady one-dimensional heat flow.

    Only the most specific model present on the board is checked: composite
    wall, then cylinder, fin, radiation, convection and plain conduction.
    Temperatures are converted to kelvin, so differences are scale-free and
    radiation uses absolute values.
    """

    name = "heat"
    subject = "heat"
    method = "heat-transfer"
    trigger = re.compile(
        r"\b(conduction|convection|radiation|stefan|emissiv\w*|fins?|thermal\s*resistance|composite\s*wall|"
        r"heat\s*(?:transfer|flux|rate|loss|flow)|insulation|slab|wall|pipe)\b",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(conduction|convection|radiation|emissivity|fins?|thermal\s*resistance|composite|heat\s*transfer)\b",
        r"w/m\s*\*?\s*k|w/m\^2",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        if reported_value(problem.final) is None:
            return
        watts = reported_in_base(problem.final, "power")

        A = find_in_units(text, "area", labeled_cs("A"), labeled("area"))
        D = find_in_units(text, "length", labeled_cs("D"), labeled_cs("D1"), labeled("diameter"))
        if A is None:
            A = disk_area(D)
        L = find_in_units(text, "length", labeled_cs("L"), labeled("thickness"), labeled_cs("t"))
        k = find_in_units(text, None, labeled_cs("k"), labeled(r"thermal\s*conductivity"))
        h = find_in_units(text, None, labeled_cs("h"), labeled(r"convection\s*coefficient"))
        hi = find_in_units(text, None, labeled(r"h_?i"))
        ho = find_in_units(text, None, labeled(r"h_?o"))

        T1 = _kelvin(text, labeled_cs("T1"), labeled(r"T_?h(?:ot)?"))
        T2 = _kelvin(text, labeled_cs("T2"), labeled(r"T_?c(?:old)?"))
        Ts = _kelvin(text, labeled(r"T_?s"), labeled(r"T_?surface"), labeled(r"T_?b"))
        Tinf = _kelvin(text, labeled(r"T_?(?:inf|∞)"), labeled(r"T_?ambient"), labeled(r"T_?air"))
        Tsur = _kelvin(text, labeled(r"T_?(?:sur|surroundings?)"))
        dT = find_in_units(text, "temperature_delta", labeled(r"(?:Δ|delta\s*)T"))
        if dT is None and T1 is not None and T2 is not None:
            dT = abs(T1 - T2)
        if dT is None and Ts is not None and Tinf is not None:
            dT = abs(Ts - Tinf)

        layers_L = find_all_labeled(text, "L")
        layers_k = find_all_labeled(text, "k")

        # Given a total resistance, or asked for one
        R_total = find_in_units(text, None, labeled(r"R_?(?:total|tot|th)"), labeled_cs("R"))
        Q_given = find_in_units(text, "power", labeled_cs("Q"), labeled_cs("q"))
        if re.search(r"thermal\s*resistance|r_?total", lower) and dT is not None:
            if R_total:
                collector.compare("q", dT / R_total, watts, STANDARD, "q = ΔT/R_total mismatch", aliases=_Q_ALIASES)
            elif Q_given:
                collector.compare("R_total", dT / Q_given, reported_value(problem.final), STANDARD,
                                  "R_total mismatch", aliases=("r", "r_th", "rtot"))
            if len(collector):
                return

        # Composite wall: conduction layers plus optional surface films
        if (re.search(r"composite|layers?|series", lower) or hi is not None or ho is not None) and A:
            resistance = 0.0
            for index in sorted(set(layers_L) & set(layers_k)):
                if layers_k[index] > 0:
                    resistance += layers_L[index] / (layers_k[index] * A)
            if resistance == 0 and k and L is not None:
                resistance = L / (k * A)
            if hi:
                resistance += 1 / (hi * A)
            if ho:
                resistance += 1 / (ho * A)
            if resistance > 0 and dT is not None:
                collector.compare("q", dT / resistance, watts, STANDARD, "q = ΔT/ΣR mismatch", aliases=_Q_ALIASES)
                return

        # Cylindrical shell
        r1 = find_in_units(text, "length", labeled_cs("r1"), labeled(r"r_?i"))
        r2 = find_in_units(text, "length", labeled_cs("r2"), labeled(r"r_?o"))
        if re.search(r"cylind|pipe|tube", lower) and None not in (k, r1, r2, L, dT):
            if r2 > r1 > 0 and L > 0 and k > 0:
                resistance = math.log(r2 / r1) / (2 * math.pi * k * L)
                collector.compare("q", dT / resistance, watts, STANDARD, "cylindrical conduction mismatch",
                                  aliases=_Q_ALIASES)
                return

        # Fin with adiabatic tip
        if re.search(r"\bfins?\b", lower):
            perimeter = find_in_units(text, "length", labeled_cs("P"), labeled("perimeter"))
            section = find_in_units(text, "area", labeled(r"A_?c"), labeled(r"cross[-\s]*section(?:al)?\s*area"))
            base = Ts if Ts is not None else T1
            if None not in (h, k, L, perimeter, section, base, Tinf) and k * section > 0:
                q_fin = fin_heat_rate(h, perimeter, k, section, base - Tinf, L)
                collector.compare("q", q_fin, watts, LOOSE, "fin heat rate mismatch", aliases=_Q_ALIASES)
                return

        # Radiation exchange with large surroundings
        if re.search(r"radiation|stefan|emissiv|blackbody", lower) and None not in (A, Ts, Tsur):
            eps = find_in_units(text, None, labeled("ε"), labeled("eps(?:ilon)?"), labeled("emissivity"))
            eps = 1.0 if eps is None else min(1.0, max(0.0, eps))
            q_rad = eps * STEFAN_BOLTZMANN * A * (Ts ** 4 - Tsur ** 4)
            collector.compare("q", q_rad, watts, LOOSE, "radiation mismatch", aliases=_Q_ALIASES)
            return

        # Newton cooling
        if re.search(r"convection|newton", lower) and None not in (h, A, Ts, Tinf):
            collector.compare("q", h * A * (Ts - Tinf), watts, STANDARD, "q = hA(Ts-T∞) mismatch",
                              aliases=_Q_ALIASES)
            return

        # Plane wall
        if re.search(r"conduction|wall|slab|plate|rod|bar", lower) and None not in (k, A, L, dT) and L > 0:
            collector.compare("q", k * A * dT / L, watts, STANDARD, "q = kAΔT/L mismatch", aliases=_Q_ALIASES)
