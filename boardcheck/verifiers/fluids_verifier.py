"""
Fluids Verifier
Hydrostatics, continuity, Bernoulli, Torricelli, Reynolds number, Darcy losses and buoyancy
"""

import math
import re
from typing import Optional

from boardcheck.config import G_ENGINEERING, LOOSE, STANDARD
from boardcheck.records import Problem
from boardcheck.utils.quantities import labeled, labeled_cs
from boardcheck.verifiers.base import (
    CheckCollector,
    Verifier,
    asked_for,
    disk_area,
    find_in_units,
    reported_in_base,
    reported_value,
)


_TARGETS = (
    (r"reynolds|\bre\b", "re"),
    (r"head\s*loss|\bh_?f\b", "h_f"),
    (r"pressure\s*drop|Δp|delta\s*p", "Δp"),
    (r"buoyan\w*\s*force|buoyancy|upthrust", "f_b"),
    (r"flow\s*rate|discharge", "q"),
    (r"\bp2\b|pressure\s+at\s+(?:point\s+|section\s+)?2", "p2"),
    (r"\bv2\b|velocity\s+at\s+(?:point\s+|section\s+)?2", "v2"),
    (r"\bv1\b|velocity\s+at\s+(?:point\s+|section\s+)?1", "v1"),
    (r"\bz2\b|elevation\s+at\s+(?:point\s+|section\s+)?2", "z2"),
    (r"gauge\s*pressure|hydrostatic\s*pressure|\bpressure\b", "p"),
    (r"efflux|exit\s*(?:velocity|speed)|\bvelocity\b|\bspeed\b", "v"),
)


def _area(text: str, index: str) -> Optional[float]:
    area = find_in_units(text, "area", labeled_cs(f"A{index}"))
    if area is None:
        area = disk_area(find_in_units(text, "length", labeled_cs(f"D{index}"), labeled_cs(f"d{index}")))
    return area


class FluidsVerifier(Verifier):
    """
    Incompressible flow in SI units.

    Bernoulli is written as a head per unit mass, P/ρ + g z + v²/2, with
    missing elevations and inlet speed taken as zero.
    """

    name = "fluids"
    subject = "fluids"
    method = "fluids-basics"
    trigger = re.compile(
        r"\b(hydrostatic|bernoulli|continuity|flow\s*rate|reynolds|darcy|head\s*loss|torricelli|buoyan\w*|"
        r"archimedes|pressure\s*drop|manometer|orifice|fluid|viscosity)\b|(?<![\w.])(?:P[12]|A[12]|v[12]|ρ|rho)\s*=",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(hydrostatic|bernoulli|continuity|reynolds|darcy|torricelli|buoyancy|archimedes|viscosity|fluid)\b",
        r"ρ|\brho\b|kg/m\^3",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        final = problem.final
        rep = reported_value(final)
        if rep is None:
            return
        collector.focus(asked_for(text, _TARGETS, fallback=False))
        pascals = reported_in_base(final, "pressure")
        speed = reported_in_base(final, "velocity")

        g = find_in_units(text, None, labeled_cs("g"), labeled("gravity")) or G_ENGINEERING
        rho = find_in_units(text, "density", labeled(r"(?:ρ|rho)"), labeled("density"))
        mu = find_in_units(text, "dynamic_viscosity", labeled(r"(?:μ|mu)"), labeled(r"dynamic\s*viscosity"))
        nu = find_in_units(text, "kinematic_viscosity", labeled(r"(?:ν|nu)"), labeled(r"kinematic\s*viscosity"))
        h = find_in_units(text, "length", labeled_cs("h"), labeled("depth"), labeled("height"))
        A1, A2 = _area(text, "1"), _area(text, "2")
        v1 = find_in_units(text, "velocity", labeled_cs("v1"))
        v2 = find_in_units(text, "velocity", labeled_cs("v2"))
        v = find_in_units(text, "velocity", labeled_cs("v"), labeled("velocity"))
        D = find_in_units(text, "length", labeled_cs("D"), labeled("diameter"), labeled_cs("D1"))
        Q = find_in_units(text, "flow", labeled_cs("Q"), labeled(r"flow\s*rate"))
        P1 = find_in_units(text, "pressure", labeled_cs("P1"), labeled_cs("P"))
        P2 = find_in_units(text, "pressure", labeled_cs("P2"))
        z1 = find_in_units(text, "length", labeled_cs("z1")) or 0.0
        z2 = find_in_units(text, "length", labeled_cs("z2"))

        # Hydrostatic gauge pressure
        if re.search(r"hydrostatic|manometer|depth|submerged|below\s+the\s+surface", lower):
            if rho is not None and h is not None:
                collector.compare("P", rho * g * h, pascals, STANDARD, "ΔP=ρgh mismatch",
                                  aliases=("Δp", "dp", "p_gauge", "pressure"))

        # Continuity
        if re.search(r"continuity|flow\s*rate|discharge|\bq\s*=|pipe|nozzle", lower):
            flow = reported_in_base(final, "flow")
            for area, vel in ((A1, v1), (A2, v2), (A1 if A1 is not None else disk_area(D), v)):
                if area is not None and vel is not None:
                    collector.compare("Q", area * vel, flow, STANDARD, "Q=Av mismatch", aliases=("flow rate",))
                    break
            if A1 and v1 is not None and A2:
                collector.compare("v2", A1 * v1 / A2, speed, STANDARD, "continuity v2 mismatch")
            if A1 and v2 is not None and A2:
                collector.compare("v1", A2 * v2 / A1, speed, STANDARD, "continuity v1 mismatch")
            if Q is not None and A1:
                collector.compare("v1", Q / A1, speed, STANDARD, "v=Q/A mismatch", aliases=("v",))
            if Q is not None and A2:
                collector.compare("v2", Q / A2, speed, STANDARD, "v=Q/A mismatch", aliases=("v",))

        # Bernoulli between sections 1 and 2
        if "bernoulli" in lower and rho and P1 is not None:
            inlet = v1 if v1 is not None else 0.0
            outlet_z = z2 if z2 is not None else 0.0
            head = P1 / rho + g * z1 + 0.5 * inlet * inlet
            if v2 is not None and P2 is None:
                collector.compare("P2", rho * (head - g * outlet_z - 0.5 * v2 * v2), pascals, LOOSE,
                                  "Bernoulli P2 mismatch")
            elif P2 is not None and v2 is None:
                inside = 2 * (head - P2 / rho - g * outlet_z)
                if inside >= 0:
                    collector.compare("v2", math.sqrt(inside), speed, LOOSE, "Bernoulli v2 mismatch")
            elif P2 is not None and v2 is not None and z2 is None:
                collector.compare("z2", (head - P2 / rho - 0.5 * v2 * v2) / g,
                                  reported_in_base(final, "length"), LOOSE, "Bernoulli z2 mismatch")

        # Torricelli efflux
        if re.search(r"torricelli|orifice|efflux|tank|hole", lower) and h is not None and h >= 0:
            collector.compare("v", math.sqrt(2 * g * h), speed, STANDARD, "Torricelli mismatch",
                              aliases=("v_exit", "v2", "speed"))

        flow_speed = next((x for x in (v, v1, v2) if x is not None), None)

        # Reynolds number
        if re.search(r"reynolds|\bre\b|laminar|turbulent", lower) and D and flow_speed is not None:
            reynolds = None
            if nu:
                reynolds = flow_speed * D / nu
            elif rho is not None and mu:
                reynolds = rho * flow_speed * D / mu
            collector.compare("Re", reynolds, rep, STANDARD, "Reynolds mismatch", aliases=("reynolds",))

        # Darcy-Weisbach
        if re.search(r"darcy|head\s*loss|\bh_?f\b|friction\s*factor|pressure\s*drop", lower):
            f = find_in_units(text, None, labeled_cs("f"), labeled(r"friction\s*factor"))
            L = find_in_units(text, "length", labeled_cs("L"), labeled("length"))
            if None not in (f, L, flow_speed) and D:
                head_loss = f * (L / D) * flow_speed * flow_speed / (2 * g)
                collector.compare("h_f", head_loss, reported_in_base(final, "length"), STANDARD,
                                  "Darcy h_f mismatch", aliases=("hf", "head loss", "h_l", "hl"))
                if rho is not None:
                    collector.compare("ΔP", rho * g * head_loss, pascals, LOOSE, "ΔP=ρg h_f mismatch",
                                      aliases=("dp", "delta_p", "p"))

        # Buoyancy
        if re.search(r"buoyan|archimedes|upthrust|displac", lower):
            fluid = find_in_units(text, "density", labeled(r"(?:ρ|rho)_?f(?:luid)?"), labeled(r"fluid\s*density"))
            fluid = fluid if fluid is not None else rho
            volume = find_in_units(text, "volume", labeled_cs("V"), labeled(r"(?:displaced\s*)?volume"))
            if fluid is not None and volume is not None:
                collector.compare("F_b", fluid * g * volume, reported_value(final), STANDARD, "buoyancy mismatch",
                                  aliases=("fb", "f", "buoyant force"))
