"""
AC Circuits Verifier
Phasor impedance, power factor, complex power, cutoff and resonance checks
"""

import cmath
import math
import re
from typing import Iterable, Optional

from boardcheck.config import STANDARD, TIGHT
from boardcheck.records import Problem
from boardcheck.utils.quantities import labeled, labeled_cs
from boardcheck.verifiers.base import CheckCollector, Verifier, asked_for, find_in_units, reported_in_base, reported_value


# -------------------------
# Impedances
# -------------------------
def z_resistor(r: float) -> complex:
    return complex(r, 0.0)


def z_inductor(omega: float, inductance: float) -> complex:
    return complex(0.0, omega * inductance)


def z_capacitor(omega: float, capacitance: float) -> Optional[complex]:
    """1/(jωC) = -j/(ωC); undefined for a non-positive ω or C."""
    if omega <= 0 or capacitance <= 0:
        return None
    return complex(0.0, -1.0 / (omega * capacitance))


def z_series(parts: Iterable[Optional[complex]]) -> Optional[complex]:
    present = [p for p in parts if p is not None]
    if not present:
        return None
    return sum(present, 0j)


def z_parallel(a: Optional[complex], b: Optional[complex]) -> Optional[complex]:
    if a is None or b is None or a == 0 or b == 0:
        return None
    admittance = 1 / a + 1 / b
    if admittance == 0:
        return None
    return 1 / admittance


def branch(omega: float, r: Optional[float], inductance: Optional[float],
           capacitance: Optional[float]) -> Optional[complex]:
    """Series R-L-C leg from whichever elements are present."""
    parts = []
    if r is not None:
        parts.append(z_resistor(r))
    if inductance is not None:
        parts.append(z_inductor(omega, inductance))
    if capacitance is not None:
        parts.append(z_capacitor(omega, capacitance))
    return z_series(parts)


_TARGETS = (
    (r"power\s*factor", "pf"),
    (r"phase\s*angle|\bphase\b", "phi"),
    (r"apparent\s*power", "S"),
    (r"reactive\s*power", "Q"),
    (r"real\s*power|average\s*power|active\s*power", "P"),
    (r"cut-?off|corner|-3\s*db", "fc"),
    (r"resonan", "f0"),
    (r"inductive\s*reactance", "XL"),
    (r"capacitive\s*reactance", "XC"),
    (r"\bimpedance\b", "Z"),
    (r"\bcurrent\b", "I"),
)


class CircuitsACVerifier(Verifier):
    """
    Sinusoidal steady state with lumped R, L and C.

    ω comes from an explicit `ω =` or from `f = ... Hz`; every impedance is a
    Python complex number.
    """

    name = "circuits_ac"
    subject = "circuits"
    method = "circuits-ac"
    trigger = re.compile(
        r"\b(phasor|ac|impedance|reactance|power\s*factor|apparent|reactive|real\s*power|cut-?off|corner|"
        r"-3\s*db|resonance|resonant|rc|rl|rlc|inductor|capacitor)\b|ω|\bomega\b",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(impedance|reactance|phasor|resonan\w*|cut-?off|power\s*factor|rlc|inductor|capacitor)\b",
        r"\b(hz|khz|mh|μf|uf|nf)\b",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        rep = reported_value(problem.final)
        if rep is None:
            return
        collector.focus(asked_for(text, _TARGETS))

        f = find_in_units(text, "frequency", labeled_cs("f"), labeled("frequency"))
        omega = find_in_units(text, None, labeled("ω"), labeled("omega"))
        if omega is None and f is not None:
            omega = 2 * math.pi * f

        R = find_in_units(text, "resistance", labeled_cs("R"), labeled("resistance"))
        L = find_in_units(text, "inductance", labeled_cs("L"), labeled("inductance"))
        C = find_in_units(text, "capacitance", labeled_cs("C"), labeled("capacitance"))
        X = find_in_units(text, "resistance", labeled_cs("X"), labeled("reactance"))
        V = find_in_units(text, "voltage", labeled_cs("V"), labeled(r"V_?rms"), labeled("voltage"))
        I = find_in_units(text, "current", labeled_cs("I"), labeled(r"I_?rms"), labeled("current"))
        pf_given = find_in_units(text, None, labeled("pf"), labeled(r"power\s*factor"))

        # Reactances
        if omega is not None and L is not None:
            collector.compare("XL", omega * L, reported_in_base(problem.final, "resistance"), TIGHT,
                              "X_L = ωL mismatch", aliases=("x_l", "x"))
        if omega is not None and C is not None and omega * C > 0:
            collector.compare("XC", 1 / (omega * C), reported_in_base(problem.final, "resistance"), TIGHT,
                              "X_C = 1/(ωC) mismatch", aliases=("x_c", "x"))

        # Net impedance
        z = None
        if R is not None and X is not None:
            z = complex(R, X)
        elif omega is not None:
            z = branch(omega, R, L, C)
        ohms = reported_in_base(problem.final, "resistance")
        if z is not None:
            if "parallel" in lower and omega is not None:
                legs = [branch(omega, R, None, None), branch(omega, None, L, None), branch(omega, None, None, C)]
                legs = [leg for leg in legs if leg is not None]
                if len(legs) >= 2:
                    zp = z_parallel(legs[0], legs[1])
                    if zp is not None:
                        collector.compare("Z", abs(zp), ohms, TIGHT, "parallel |Z| mismatch",
                                          aliases=("|z|", "z_parallel", "zp"))
            else:
                collector.compare("Z", abs(z), ohms, TIGHT, "series |Z| mismatch",
                                  aliases=("|z|", "z_series", "zs", "z_total"))

        # Phase angle and power factor from the net impedance
        phi = None
        if z is not None and R is not None and z.imag != 0:
            phi = cmath.phase(z)
            unit_deg = bool(re.search(r"°|deg", problem.final or "", re.IGNORECASE))
            collector.compare("phi", math.degrees(phi) if unit_deg else phi, rep, STANDARD,
                              "phase angle mismatch", aliases=("φ", "θ", "theta", "phase"))
            collector.compare("pf", math.cos(phi), rep, TIGHT, "power factor mismatch",
                              aliases=("power factor", "cosφ", "cos(phi)"))

        # Complex power
        if V is not None and I is None and z is not None and abs(z) > 0:
            I = V / abs(z)
        if V is not None and I is not None:
            S = V * I
            collector.compare("S", S, rep, TIGHT, "S = VI mismatch", aliases=("apparent power",))
            pf = pf_given if pf_given is not None else (math.cos(phi) if phi is not None else None)
            if pf is not None and abs(pf) <= 1:
                collector.compare("P", S * pf, rep, TIGHT, "P = S*pf mismatch", aliases=("real power",))
                q = S * math.sqrt(max(0.0, 1 - pf * pf))
                collector.compare("Q", q, abs(rep), TIGHT, "Q = S*sin(φ) mismatch", aliases=("reactive power",))
        if V is not None and z is not None and abs(z) > 0:
            collector.compare("I", V / abs(z), reported_in_base(problem.final, "current"), TIGHT,
                              "I = V/|Z| mismatch", aliases=("i_rms", "current"))

        # Cutoff frequencies
        hz = reported_in_base(problem.final, "frequency")
        if re.search(r"cut-?off|corner|-3\s*db|\bf_?c\b", lower) and R:
            if C is not None and C > 0:
                collector.compare("fc", 1 / (2 * math.pi * R * C), hz, TIGHT, "RC cutoff mismatch",
                                  aliases=("f_c", "f"))
            elif L is not None and L > 0:
                collector.compare("fc", R / (2 * math.pi * L), hz, TIGHT, "RL cutoff mismatch",
                                  aliases=("f_c", "f"))

        # LC resonance, in rad/s when the board works in ω
        if re.search(r"resonan|\bf0\b|ω0", lower) and L and C and L * C > 0:
            w0 = 1 / math.sqrt(L * C)
            if re.search(r"ω0|rad/s", lower) or re.search(r"rad/s", problem.final or "", re.IGNORECASE):
                collector.compare("ω0", w0, rep, TIGHT, "resonant frequency mismatch",
                                  aliases=("omega0", "w0", "f0"))
            else:
                collector.compare("f0", w0 / (2 * math.pi), hz, TIGHT, "resonant frequency mismatch",
                                  aliases=("f_0", "f", "fr"))

        # Two-leg AC divider
        if re.search(r"divider|vout|\bvo\b", lower) and omega is not None:
            z1 = branch(omega, find_in_units(text, "resistance", labeled_cs("R1")),
                        find_in_units(text, "inductance", labeled_cs("L1")),
                        find_in_units(text, "capacitance", labeled_cs("C1")))
            z2 = branch(omega, find_in_units(text, "resistance", labeled_cs("R2")),
                        find_in_units(text, "inductance", labeled_cs("L2")),
                        find_in_units(text, "capacitance", labeled_cs("C2")))
            vin = find_in_units(text, "voltage", labeled(r"V(?:in|s|source)"), labeled_cs("V"))
            if z1 is not None and z2 is not None and vin is not None and z1 + z2 != 0:
                vout = abs(vin * z2 / (z1 + z2))
                collector.compare("Vout", vout, reported_in_base(problem.final, "voltage"), STANDARD,
                                  "AC divider |Vout| mismatch", aliases=("vo", "v_out", "|vout|", "v2"))
