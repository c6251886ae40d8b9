"""
Thermodynamics Verifier
Calorimetry, latent heat, ideal and combined gas laws, process work and the first law
"""

import re
from typing import NamedTuple, Optional

from boardcheck.config import R_UNIVERSAL, STANDARD, TIGHT
from boardcheck.records import Problem
from boardcheck.utils.quantities import find_value, labeled, labeled_cs
from boardcheck.utils.units import UNIT_HINTS, find_temperature
from boardcheck.verifiers.base import (
    CheckCollector,
    Verifier,
    asked_for,
    find_in_units,
    reported_in_base,
    reported_kelvin,
    reported_value,
)

_BTU_PER_LB = 1055.05585 / 0.45359237

# (unit pattern, factor to J/(basis*K), basis)
_HEAT_CAPACITY_UNITS = (
    (r"kj\s*/\s*\(?kg\s*[·*.]?\s*k\)?", 1e3, "mass"),
    (r"j\s*/\s*\(?kg\s*[·*.]?\s*(?:k|°c)\)?", 1.0, "mass"),
    (r"kcal\s*/\s*\(?kg\s*[·*.]?\s*(?:k|°c)\)?", 4184.0, "mass"),
    (r"cal\s*/\s*\(?g\s*[·*.]?\s*(?:k|°c)\)?", 4184.0, "mass"),
    (r"btu\s*/\s*\(?lb\s*[·*.]?\s*°?f\)?", _BTU_PER_LB * 5 / 9, "mass"),
    (r"kj\s*/\s*\(?mol\s*[·*.]?\s*k\)?", 1e3, "mol"),
    (r"j\s*/\s*\(?mol\s*[·*.]?\s*k\)?", 1.0, "mol"),
)

_LATENT_UNITS = (
    (r"kj\s*/\s*kg", 1e3),
    (r"j\s*/\s*kg", 1.0),
    (r"kcal\s*/\s*kg", 4184.0),
    (r"cal\s*/\s*g", 4184.0),
    (r"btu\s*/\s*lb", _BTU_PER_LB),
)


class HeatCapacity(NamedTuple):
    value: float      # J/(kg*K) or J/(mol*K)
    basis: str        # "mass" or "mol"


def find_heat_capacity(text: str, *labels) -> Optional[HeatCapacity]:
    """Specific or molar heat capacity; a bare number is taken per kg."""
    hints = [p for p, _, _ in _HEAT_CAPACITY_UNITS]
    for label in labels:
        quantity = find_value(text, label, hints)
        if quantity is None:
            continue
        for pattern, factor, basis in _HEAT_CAPACITY_UNITS:
            if quantity.unit and re.fullmatch(pattern, quantity.unit, re.IGNORECASE):
                return HeatCapacity(quantity.value * factor, basis)
        return HeatCapacity(quantity.value, "mass")
    return None


def find_latent_heat(text: str, *labels) -> Optional[float]:
    hints = [p for p, _ in _LATENT_UNITS]
    for label in labels:
        quantity = find_value(text, label, hints)
        if quantity is None:
            continue
        for pattern, factor in _LATENT_UNITS:
            if quantity.unit and re.fullmatch(pattern, quantity.unit, re.IGNORECASE):
                return quantity.value * factor
        return quantity.value
    return None


_TARGETS = (
    (r"final\s+temperature|equilibrium\s+temperature|mixture\s+temperature", "tf"),
    (r"internal\s+energy|Δu|delta\s*u", "Δu"),
    (r"enthalpy|Δh|delta\s*h", "Δh"),
    (r"\bwork\b", "w"),
    (r"\bheat\b", "q"),
    (r"\bpressure\b", "p"),
    (r"\bvolume\b", "v"),
    (r"\bmoles\b", "n"),
    (r"\btemperature\b", "t"),
)


class ThermoVerifier(Verifier):
    """
    Introductory thermodynamics with every quantity converted to SI
    (kg, K, J, Pa, m^3) before the formulas run.
    """

    name = "thermo"
    subject = "thermo"
    method = "thermo-basic"
    trigger = re.compile(
        r"\b(calorimetry|mixing|specific\s*heat|latent|fusion|vapori[sz]ation|evaporation|boiling|ideal\s*gas|"
        r"pv\s*=\s*nrt|combined\s*gas|isobaric|isometric|isochoric|first\s*law|enthalpy|internal\s*energy|"
        r"delta\s*u|delta\s*h|boyle|charles|work|heat)\b|Δ[uh]",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(calorimetry|specific\s*heat|latent|ideal\s*gas|combined\s*gas|isobaric|enthalpy|internal\s*energy)\b",
        r"pv\s*=\s*nrt|Δu|Δh",
        r"\b(j/kg|kpa|atm|mol)\b",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        final = problem.final
        rep = reported_value(final)
        if rep is None:
            return
        collector.focus(asked_for(text, _TARGETS, fallback=False))
        joules = reported_in_base(final, "energy")

        m = find_in_units(text, "mass", labeled_cs("m"), labeled("mass"))
        m1 = find_in_units(text, "mass", labeled("m1"))
        m2 = find_in_units(text, "mass", labeled("m2"))
        t1 = find_temperature(text, labeled_cs("T1"))
        t2 = find_temperature(text, labeled_cs("T2"))
        t = find_temperature(text, labeled_cs("T"))
        board_unit = next((x[1] for x in (t1, t2, t) if x and x[1]), None)
        T1, T2, T = (x[0] if x else None for x in (t1, t2, t))
        dT = find_in_units(text, "temperature_delta", labeled(r"(?:Δ|delta\s*)T"), labeled("dT"))
        if dT is None and T1 is not None and T2 is not None:
            dT = T2 - T1

        Q = find_in_units(text, "energy", labeled_cs("Q"), labeled_cs("q"))
        W = find_in_units(text, "energy", labeled_cs("W"))
        dU = find_in_units(text, "energy", labeled(r"(?:Δ|delta\s*)U"))
        cp = find_heat_capacity(text, labeled(r"c_?p"), labeled_cs("c"), labeled(r"specific\s*heat"))
        cv = find_heat_capacity(text, labeled(r"c_?v"))

        n = find_in_units(text, None, labeled_cs("n"), labeled("moles"))
        M = find_in_units(text, "molar_mass", labeled_cs("M"), labeled(r"molar\s*mass"))
        if n is None and m is not None and M:
            n = m / M

        # q = m c ΔT
        if re.search(r"calorimetry|specific\s*heat|\bq\s*=|heat\s*(?:gained|lost|required|absorbed|needed)", lower):
            capacity = cv if cv is not None and re.search(r"constant\s*volume|isochoric|isometric", lower) else cp
            mass = m if m is not None else (m1 if m1 is not None else m2)
            if capacity is not None and dT is not None:
                amount = mass if capacity.basis == "mass" else n
                if amount is not None:
                    collector.compare("q", amount * capacity.value * abs(dT), joules, STANDARD,
                                      "q=mcΔT mismatch", aliases=("heat",))

        # Two-body mixing
        if re.search(r"\bmix(?:ing|ed|ture)?\b|final\s*temperature|equilibrium\s*temperature", lower):
            if None not in (m1, m2, T1, T2):
                c1 = find_heat_capacity(text, labeled("c1"))
                c2 = find_heat_capacity(text, labeled("c2"))
                if c1 is not None and c2 is not None:
                    tf = (m1 * c1.value * T1 + m2 * c2.value * T2) / (m1 * c1.value + m2 * c2.value)
                else:
                    tf = (m1 * T1 + m2 * T2) / (m1 + m2)
                collector.compare("Tf", tf, reported_kelvin(final, board_unit), TIGHT, "mixing temperature mismatch",
                                  aliases=("t", "t_f", "t_final", "teq"))

        # q = m L
        if re.search(r"\b(phase|latent|fusion|vapori[sz]ation|boil|melt|freez|condens)", lower):
            latent = find_latent_heat(text, labeled(r"L_?[fvh]?"), labeled(r"latent\s*heat"))
            mass = m if m is not None else m1
            if latent is not None and mass is not None:
                collector.compare("q", mass * latent, joules, STANDARD, "q=mL mismatch", aliases=("heat", "q_latent"))

        # Ideal gas PV = nRT, solved for whichever variable is missing
        P = find_in_units(text, "pressure", labeled_cs("P"), labeled_cs("P1"))
        V = find_in_units(text, "volume", labeled_cs("V"), labeled_cs("V1"))
        T_gas = T if T is not None else T1
        if re.search(r"ideal\s*gas|pv\s*=\s*nrt", lower):
            known = {"P": P, "V": V, "n": n, "T": T_gas}
            missing = [k for k, v in known.items() if v is None]
            if len(missing) == 1:
                target = missing[0]
                if target == "P" and V:
                    collector.compare("P", n * R_UNIVERSAL * T_gas / V, reported_in_base(final, "pressure"),
                                      STANDARD, "PV=nRT (P) mismatch")
                elif target == "V" and P:
                    collector.compare("V", n * R_UNIVERSAL * T_gas / P, reported_in_base(final, "volume"),
                                      STANDARD, "PV=nRT (V) mismatch")
                elif target == "n" and T_gas:
                    collector.compare("n", P * V / (R_UNIVERSAL * T_gas), rep, STANDARD, "PV=nRT (n) mismatch",
                                      aliases=("moles",))
                elif target == "T" and n:
                    collector.compare("T", P * V / (n * R_UNIVERSAL), reported_kelvin(final, "K"), STANDARD,
                                      "PV=nRT (T) mismatch")

        # Combined gas law: P and V stay in the board's units, T in kelvin
        if re.search(r"combined\s*gas|p1\s*v1\s*/\s*t1", lower) and T1:
            P1 = find_value(text, labeled_cs("P1"), UNIT_HINTS["pressure"])
            V1 = find_value(text, labeled_cs("V1"), UNIT_HINTS["volume"])
            P2 = find_value(text, labeled_cs("P2"), UNIT_HINTS["pressure"])
            V2 = find_value(text, labeled_cs("V2"), UNIT_HINTS["volume"])
            if P1 is not None and V1 is not None:
                state1 = P1.value * V1.value / T1
                if P2 is None and V2 is not None and T2 is not None and V2.value:
                    collector.compare("P2", state1 * T2 / V2.value, rep, STANDARD, "combined gas P2 mismatch")
                elif V2 is None and P2 is not None and T2 is not None and P2.value:
                    collector.compare("V2", state1 * T2 / P2.value, rep, STANDARD, "combined gas V2 mismatch")
                elif T2 is None and P2 is not None and V2 is not None and state1:
                    collector.compare("T2", P2.value * V2.value / state1, reported_kelvin(final, board_unit),
                                      STANDARD, "combined gas T2 mismatch")

        # Isobaric work
        if re.search(r"isobaric|constant\s*pressure|\bwork\b|\bw\s*=", lower):
            V1 = find_in_units(text, "volume", labeled_cs("V1"))
            V2 = find_in_units(text, "volume", labeled_cs("V2"))
            if P is not None and V1 is not None and V2 is not None:
                collector.compare("W", P * (V2 - V1), joules, STANDARD, "W=PΔV mismatch", aliases=("work",))
            elif n is not None and T1 is not None and T2 is not None:
                collector.compare("W", n * R_UNIVERSAL * (T2 - T1), joules, STANDARD, "W=nRΔT mismatch",
                                  aliases=("work",))

        # ΔU = n Cv ΔT, ΔH = n Cp ΔT
        if dT is not None:
            if cv is not None and re.search(r"internal\s*energy|Δu|delta\s*u", lower):
                amount = n if cv.basis == "mol" else m
                if amount is not None:
                    collector.compare("ΔU", amount * cv.value * dT, joules, STANDARD, "ΔU=nCvΔT mismatch",
                                      aliases=("du", "delta_u", "u"))
            if cp is not None and re.search(r"enthalpy|Δh|delta\s*h", lower):
                amount = n if cp.basis == "mol" else m
                if amount is not None:
                    collector.compare("ΔH", amount * cp.value * dT, joules, STANDARD, "ΔH=nCpΔT mismatch",
                                      aliases=("dh", "delta_h", "h"))

        # First law ΔU = Q - W, solved for the missing term
        if re.search(r"first\s*law|Δu|delta\s*u|internal\s*energy", lower):
            if Q is not None and W is not None and dU is None:
                collector.compare("ΔU", Q - W, joules, STANDARD, "ΔU=Q-W mismatch", aliases=("du", "delta_u", "u"))
            elif dU is not None and W is not None and Q is None:
                collector.compare("Q", dU + W, joules, STANDARD, "Q=ΔU+W mismatch", aliases=("heat",))
            elif dU is not None and Q is not None and W is None:
                collector.compare("W", Q - dU, joules, STANDARD, "W=Q-ΔU mismatch", aliases=("work",))
