"""
DC Circuits Verifier
Ohm's law, power, equivalent resistance, single loops and two-resistor dividers
"""

import re
from typing import List

from boardcheck.config import STANDARD, TIGHT
from boardcheck.records import Problem
from boardcheck.utils.quantities import NUM, find_value, labeled
from boardcheck.utils.units import UNIT_HINTS, convert
from boardcheck.verifiers.base import CheckCollector, Verifier, find_in_units, reported_in_base

_RESISTOR = re.compile(rf"(?<![\w.])R\d*\s*=\s*{NUM}")


def find_resistors(text: str) -> List[float]:
    """Every R, R1, R2... value in ohms, in order of appearance."""
    values = []
    for m in _RESISTOR.finditer(text):
        quantity = find_value(text[m.start():], _RESISTOR, UNIT_HINTS["resistance"])
        if quantity is None:
            continue
        values.append(convert(quantity, "resistance"))
    return values


def closer(a: float, b: float, target: float) -> float:
    """Whichever of two admissible results is nearer the reported value."""
    return a if abs(a - target) <= abs(b - target) else b


class CircuitsDCVerifier(Verifier):
    """
    Resistive DC networks.

    Values are read with their unit prefixes (2 kΩ, 5 mA) and compared in
    base units, so `I = 5 mA` and `I = 0.005 A` are the same answer.
    """

    name = "circuits_dc"
    subject = "circuits"
    method = "circuits-dc"
    trigger = re.compile(
        r"\b(ohm'?s?|resistors?|resistance|voltage|current|amperes?|divider|series|parallel|kcl|kvl|loop|"
        r"battery)\b|(?<![\w.])R\d?\s*=",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(ohm'?s?|resistors?|resistance|voltage|current|divider|series|parallel|kvl|kcl)\b",
        r"(?<![\w.])r\d*\s*=",
        r"ω|\bohms?\b",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        V = find_in_units(text, "voltage", labeled("V"), labeled("voltage"))
        I = find_in_units(text, "current", labeled("I"), labeled("current"))
        R = find_in_units(text, "resistance", labeled("R"), labeled("resistance"))
        amps = reported_in_base(problem.final, "current")
        volts = reported_in_base(problem.final, "voltage")
        ohms = reported_in_base(problem.final, "resistance")
        watts = reported_in_base(problem.final, "power")

        # Ohm's law
        if re.search(r"ohm'?s?\s*law|v\s*=\s*i\s*\*?\s*r|i\s*=\s*v\s*/\s*r|r\s*=\s*v\s*/\s*i", lower):
            if V is not None and R:
                collector.compare("I", V / R, amps, TIGHT, "I = V/R mismatch", aliases=("current",))
            if I is not None and R is not None:
                collector.compare("V", I * R, volts, TIGHT, "V = I*R mismatch", aliases=("voltage",))
            if V is not None and I:
                collector.compare("R", V / I, ohms, TIGHT, "R = V/I mismatch", aliases=("resistance",))

        # Power
        if re.search(r"\bpower\b|(?<![\w.])p\s*=", lower):
            if V is not None and I is not None:
                collector.compare("P", V * I, watts, TIGHT, "P = V*I mismatch", aliases=("power",))
            elif I is not None and R is not None:
                collector.compare("P", I * I * R, watts, TIGHT, "P = I^2*R mismatch", aliases=("power",))
            elif V is not None and R:
                collector.compare("P", V * V / R, watts, TIGHT, "P = V^2/R mismatch", aliases=("power",))

        resistors = find_resistors(text)

        # Equivalent resistance
        if len(resistors) >= 2:
            if "series" in lower:
                collector.compare("Req", sum(resistors), ohms, TIGHT, "Series Req mismatch",
                                  aliases=("r", "r_eq", "rt", "r_total"))
            if "parallel" in lower and all(resistors):
                req = 1 / sum(1 / r for r in resistors)
                collector.compare("Req", req, ohms, TIGHT, "Parallel Req mismatch",
                                  aliases=("r", "r_eq", "rt", "r_total"))

        # Single loop
        if re.search(r"\b(loop|kvl|series)\b", lower) and re.search(r"current|\bi\b", lower):
            if V is not None and resistors and sum(resistors) > 0:
                collector.compare("I", V / sum(resistors), amps, TIGHT, "Loop current mismatch",
                                  aliases=("current", "i_loop"))

        r1 = find_in_units(text, "resistance", labeled("R1"))
        r2 = find_in_units(text, "resistance", labeled("R2"))
        if r1 is None or r2 is None or r1 + r2 == 0:
            return

        # Voltage divider: either resistor may be the output leg
        if re.search(r"divider|vout|\bvo\b", lower) and "current divider" not in lower:
            vin = find_in_units(text, "voltage", labeled(r"V(?:in|s|source)"), labeled("V"))
            if vin is not None and volts is not None:
                computed = closer(vin * r2 / (r1 + r2), vin * r1 / (r1 + r2), volts)
                collector.compare("Vout", computed, volts, STANDARD, "Voltage divider mismatch",
                                  aliases=("vo", "v2", "v1", "v_out", "v"))

        # Current divider
        if re.search(r"current\s*divider|branch\s*current", lower):
            total = find_in_units(text, "current", labeled(r"I(?:total|t|s)"), labeled("I"))
            if total is not None and amps is not None:
                computed = closer(total * r2 / (r1 + r2), total * r1 / (r1 + r2), amps)
                collector.compare("Ibranch", computed, amps, STANDARD, "Current divider mismatch",
                                  aliases=("i1", "i2", "i"))
