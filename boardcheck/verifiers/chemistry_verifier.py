"""
Chemistry Verifier
Formula parsing, molar mass, equation balancing and introductory stoichiometry
"""

import logging
import re
from collections import Counter
from typing import Dict, List, Optional, Tuple

from sympy import Matrix, igcd, ilcm

from boardcheck.config import ATM_PA, R_LATM, R_UNIVERSAL, STANDARD, Tolerance
from boardcheck.records import Check, Problem
from boardcheck.utils.quantities import NUM, find_number, find_value, labeled, labeled_cs
from boardcheck.utils.units import UNIT_HINTS, find_temperature, scale_factor
from boardcheck.verifiers.base import (
    CheckCollector,
    Verifier,
    asked_for,
    reported_kelvin,
    reported_quantity,
    reported_value,
)

logger = logging.getLogger(__name__)

# Standard atomic weights, g/mol
ATOMIC_MASS: Dict[str, float] = {
    "H": 1.0079, "He": 4.0026,
    "Li": 6.941, "Be": 9.0122, "B": 10.811, "C": 12.011, "N": 14.007, "O": 15.999, "F": 18.998, "Ne": 20.180,
    "Na": 22.990, "Mg": 24.305, "Al": 26.982, "Si": 28.085, "P": 30.974, "S": 32.06, "Cl": 35.45, "Ar": 39.948,
    "K": 39.098, "Ca": 40.078, "Sc": 44.956, "Ti": 47.867, "V": 50.942, "Cr": 51.996, "Mn": 54.938, "Fe": 55.845,
    "Co": 58.933, "Ni": 58.693, "Cu": 63.546, "Zn": 65.38, "Ga": 69.723, "Ge": 72.630, "As": 74.922, "Se": 78.971,
    "Br": 79.904, "Kr": 83.798, "Rb": 85.468, "Sr": 87.62, "Y": 88.906, "Zr": 91.224, "Nb": 92.906, "Mo": 95.95,
    "Ag": 107.8682, "Cd": 112.414, "Sn": 118.710, "Sb": 121.760, "Te": 127.60, "I": 126.904, "Xe": 131.293,
    "Cs": 132.905, "Ba": 137.327, "La": 138.905, "Ce": 140.116, "Pr": 140.908, "Nd": 144.242, "Sm": 150.36,
    "W": 183.84, "Pt": 195.084, "Au": 196.967, "Hg": 200.592, "Pb": 207.2,
}

# Periodic tables disagree in the fourth significant figure
MASS_TOL = Tolerance(rtol=2e-3, atol=1e-6, abs_tol=1e-2)

_TOKEN = re.compile(r"([A-Z][a-z]?)(\d*)|([(\[{])|([)\]}])(\d*)")
_HYDRATE = re.compile(r"[*•.]")
_STATE = re.compile(r"\((?:aq|s|l|g)\)", re.IGNORECASE)

_SPECIES = r"\d*\s*[A-Z][A-Za-z0-9()\[\]{}*•]*(?:\s*\((?:aq|s|l|g)\))?"
_SIDE = rf"{_SPECIES}(?:\s*\+\s*{_SPECIES})*"
_EQUATION = re.compile(rf"({_SIDE})\s*(->|=>|→|⟶|⇒|=)\s*({_SIDE})")
_COEFFICIENT = re.compile(r"^\s*(\d+)\s*(.*)$")


# -------------------------
# Formulas
# -------------------------
def _parse_chunk(chunk: str) -> Counter:
    lead = _COEFFICIENT.match(chunk)
    multiplier = 1
    if lead and lead.group(2):
        multiplier = int(lead.group(1))
        chunk = lead.group(2)

    stack = [Counter()]
    for m in _TOKEN.finditer(chunk):
        symbol, count, opening, closing, group_count = m.groups()
        if symbol:
            stack[-1][symbol] += int(count or 1)
        elif opening:
            stack.append(Counter())
        elif closing and len(stack) > 1:
            group = stack.pop()
            for element, n in group.items():
                stack[-1][element] += n * int(group_count or 1)
    while len(stack) > 1:
        stack[-2].update(stack.pop())

    return Counter({element: n * multiplier for element, n in stack[0].items()})


def parse_formula(formula: str) -> Counter:
    """
    Element counts of a formula. Handles nested (), [] and {} groups and
    hydrates joined by `*`, `•` or `.` (`CuSO4*5H2O`).
    """
    formula = _STATE.sub("", re.sub(r"\s+", "", formula))
    total = Counter()
    for chunk in _HYDRATE.split(formula):
        if chunk:
            total.update(_parse_chunk(chunk))
    return total


def molar_mass(formula: str) -> Optional[float]:
    """g/mol, or None when the formula names an unknown element."""
    counts = parse_formula(formula)
    if not counts:
        return None
    total = 0.0
    for element, n in counts.items():
        if element not in ATOMIC_MASS:
            return None
        total += ATOMIC_MASS[element] * n
    return total


# -------------------------
# Equations
# -------------------------
def _species(side: str) -> List[Tuple[int, str]]:
    out = []
    for part in side.split("+"):
        part = _STATE.sub("", part).strip()
        m = _COEFFICIENT.match(part)
        if m and m.group(2) and m.group(2)[0].isalpha():
            out.append((int(m.group(1)), m.group(2).replace(" ", "")))
        else:
            out.append((1, part.replace(" ", "")))
    return out


def _known(formula: str) -> bool:
    counts = parse_formula(formula)
    return bool(counts) and all(element in ATOMIC_MASS for element in counts)


def find_equation(text: str) -> Optional[Tuple[List[Tuple[int, str]], List[Tuple[int, str]]]]:
    """
    First chemical equation in `text` as (reactants, products), each a list
    of (coefficient, formula). A plain `=` only counts when a `+` appears,
    so `T = 300 K` is not read as a reaction.
    """
    for m in _EQUATION.finditer(text or ""):
        left, arrow, right = m.group(1), m.group(2), m.group(3)
        if arrow == "=" and "+" not in left + right:
            continue
        reactants, products = _species(left), _species(right)
        if all(_known(f) for _, f in reactants + products):
            return reactants, products
    return None


def element_matrix(reactants: List[str], products: List[str]) -> Tuple[List[str], Matrix]:
    """Rows are elements, columns species; products enter with a negative sign."""
    counts = [parse_formula(f) for f in reactants + products]
    elements = sorted({e for c in counts for e in c})
    rows = []
    for element in elements:
        row = []
        for j, c in enumerate(counts):
            sign = 1 if j < len(reactants) else -1
            row.append(sign * c.get(element, 0))
        rows.append(row)
    return elements, Matrix(rows)


def balance(reactants: List[str], products: List[str]) -> Optional[List[int]]:
    """
    Smallest positive integer coefficients, or None when the reaction cannot
    be balanced or has no unique balance.
    """
    _, matrix = element_matrix(reactants, products)
    basis = matrix.nullspace()
    if len(basis) != 1:
        return None
    vector = basis[0]
    denominator = 1
    for entry in vector:
        denominator = ilcm(denominator, entry.q)
    coefficients = [int(entry * denominator) for entry in vector]
    divisor = 0
    for c in coefficients:
        divisor = igcd(divisor, abs(c))
    coefficients = [c // divisor for c in coefficients]
    if all(c < 0 for c in coefficients):
        coefficients = [-c for c in coefficients]
    if any(c <= 0 for c in coefficients):
        return None
    return coefficients


def is_balanced(reactants: List[Tuple[int, str]], products: List[Tuple[int, str]]) -> bool:
    """Atoms of every element conserved with the coefficients as written."""
    _, matrix = element_matrix([f for _, f in reactants], [f for _, f in products])
    coefficients = Matrix([c for c, _ in reactants + products])
    return all(v == 0 for v in matrix * coefficients)


# -------------------------
# Units in chemistry convention
# -------------------------
def _in_unit(text: str, label, kind: str, unit_factor: float) -> Optional[float]:
    """Labeled value in a named unit (litres, atm, grams); a bare number is taken as already in it."""
    quantity = find_value(text, label, UNIT_HINTS[kind])
    if quantity is None:
        return None
    if not quantity.unit:
        return quantity.value
    return quantity.value * scale_factor(kind, quantity.unit) / unit_factor


def _reported_in_unit(final: Optional[str], kind: str, unit_factor: float) -> Optional[float]:
    quantity = reported_quantity(final, kind)
    if quantity is None:
        return None
    if not quantity.unit:
        return quantity.value
    return quantity.value * scale_factor(kind, quantity.unit) / unit_factor


_LITRE = 1e-3
_GRAM = 1e-3

_FORMULA_AFTER_OF = re.compile(r"\bof\s+(\d*[A-Z][A-Za-z0-9()\[\]{}*•]*)")
_GRAMS = re.compile(rf"{NUM}\s*(?:g|grams?)\b(?!\s*/)")
_MOLES = re.compile(rf"{NUM}\s*mol(?:es)?\b(?!\s*/)")

_TARGETS = (
    (r"molar\s+mass|molecular\s+weight", "mm"),
    (r"percent\s*yield|%\s*yield", "yield"),
    (r"molarity|concentration", "m"),
    (r"\bmoles?\b|\bamount\b", "n"),
    (r"\bmass\b|\bgrams\b", "g"),
    (r"\bpressure\b", "p"),
    (r"\bvolume\b", "v"),
    (r"\btemperature\b", "t"),
)


class ChemistryVerifier(Verifier):
    """
    General chemistry in the units chemists write: grams, litres, mol/L and
    atm. Balanced equations are compared by atom conservation, so any
    positive multiple of the smallest coefficients passes.
    """

    name = "chemistry"
    subject = "chemistry"
    method = "chemistry-stoich"
    trigger = re.compile(
        r"\b(balanc\w*|stoichiometr\w*|moles?|molarity|molar|dilution|percent\s*yield|ideal\s*gas|gas\s*law|"
        r"limiting|excess|reactants?|products?|reaction|solution)\b|pv\s*=\s*nr?t|->|→|⟶|⇒",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(balance|stoichiometry|moles?|molarity|molar\s*mass|dilution|percent\s*yield|reaction|limiting)\b",
        r"->|→|⟶|⇒|\bmol\b|\(aq\)",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        final = problem.final

        if self._check_equation(text, lower, final, collector):
            return

        rep = reported_value(final)
        if rep is None:
            return
        collector.focus(asked_for(text, _TARGETS, fallback=False))

        formula_match = _FORMULA_AFTER_OF.search(text)
        formula = formula_match.group(1) if formula_match else None
        mm = molar_mass(formula) if formula else None
        grams = _in_unit(text, labeled_cs("m"), "mass", _GRAM) or _in_unit(text, labeled("mass"), "mass", _GRAM)
        if grams is None:
            g = _GRAMS.search(text)
            grams = float(g.group(1)) if g else None
        moles = find_number(text, labeled_cs("n"), labeled("moles"), _MOLES)

        # Molar mass and mass <-> moles for one species
        if mm is not None:
            if re.search(r"molar\s*mass|molecular\s*weight", lower):
                collector.compare("MM", mm, rep, MASS_TOL, "molar mass mismatch",
                                  aliases=("m", "molar mass", "mw"))
            if grams is not None and re.search(r"\bmoles?\b|how\s+many\s+mol", lower):
                collector.compare("n", grams / mm, rep, MASS_TOL, "moles mismatch (grams/mm)",
                                  aliases=("moles", "mol"))
            elif moles is not None and re.search(r"\bmass\b|\bgrams?\b", lower):
                collector.compare("m", moles * mm, _reported_in_unit(final, "mass", _GRAM), MASS_TOL,
                                  "grams mismatch (moles*mm)", aliases=("g", "mass", "grams"))
        if moles is None and grams is not None and mm:
            moles = grams / mm

        # Molarity M = n / V
        V = _in_unit(text, labeled_cs("V"), "volume", _LITRE)
        molarity = re.search(r"molarity|concentration|mol/l", lower) or re.search(r"\bM\s*=", text)
        if molarity and moles is not None and V:
            collector.compare("M", moles / V, rep, MASS_TOL if mm else STANDARD, "M=n/V mismatch",
                              aliases=("molarity", "c", "concentration"))

        # Dilution C1 V1 = C2 V2, any consistent units
        if re.search(r"dilut|c1\s*\*?\s*v1|m1\s*\*?\s*v1", lower):
            C1 = find_number(text, labeled_cs("C1"), labeled_cs("M1"))
            C2 = find_number(text, labeled_cs("C2"), labeled_cs("M2"))
            V1 = find_number(text, labeled_cs("V1"))
            V2 = find_number(text, labeled_cs("V2"))
            known = {"C1": C1, "V1": V1, "C2": C2, "V2": V2}
            missing = [k for k, v in known.items() if v is None]
            if len(missing) == 1:
                target = missing[0]
                if target == "V2" and C2:
                    value = C1 * V1 / C2
                elif target == "C2" and V2:
                    value = C1 * V1 / V2
                elif target == "V1" and C1:
                    value = C2 * V2 / C1
                elif target == "C1" and V1:
                    value = C2 * V2 / V1
                else:
                    value = None
                collector.compare(target, value, rep, STANDARD, "C1V1=C2V2 mismatch",
                                  aliases=(target.replace("C", "M"),))

        # Ideal gas in L*atm when the board works in atm, otherwise SI
        if re.search(r"ideal\s*gas|gas\s*law|pv\s*=\s*nr?t", lower):
            self._check_ideal_gas(text, final, rep, moles, collector)

        # Percent yield
        if re.search(r"percent\s*yield|%\s*yield", lower):
            actual = find_number(text, rf"actual\s*(?:yield)?\s*(?:[:=]|of|is|was)?\s*{NUM}")
            theoretical = find_number(text, rf"theoretical\s*(?:yield)?\s*(?:[:=]|of|is|was)?\s*{NUM}")
            if actual is not None and theoretical:
                collector.compare("yield", actual / theoretical * 100, rep, STANDARD, "% yield mismatch",
                                  aliases=("percent yield", "%yield", "pct"))

    def _check_equation(self, text: str, lower: str, final: Optional[str], collector: CheckCollector) -> bool:
        """Record the balance check; True when the answer itself is an equation."""
        reaction = find_equation(text)
        answered = find_equation(final or "")
        if answered is not None:
            reactants, products = answered
            ok = is_balanced(reactants, products)
            reason = None if ok else "coefficients mismatch"
            if ok and reaction is not None:
                expected = sorted(f for _, f in reaction[0] + reaction[1])
                written = sorted(f for _, f in reactants + products)
                if expected != written:
                    ok, reason = False, "species differ from the reaction"
            collector.add(Check(label="balanced-equation", ok=ok, reason=reason))
            return True
        elif reaction is not None and "balanc" in lower:
            coefficients = balance([f for _, f in reaction[0]], [f for _, f in reaction[1]])
            logger.debug("balanced coefficients: %s", coefficients)
            collector.add(Check(label="balance-feasible", ok=coefficients is not None,
                                reason=None if coefficients is not None else "equation cannot be balanced"))
        return False

    def _check_ideal_gas(self, text: str, final: Optional[str], rep: float, moles: Optional[float],
                         collector: CheckCollector) -> None:
        pressure = find_value(text, labeled_cs("P"), UNIT_HINTS["pressure"])
        volume = find_value(text, labeled_cs("V"), UNIT_HINTS["volume"])
        atm = bool(pressure and pressure.unit and pressure.unit.lower() == "atm")
        if pressure is None and volume is not None and volume.unit and volume.unit.lower().startswith("l"):
            atm = True

        if atm:
            R = R_LATM
            P = _in_unit(text, labeled_cs("P"), "pressure", ATM_PA)
            V = _in_unit(text, labeled_cs("V"), "volume", _LITRE)
            p_rep = _reported_in_unit(final, "pressure", ATM_PA)
            v_rep = _reported_in_unit(final, "volume", _LITRE)
        else:
            R = R_UNIVERSAL
            P = _in_unit(text, labeled_cs("P"), "pressure", 1.0)
            V = _in_unit(text, labeled_cs("V"), "volume", 1.0)
            p_rep = _reported_in_unit(final, "pressure", 1.0)
            v_rep = _reported_in_unit(final, "volume", 1.0)
        found = find_temperature(text, labeled_cs("T"))
        T = found[0] if found else None

        known = {"P": P, "V": V, "n": moles, "T": T}
        missing = [k for k, v in known.items() if v is None]
        if len(missing) != 1:
            return
        target = missing[0]
        if target == "n" and T:
            collector.compare("n", P * V / (R * T), rep, MASS_TOL, "PV=nRT mismatch for n", aliases=("moles",))
        elif target == "P" and V:
            collector.compare("P", moles * R * T / V, p_rep, MASS_TOL, "PV=nRT mismatch for P")
        elif target == "V" and P:
            collector.compare("V", moles * R * T / P, v_rep, MASS_TOL, "PV=nRT mismatch for V")
        elif target == "T" and moles:
            collector.compare("T", P * V / (moles * R), reported_kelvin(final, "K"), MASS_TOL,
                              "PV=nRT mismatch for T")
