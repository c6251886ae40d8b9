"""
Unit Converters
Table-driven conversion of parsed quantities to one SI base unit per kind
"""

import math
import re
from types import MappingProxyType
from typing import Dict, Optional, Pattern, Tuple

from boardcheck.records import Quantity
from boardcheck.utils.quantities import PatternLike, find_value


# (pattern, factor-to-base). Most specific spelling first; "(?-i:...)" marks
# the places where the case of the prefix matters (mΩ vs MΩ, mA vs MA).
_RULES: Dict[str, Tuple[Tuple[str, float], ...]] = {
    "length": (
        (r"km", 1e3),
        (r"cm", 1e-2),
        (r"mm", 1e-3),
        (r"(?:u|μ)m", 1e-6),
        (r"ft|feet|foot", 0.3048),
        (r"inch(?:es)?", 0.0254),
        (r"m(?:eters?|etres?)?(?![/^²³])", 1.0),
    ),
    "area": (
        (r"cm(?:\^2|²)", 1e-4),
        (r"mm(?:\^2|²)", 1e-6),
        (r"ft(?:\^2|²)", 0.09290304),
        (r"m(?:\^2|²)(?!/)", 1.0),
    ),
    "volume": (
        (r"cm(?:\^3|³)|cc", 1e-6),
        (r"ft(?:\^3|³)", 0.028316846592),
        (r"m(?:\^3|³)(?!/)", 1.0),
        (r"ml", 1e-6),
        (r"l(?:iters?|itres?)?(?!/)", 1e-3),
    ),
    "flow": (
        (r"m(?:\^3|³)/s", 1.0),
        (r"l/s", 1e-3),
        (r"l/min", 1e-3 / 60),
        (r"gpm", 3.78541e-3 / 60),
    ),
    "velocity": (
        (r"km/h|kmph|kph", 1 / 3.6),
        (r"cm/s", 1e-2),
        (r"mm/s", 1e-3),
        (r"ft/s", 0.3048),
        (r"m/s", 1.0),
    ),
    "density": (
        (r"g/cm(?:\^3|³)|g/ml", 1e3),
        (r"kg/m(?:\^3|³)", 1.0),
    ),
    "dynamic_viscosity": (
        (r"cp|centipoise", 1e-3),
        (r"pa[*·]?s", 1.0),
    ),
    "kinematic_viscosity": (
        (r"cst|centistokes", 1e-6),
        (r"m(?:\^2|²)/s", 1.0),
    ),
    "pressure": (
        (r"kpa", 1e3),
        (r"mpa", 1e6),
        (r"gpa", 1e9),
        (r"atm", 101325.0),
        (r"bar", 1e5),
        (r"psi", 6894.757293168),
        (r"mmhg", 133.322387415),
        (r"pa|n/m(?:\^2|²)", 1.0),
    ),
    "force": (
        (r"kn", 1e3),
        (r"(?-i:MN)", 1e6),
        (r"lbf", 4.4482216152605),
        (r"n(?:ewtons?)?", 1.0),
    ),
    "moment": (
        (r"kn\s*[*.\-]?\s*m", 1e3),
        (r"n\s*[*.\-]?\s*m", 1.0),
        (r"lb\s*[*.\-]?\s*ft", 1.3558179483314),
    ),
    "mass": (
        (r"kg", 1.0),
        (r"mg", 1e-6),
        (r"g(?:rams?)?", 1e-3),
        (r"lbm?|lbs|pounds?", 0.45359237),
    ),
    "energy": (
        (r"kwh", 3.6e6),
        (r"kj", 1e3),
        (r"(?-i:MJ)", 1e6),
        (r"(?-i:mJ)", 1e-3),
        (r"kcal", 4184.0),
        (r"cal", 4.184),
        (r"btu", 1055.05585),
        (r"j(?:oules?)?", 1.0),
    ),
    "power": (
        (r"(?-i:MW)", 1e6),
        (r"kw", 1e3),
        (r"(?-i:mW)", 1e-3),
        (r"hp", 745.7),
        (r"w(?:atts?)?", 1.0),
    ),
    "resistance": (
        (r"(?-i:M)(?:Ω|ohms?)|mega-?ohms?", 1e6),
        (r"k(?:Ω|ohms?)|kilo-?ohms?", 1e3),
        (r"(?-i:m)(?:Ω|ohms?)|milli-?ohms?", 1e-3),
        (r"Ω|ohms?", 1.0),
        (r"(?-i:k)", 1e3),
        (r"(?-i:M)", 1e6),
    ),
    "inductance": (
        (r"(?-i:mH)", 1e-3),
        (r"(?:u|μ)H", 1e-6),
        (r"(?-i:nH)", 1e-9),
        (r"(?-i:H)|henr(?:y|ies)", 1.0),
    ),
    "capacitance": (
        (r"(?-i:mF)", 1e-3),
        (r"(?:u|μ)F", 1e-6),
        (r"nF", 1e-9),
        (r"pF", 1e-12),
        (r"F|farads?", 1.0),
    ),
    "frequency": (
        (r"(?-i:GHz)", 1e9),
        (r"(?-i:MHz)", 1e6),
        (r"khz", 1e3),
        (r"hz", 1.0),
        (r"rad/s", 1 / (2 * math.pi)),
    ),
    "voltage": (
        (r"kv", 1e3),
        (r"(?-i:mV)|millivolts?", 1e-3),
        (r"(?:u|μ)V", 1e-6),
        (r"v(?:olts?)?", 1.0),
    ),
    "current": (
        (r"(?-i:mA)|milliamps?", 1e-3),
        (r"(?:u|μ)A|microamps?", 1e-6),
        (r"(?-i:kA)", 1e3),
        (r"a(?:mps?|mperes?)?", 1.0),
    ),
    "angle": (
        (r"°|deg(?:rees?)?", math.pi / 180),
        (r"rad(?:ians?)?", 1.0),
    ),
    "molar_mass": (
        (r"g/mol", 1e-3),
        (r"kg/mol", 1.0),
    ),
    "time": (
        (r"ms", 1e-3),
        (r"min(?:utes?)?", 60.0),
        (r"h(?:rs?|ours?)?", 3600.0),
        (r"s(?:ec(?:onds?)?)?", 1.0),
    ),
}

TEMPERATURE_HINTS: Tuple[str, ...] = (
    r"(?<![A-Za-z])(?:°\s?C|degC|celsius)(?![A-Za-z])",
    r"(?<![A-Za-z])(?:°\s?F|degF|fahrenheit)(?![A-Za-z])",
    r"(?<![A-Za-z])(?:K|kelvin)(?![A-Za-z])",
    r"(?<![A-Za-z])(?-i:C)(?![A-Za-z])",
    r"(?<![A-Za-z])(?-i:F)(?![A-Za-z])",
)


def _wrap(pattern: str) -> str:
    return rf"(?<![A-Za-z])(?:{pattern})(?![A-Za-z])"


_COMPILED: Dict[str, Tuple[Tuple[Pattern, float], ...]] = MappingProxyType({
    kind: tuple((re.compile(_wrap(p), re.IGNORECASE), f) for p, f in rules)
    for kind, rules in _RULES.items()
})

UNIT_HINTS = MappingProxyType({
    kind: tuple(p for p, _ in rules) for kind, rules in _COMPILED.items()
})


def scale_factor(kind: str, unit: Optional[str]) -> float:
    """Multiplier from `unit` to the base unit of `kind`; 1.0 if unknown or absent."""
    if not unit:
        return 1.0
    token = unit.strip().replace("\u2126", "\u03a9")  # ohm sign -> omega
    for pattern, factor in _COMPILED[kind]:
        if pattern.fullmatch(token):
            return factor
    return 1.0


def convert(quantity: Optional[Quantity], kind: str) -> Optional[float]:
    if quantity is None:
        return None
    if kind == "temperature":
        return to_kelvin(quantity.value, quantity.unit)
    if kind == "temperature_delta":
        return to_kelvin(quantity.value, quantity.unit, delta=True)
    return quantity.value * scale_factor(kind, quantity.unit)


def find_in_base(text: str, label: PatternLike, kind: str) -> Optional[float]:
    """Find a labeled value and convert it to the base unit of `kind`."""
    if kind in ("temperature", "temperature_delta"):
        hints = TEMPERATURE_HINTS
    else:
        hints = UNIT_HINTS[kind]
    return convert(find_value(text, label, hints), kind)


def find_temperature(text: str, label: PatternLike) -> Optional[Tuple[float, Optional[str]]]:
    """(kelvin, unit written on the board) for one labeled temperature."""
    quantity = find_value(text, label, TEMPERATURE_HINTS)
    if quantity is None:
        return None
    return to_kelvin(quantity.value, quantity.unit), quantity.unit


# -------------------------
# Temperature
# -------------------------
def to_kelvin(value: float, unit: Optional[str] = None, delta: bool = False) -> float:
    """
    Absolute temperatures shift by the scale offset; temperature differences
    only scale (a 1 °C step is a 1 K step, a 1 °F step is 5/9 K).
    """
    u = (unit or "").strip().lower().replace(" ", "")
    if u in ("°c", "degc", "c", "celsius", "℃"):
        return value if delta else value + 273.15
    if u in ("°f", "degf", "f", "fahrenheit", "℉"):
        return value * 5 / 9 if delta else (value - 32) * 5 / 9 + 273.15
    return value


# -------------------------
# Per-kind shortcuts
# -------------------------
def _converter(kind: str):
    def to_base(value: float, unit: Optional[str] = None) -> float:
        return value * scale_factor(kind, unit)
    to_base.__name__ = f"to_{kind}"
    to_base.__doc__ = f"Convert a {kind.replace('_', ' ')} value to its SI base unit."
    return to_base


to_meters = _converter("length")
to_square_meters = _converter("area")
to_cubic_meters = _converter("volume")
to_flow = _converter("flow")
to_meters_per_second = _converter("velocity")
to_density = _converter("density")
to_dynamic_viscosity = _converter("dynamic_viscosity")
to_kinematic_viscosity = _converter("kinematic_viscosity")
to_pa = _converter("pressure")
to_newtons = _converter("force")
to_newton_meters = _converter("moment")
to_kg = _converter("mass")
to_joules = _converter("energy")
to_watts = _converter("power")
to_ohms = _converter("resistance")
to_henries = _converter("inductance")
to_farads = _converter("capacitance")
to_hertz = _converter("frequency")
to_volts = _converter("voltage")
to_amps = _converter("current")
to_radians = _converter("angle")
to_kg_per_mol = _converter("molar_mass")
to_seconds = _converter("time")
