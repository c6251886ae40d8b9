"""
Tests for unit conversion to SI base units
"""

import math

import pytest

from boardcheck.records import Quantity
from boardcheck.utils.quantities import labeled
from boardcheck.utils.units import (
    convert,
    find_in_base,
    find_temperature,
    scale_factor,
    to_amps,
    to_kelvin,
    to_ohms,
    to_pa,
    to_radians,
)


def test_prefixed_resistance():
    assert to_ohms(1, "kΩ") == 1000
    assert to_ohms(3, "MΩ") == 3e6
    assert to_ohms(5, "Ω") == 5


def test_milli_is_case_sensitive():
    assert to_amps(5, "mA") == pytest.approx(0.005)
    assert to_amps(2, "A") == 2


def test_pressure_units():
    assert to_pa(1, "atm") == 101325.0
    assert to_pa(2, "kPa") == 2000


def test_angles():
    assert to_radians(180, "°") == pytest.approx(math.pi)
    assert to_radians(1, "rad") == 1


def test_unknown_unit_leaves_value():
    assert scale_factor("length", "furlong") == 1.0
    assert scale_factor("length", None) == 1.0


def test_find_in_base_applies_prefix():
    assert find_in_base("R = 2 kΩ", labeled("R"), "resistance") == 2000


def test_convert_none():
    assert convert(None, "length") is None
    assert convert(Quantity(3, "cm"), "length") == pytest.approx(0.03)


# --- Temperature ---

def test_absolute_temperatures():
    assert to_kelvin(0, "°C") == 273.15
    assert to_kelvin(32, "°F") == pytest.approx(273.15)
    assert to_kelvin(300, "K") == 300


def test_temperature_differences_only_scale():
    assert to_kelvin(10, "°C", delta=True) == 10
    assert to_kelvin(9, "°F", delta=True) == pytest.approx(5)


def test_find_temperature_reports_written_unit():
    kelvin, unit = find_temperature("T = 25 °C", labeled("T"))
    assert kelvin == pytest.approx(298.15)
    assert unit == "°C"
