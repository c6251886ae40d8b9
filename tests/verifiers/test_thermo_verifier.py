"""
Tests for calorimetry and gas-law checks
"""

import pytest

from boardcheck.verifiers.thermo_verifier import ThermoVerifier, find_heat_capacity, find_latent_heat
from boardcheck.utils.quantities import labeled, labeled_cs


def test_heat_capacity_units():
    assert find_heat_capacity("c = 4.18 kJ/(kg*K)", labeled_cs("c")).value == pytest.approx(4180.0)
    assert find_heat_capacity("c = 1 cal/g°C", labeled_cs("c")).value == pytest.approx(4184.0)
    molar = find_heat_capacity("cp = 29.1 J/(mol*K)", labeled("cp"))
    assert molar.basis == "mol"


def test_bare_heat_capacity_is_per_kg():
    assert find_heat_capacity("c = 900", labeled_cs("c")) == (900.0, "mass")


def test_latent_heat_units():
    assert find_latent_heat("L = 334 kJ/kg", labeled("L")) == pytest.approx(334000.0)


# --- Verification ---

def test_sensible_heat(board):
    question = "A block with m = 2 kg and specific heat c = 900 is heated from T1 = 300 K to T2 = 350 K. Find the heat required."
    v = ThermoVerifier().run(board(question, "Q = 90 kJ"))
    assert v.subject == "thermo"
    assert len(v.checks) == 1
    assert v.all_verified


def test_sensible_heat_wrong_prefix(board):
    question = "A block with m = 2 kg and specific heat c = 900 is heated from T1 = 300 K to T2 = 350 K. Find the heat required."
    assert not ThermoVerifier().run(board(question, "Q = 90 J")).all_verified


def test_ideal_gas_pressure(board):
    question = "An ideal gas with n = 2 mol at T = 300 K occupies V = 0.05 m^3. Find the pressure P."
    v = ThermoVerifier().run(board(question, "P = 99.773551 kPa"))
    assert v.checks[0].lhs == pytest.approx(99773.55, abs=0.01)
    assert v.all_verified
