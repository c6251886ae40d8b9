"""
Tests for the DC and AC circuit verifiers
"""

import cmath

import pytest

from boardcheck.verifiers.circuits_ac_verifier import CircuitsACVerifier, branch, z_capacitor, z_parallel
from boardcheck.verifiers.circuits_dc_verifier import CircuitsDCVerifier, closer, find_resistors


# --- DC ---

def test_find_resistors_converts_prefixes():
    assert find_resistors("R1 = 2 kΩ and R2 = 500 Ω") == [2000, 500]


def test_closer_picks_nearest():
    assert closer(4.0, 8.0, 7.5) == 8.0


def test_series_resistance(board):
    question = "Resistors R1 = 100 Ω and R2 = 200 Ω are in series. Find the equivalent resistance."
    v = CircuitsDCVerifier().run(board(question, "Req = 300 Ω"))
    assert v.subject == "circuits"
    assert v.all_verified


def test_parallel_resistance(board):
    question = "Two resistors R1 = 6 Ω and R2 = 3 Ω are connected in parallel. Find the equivalent resistance."
    assert CircuitsDCVerifier().run(board(question, "Req = 2 Ω")).all_verified
    assert not CircuitsDCVerifier().run(board(question, "Req = 9 Ω")).all_verified


def test_ohms_law_compares_in_base_units(board):
    question = "V = 10 V and R = 2 kΩ. Use Ohm's law to find the current I."
    assert CircuitsDCVerifier().run(board(question, "I = 5 mA")).all_verified
    assert CircuitsDCVerifier().run(board(question, "I = 0.005 A")).all_verified
    assert not CircuitsDCVerifier().run(board(question, "I = 5 A")).all_verified


# --- AC ---

def test_capacitor_impedance():
    assert z_capacitor(1000.0, 1e-3) == pytest.approx(-1j)
    assert z_capacitor(0.0, 1e-3) is None


def test_series_branch_and_parallel_legs():
    z = branch(1.0, 3.0, 4.0, None)
    assert abs(z) == pytest.approx(5.0)
    assert cmath.phase(z) == pytest.approx(0.9273, abs=1e-4)
    assert z_parallel(2 + 0j, 2 + 0j) == pytest.approx(1 + 0j)
    assert z_parallel(None, 2 + 0j) is None


def test_inductive_reactance(board):
    question = "An inductor L = 100 mH at f = 50 Hz. Find the inductive reactance."
    v = CircuitsACVerifier().run(board(question, "XL = 31.41593 Ω"))
    assert len(v.checks) == 1
    assert v.all_verified
