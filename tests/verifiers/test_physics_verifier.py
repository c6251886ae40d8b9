"""
Tests for closed-form mechanics checks
"""

import pytest

from boardcheck.verifiers.physics_verifier import PhysicsVerifier, extract_knowns


def test_knowns_are_converted_to_si():
    k = extract_knowns("m = 500 g, u = 36 km/h, t = 2 s")
    assert k["m"] == pytest.approx(0.5)
    assert k["u"] == pytest.approx(10.0)
    assert k["t"] == 2


def test_newtons_second_law(board):
    v = PhysicsVerifier().run(board("m = 2 kg, a = 3 m/s^2. Find the force.", "F = 6 N"))
    assert v.subject == "physics"
    assert len(v.checks) == 1
    assert v.all_verified


def test_negative_mass_fails_outright(board):
    v = PhysicsVerifier().run(board("m = -2 kg, a = 3 m/s^2. Find the force.", "F = -6 N"))
    assert not v.all_verified
    assert v.checks[0].reason == "negative mass"


def test_kinematics_final_velocity(board):
    v = PhysicsVerifier().run(board("A car starts with u = 5 m/s, a = 2 m/s^2 for t = 4 s. Find the final velocity.",
                                    "v = 13 m/s"))
    assert v.all_verified


def test_kinetic_energy_mismatch(board):
    v = PhysicsVerifier().run(board("A ball of mass m = 2 kg moves at v = 3 m/s. Find the kinetic energy.",
                                    "KE = 18 J"))
    assert not v.all_verified
    assert v.checks[0].lhs == pytest.approx(9.0)
