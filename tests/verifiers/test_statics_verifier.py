"""
Tests for planar equilibrium checks
"""

import math

import pytest

from boardcheck.verifiers.statics_verifier import StaticsVerifier, component_forces, polar_forces


def test_component_sums():
    assert component_forces("F1x = 3, F1y = 2, F2x = -1") == (2.0, 2.0, 3)


def test_polar_forces_default_to_degrees():
    [(magnitude, angle)] = polar_forces("F1 = 100 N at 30°")
    assert magnitude == 100
    assert angle == pytest.approx(math.pi / 6)


def test_resultant(board):
    question = "Find the resultant of F1x = 3 N, F1y = 0 N, F2x = 0 N, F2y = 4 N."
    v = StaticsVerifier().run(board(question, "R = 5 N"))
    assert v.subject == "statics"
    assert v.all_verified


def test_equilibrium_check(board):
    balanced = StaticsVerifier().run(board("Check equilibrium: F1x = 3, F2x = -3, F1y = 2, F2y = -2.", "ΣF = 0"))
    assert balanced.checks[0].label == "ΣF≈0"
    assert balanced.all_verified
    unbalanced = StaticsVerifier().run(board("Check equilibrium: F1x = 3, F2x = -1.", "ΣF = 0"))
    assert unbalanced.checks[0].reason == "not in equilibrium (ΣF≠0)"


def test_simply_supported_reaction(board):
    question = "A simply supported beam with span L = 6 m carries a point load P = 12 kN at a = 2 m. Find the reaction RB."
    assert StaticsVerifier().run(board(question, "RB = 4 kN")).all_verified
    assert not StaticsVerifier().run(board(question, "RB = 8 kN")).all_verified
