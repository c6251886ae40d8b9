"""
Tests for stress, strain and deformation checks
"""

import math

import pytest

from boardcheck.verifiers.materials_verifier import MaterialsVerifier, circle_inertia, polar_moment, rectangle_inertia


def test_section_properties():
    assert rectangle_inertia(0.1, 0.2) == pytest.approx(6.6667e-5, rel=1e-4)
    assert polar_moment(0.05) == pytest.approx(2 * circle_inertia(0.05))
    assert circle_inertia(1.0) == pytest.approx(math.pi / 64)


def test_axial_stress_in_megapascals(board):
    question = "A rod carries an axial force F = 10 kN over an area A = 100 mm^2. Find the stress."
    v = MaterialsVerifier().run(board(question, "σ = 100 MPa"))
    assert v.subject == "materials"
    assert v.all_verified
    assert not MaterialsVerifier().run(board(question, "σ = 100 kPa")).all_verified


def test_axial_elongation(board):
    question = "A steel bar with F = 50 kN, L = 2 m, A = 500 mm^2 and E = 200 GPa. Find the elongation."
    v = MaterialsVerifier().run(board(question, "elongation = 1 mm"))
    assert v.checks[0].lhs == pytest.approx(1e-3)
    assert v.all_verified
