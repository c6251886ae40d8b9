"""
Tests for numeric calculus checks
"""

import math

import pytest

from boardcheck.verifiers.calculus_verifier import CalculusVerifier, clause, derivative, simpson, two_sided_limit


# --- Numerical methods ---

def test_simpson_is_exact_for_cubics():
    assert simpson(lambda x: x ** 3, 0.0, 2.0) == pytest.approx(4.0)


def test_simpson_gives_up_on_undefined_points():
    assert simpson(lambda x: None if abs(x) < 1e-9 else 1 / x, -1.0, 1.0) is None


def test_central_difference():
    assert derivative(math.sin, 0.0) == pytest.approx(1.0, abs=1e-8)
    assert derivative(lambda x: None, 1.0) is None


def test_two_sided_limit_skips_the_hole():
    assert two_sided_limit(lambda x: math.sin(x) / x, 0.0) == pytest.approx(1.0, abs=1e-4)


def test_clause_cuts_at_boundaries():
    assert clause("x^3 at x = 2") == "x^3"
    assert clause("sin(x)/x.") == "sin(x)/x"
    assert clause("2x + 1 dx") == "2x + 1"


# --- Verification ---

def test_definite_integral(board):
    v = CalculusVerifier().run(board("Evaluate the integral of x^2 from 0 to 3.", "9"))
    assert v.subject == "calculus"
    assert v.all_verified
    assert not CalculusVerifier().run(board("Evaluate the integral of x^2 from 0 to 3.", "27")).all_verified


def test_derivative_at_a_point(board):
    v = CalculusVerifier().run(board("Find the derivative of f(x) = x^3 at x = 2.", "12"))
    assert v.checks[0].label == "f'(2)=12"
    assert v.all_verified


def test_limit(board):
    assert CalculusVerifier().run(board("Evaluate lim x->0 of sin(x)/x.", "1")).all_verified


def test_antiderivative_by_differentiation(board):
    v = CalculusVerifier().run(board("Find the antiderivative of 2x.", "x^2 + C"))
    assert v.checks[0].label == "d/dx(F) matches integrand on 6/6 samples"
    assert v.all_verified


def test_wrong_derivative_expression(board):
    v = CalculusVerifier().run(board("Differentiate f(x) = x^2.", "3x"))
    assert not v.all_verified


def test_minimum(board):
    v = CalculusVerifier().run(board("Find the minimum of f(x) = x^2 - 4x + 1.", "x = 2"))
    assert v.checks[0].label == "critical x=2"
    assert v.all_verified
