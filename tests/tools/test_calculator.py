"""
Tests for the SymPy-backed expression evaluator
"""

import math

import pytest

from boardcheck.tools.calculator import (
    DIVISION_BY_ZERO,
    LOG_OF_NON_POSITIVE,
    SQRT_OF_NEGATIVE,
    Calculator,
    Evaluation,
)


# --- Evaluation ---

def test_plain_arithmetic():
    assert Calculator.evaluate("2 + 3 * 4") == 14
    assert Calculator.evaluate("2^3") == 8


def test_functions_and_constants():
    assert Calculator.evaluate("2*sqrt(2)") == pytest.approx(2 * math.sqrt(2))
    assert Calculator.evaluate("sin(pi/2)") == pytest.approx(1.0)


def test_implicit_multiplication_with_variables():
    assert Calculator.evaluate("2x + 3", {"x": 4}) == pytest.approx(11)


def test_unbound_variable_is_not_a_number():
    assert Calculator.evaluate("x + 1") is None


def test_malformed_input_returns_none():
    assert Calculator.evaluate("(1 + 2") is None
    assert Calculator.evaluate("__import__('os')") is None
    assert Calculator.evaluate("") is None


@pytest.mark.parametrize("text", ["2, 3", "(1,2)", "1,"])
def test_comma_lists_are_not_expressions(text):
    assert Calculator.inspect(text) == Evaluation(None)
    assert Calculator.compile_function(text) is None
    assert Calculator.expression_variables(text) == []


# --- Domain checks ---

def test_division_by_zero_is_tagged():
    assert Calculator.inspect("1/x", {"x": 0}) == Evaluation(None, DIVISION_BY_ZERO)


def test_sqrt_of_negative_is_tagged():
    result = Calculator.inspect("sqrt(x - 1)", {"x": 0})
    assert result.value is None
    assert result.issue == SQRT_OF_NEGATIVE


@pytest.mark.parametrize("text", ["x^(1/2)", "x**0.5", "x^(3/4)"])
def test_fractional_power_of_negative_is_tagged(text):
    assert Calculator.inspect(text, {"x": -4}).issue == SQRT_OF_NEGATIVE


def test_odd_root_of_negative_is_not_tagged():
    assert Calculator.inspect("x^(1/3)", {"x": -8}).issue is None


def test_log_of_zero_is_tagged():
    assert Calculator.inspect("log(x)", {"x": 0}).issue == LOG_OF_NON_POSITIVE


def test_valid_point_has_no_issue():
    result = Calculator.inspect("sqrt(x - 1)", {"x": 10})
    assert result.issue is None
    assert result.value == pytest.approx(3)


# --- Functions of x ---

def test_compile_function_samples():
    f = Calculator.compile_function("x^2 + 1")
    assert f(3) == pytest.approx(10)


def test_compiled_function_is_none_outside_domain():
    f = Calculator.compile_function("log(x)")
    assert f(-1) is None


def test_compile_rejects_other_symbols():
    assert Calculator.compile_function("a*x") is None


def test_expression_variables_sorted():
    assert Calculator.expression_variables("b*x + a") == ["a", "b", "x"]
