"""
Tests for reading candidate assignments out of a final answer
"""

import pytest

from boardcheck.utils.candidates import candidates_from_final


def values(candidates, name="x"):
    return sorted(c.assignment[name] for c in candidates)


def test_single_value():
    (c,) = candidates_from_final("x = 4", ["x"])
    assert c.assignment == {"x": 4}
    assert c.label == "x=4"


def test_alternatives_with_or():
    assert values(candidates_from_final("x = 2 or x = -3")) == [-3, 2]


def test_plus_minus_gives_both_roots():
    assert values(candidates_from_final("x = 3 ± 2")) == [1, 5]


def test_unlabeled_value_uses_first_variable():
    (c,) = candidates_from_final("7", ["y"])
    assert c.assignment == {"y": 7}


def test_expression_values_are_evaluated():
    (c,) = candidates_from_final("x = 3/4")
    assert c.assignment["x"] == pytest.approx(0.75)


def test_multi_variable_product():
    found = candidates_from_final("x = 1 or 2, y = 5")
    assert sorted((c.assignment["x"], c.assignment["y"]) for c in found) == [(1, 5), (2, 5)]


def test_tuple_answer():
    (c,) = candidates_from_final("(x, y) = (1, 2)")
    assert c.assignment == {"x": 1, "y": 2}


def test_unspaced_tuple_binds_each_variable():
    (c,) = candidates_from_final("(1,234)", ["x", "y"])
    assert c.assignment == {"x": 1, "y": 234}


def test_bracket_literal_is_a_vector():
    (c,) = candidates_from_final("x = [1, 2, 3]")
    assert c.assignment == {}
    assert c.vector == [1, 2, 3]


def test_matrix_literal():
    (c,) = candidates_from_final("[[1, 2], [3, 4]]")
    assert c.literal == ((1, 2), (3, 4))
    assert c.vector is None


def test_empty_final():
    assert candidates_from_final(None) == []
    assert candidates_from_final("  ") == []
