"""
Tests for the substitution-based algebra verifier
"""

from boardcheck.records import Problem, Step
from boardcheck.verifiers.algebra_verifier import AlgebraVerifier, equation_source, pick_variable, split_equation


# --- Equation extraction ---

def test_split_equation_trims_prose():
    assert split_equation("Solve 2x+3=11") == ("2x+3", "11")
    assert split_equation("If 3y - 1 = 8, find y.") == ("3y - 1", "8")


def test_split_equation_needs_an_equals_sign():
    assert split_equation("Find x") is None


def test_equation_source_prefers_first_step_with_equation():
    problem = Problem(question="Solve it", steps=(Step(before="simplify"), Step(before="x + 1 = 3")))
    assert equation_source(problem) == "x + 1 = 3"


def test_pick_variable_prefers_x_then_y():
    assert pick_variable("y + x = 3") == "x"
    assert pick_variable("2t + 1 = 5") == "t"
    assert pick_variable("e + 1 = 2") is None


# --- Verification ---

def test_every_root_of_a_quadratic_is_checked(board):
    v = AlgebraVerifier().run(board("Solve x^2 - x - 6 = 0", "x = 3 or x = -2"))
    assert len(v.checks) == 2
    assert v.all_verified


def test_one_bad_root_fails_the_board(board):
    v = AlgebraVerifier().run(board("Solve x^2 - x - 6 = 0", "x = 3 or x = 2"))
    assert [c.ok for c in v.checks] == [True, False]
    assert not v.all_verified


def test_division_by_zero_candidate(board):
    v = AlgebraVerifier().run(board("Solve 1/x = 2", "x = 0"))
    assert v.checks[0].reason == "division by zero"


def test_unparseable_final_gives_no_verdict(board):
    assert AlgebraVerifier().run(board("Solve 2x+3=11", "no idea")) is None
