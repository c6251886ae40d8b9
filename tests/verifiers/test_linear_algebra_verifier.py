"""
Tests for matrix and vector recomputation
"""

import numpy as np
import pytest

from boardcheck import verify_board
from boardcheck.verifiers.linear_algebra_verifier import (
    LinearAlgebraVerifier,
    determinant,
    eigenvalues_2x2,
    find_matrix,
    find_vectors,
    inverse,
    parse_matrix,
    projection,
    rank,
    reported_array,
    reported_values,
    solve,
)


# --- Parsing ---

def test_parse_both_matrix_spellings():
    expected = np.array([[1.0, 2.0], [3.0, 4.0]])
    assert np.array_equal(parse_matrix("[[1, 2], [3, 4]]"), expected)
    assert np.array_equal(parse_matrix("[1 2; 3 4]"), expected)


def test_ragged_matrix_is_rejected():
    assert parse_matrix("[[1, 2], [3]]") is None


def test_find_matrix_by_label():
    assert find_matrix("Let B = [[0, 1], [1, 0]] and A = [[2, 0], [0, 2]]").tolist() == [[2, 0], [0, 2]]


def test_find_vectors_skips_matrix_rows():
    found = find_vectors("A = [[1, 2], [3, 4]], b = [5, 6]")
    assert [v.tolist() for v in found] == [[5, 6]]


def test_reported_array_forms():
    assert reported_array("x = [1, 2]").tolist() == [1, 2]
    assert reported_array("(3, 4)").tolist() == [3, 4]
    assert reported_array("[[1, 0], [0, 1]]").shape == (2, 2)
    assert reported_array("det = 5") is None


# --- Elimination ---

def test_determinant():
    assert determinant(np.eye(3)) == 1.0
    assert determinant(np.array([[1.0, 2.0], [3.0, 4.0]])) == pytest.approx(-2.0)
    assert determinant(np.array([[1.0, 2.0], [2.0, 4.0]])) == 0.0
    assert determinant(np.ones((2, 3))) is None


def test_rank():
    assert rank(np.zeros((3, 3))) == 0
    assert rank(np.array([[1.0, 2.0], [2.0, 4.0]])) == 1
    assert rank(np.eye(4)) == 4
    assert rank(np.zeros((0, 0))) == 0
    assert rank(np.zeros((0, 3))) == 0


def test_solve_and_inverse():
    A = np.array([[2.0, 1.0], [1.0, 3.0]])
    assert solve(A, np.array([3.0, 5.0])) == pytest.approx([0.8, 1.4])
    assert inverse(A) @ A == pytest.approx(np.eye(2))
    assert inverse(np.array([[1.0, 2.0], [2.0, 4.0]])) is None


def test_eigenvalues_real_only():
    assert eigenvalues_2x2(np.array([[2.0, 0.0], [0.0, 3.0]])) == [3.0, 2.0]
    assert eigenvalues_2x2(np.array([[0.0, -1.0], [1.0, 0.0]])) is None


def test_projection():
    assert projection(np.array([3.0, 4.0]), np.array([1.0, 0.0])) == pytest.approx([3.0, 0.0])


# --- Verification ---

def test_determinant_board(board):
    v = LinearAlgebraVerifier().run(board("Find the determinant of A = [[1, 2], [3, 4]].", "det = -2"))
    assert v.subject == "linear-algebra"
    assert len(v.checks) == 1
    assert v.all_verified


def test_linear_system_board(board):
    question = "Solve Ax = b with A = [[2, 1], [1, 3]] and b = [3, 5]."
    assert LinearAlgebraVerifier().run(board(question, "x = [0.8, 1.4]")).all_verified
    assert not LinearAlgebraVerifier().run(board(question, "x = [1, 1]")).all_verified


def test_singular_inverse_board(board):
    v = LinearAlgebraVerifier().run(board("Find the inverse of A = [[1, 2], [2, 4]].", "[[1, 0], [0, 1]]"))
    assert v.checks[0].reason == "matrix is singular"


def test_reported_values_split_list_answers():
    assert reported_values("2 and 5") == [2, 5]
    assert reported_values("λ1 = 2, λ2 = 3") == [2, 3]
    assert reported_values("(3, 2)") == [3, 2]


EIGEN = "Find the eigenvalues of A = [[2, 0], [0, 3]]."


@pytest.mark.parametrize("final", ["2 and 3", "3, 2", "[2, 3]", "λ1 = 3, λ2 = 2"])
def test_eigenvalue_pair_in_either_order(board, final):
    v = LinearAlgebraVerifier().run(board(EIGEN, final))
    assert len(v.checks) == 1
    assert v.all_verified


def test_half_wrong_eigenvalue_pair_fails(board):
    v = LinearAlgebraVerifier().run(board(EIGEN, "2 and 5"))
    assert not v.all_verified
    assert v.checks[0].reason == "eigenvalues mismatch (2x2)"


def test_single_eigenvalue(board):
    assert LinearAlgebraVerifier().run(board(EIGEN, "λ = 3")).all_verified
    assert not LinearAlgebraVerifier().run(board(EIGEN, "λ = 4")).all_verified


def test_comma_answer_stays_with_linear_algebra(board):
    v = verify_board(board(EIGEN, "2, 3"))
    assert v.subject == "linear-algebra"
    assert v.all_verified
