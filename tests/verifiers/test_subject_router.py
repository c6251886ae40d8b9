"""
End-to-end routing tests: one board in, one verdict out
"""

import re

import pytest

from boardcheck import answer_status, verify_board
from boardcheck.records import Verification
from boardcheck.verifiers.algebra_verifier import AlgebraVerifier
from boardcheck.verifiers.base import Verifier
from boardcheck.verifiers.subject_router import PLUGINS, SubjectRouter


class ExplodingVerifier(Verifier):
    name = "exploding"
    subject = "broken"
    method = "none"
    trigger = re.compile(r"=")
    keywords = (r"solve", r"solve", r"solve")

    def check(self, problem, text, collector):
        raise RuntimeError("boom")


# --- Worked scenarios ---

def test_linear_equation_correct_root(board):
    v = verify_board(board("Solve 2x+3=11", "x=4"))
    assert v.subject == "algebra"
    assert v.all_verified
    assert len(v.checks) == 1
    assert v.checks[0].lhs == pytest.approx(11.0)
    assert v.checks[0].rhs == pytest.approx(11.0)
    assert answer_status(v) == "matches"


def test_linear_equation_wrong_root(board):
    v = verify_board(board("Solve 2x+3=11", "x=5"))
    assert not v.all_verified
    assert v.checks[0].reason == "residual not zero"
    assert answer_status(v) == "mismatch"


def test_domain_violation_is_reported(board):
    v = verify_board(board("Solve sqrt(x-1)=3", "x=0"))
    assert not v.checks[0].ok
    assert v.checks[0].reason == "sqrt of negative"


def test_statistics_board(board):
    v = verify_board(board("Find the mean of [2,4,4,4,5,5,7,9]", "mean=5"))
    assert v.subject == "stats"
    assert v.all_verified


def test_ohms_law_board_ranks_circuits_first(board):
    text = "V=10 V, R=2 Ω. Use Ohm's law to find the current I."
    assert SubjectRouter().rank(text)[0].name == "circuits_dc"

    v = verify_board(board(text, "I=5A"))
    assert v.subject == "circuits"
    assert len(v.checks) == 1
    assert v.checks[0].lhs == pytest.approx(5.0)
    assert v.all_verified


def test_npv_board_within_table_tolerance(board):
    v = verify_board(board("Cash flows: [-1000, 300, 300, 300, 300], r = 10%. Find the NPV.", "npv=-49.18"))
    assert v.subject == "finance"
    assert v.all_verified
    assert v.checks[0].lhs == pytest.approx(-49.04, abs=0.01)


# --- Inputs ---

def test_plain_dict_input():
    v = verify_board({"type": "PROBLEM_SOLVE", "question": "Solve 2x+3=11", "final": 4})
    assert v is not None and v.all_verified


def test_equation_taken_from_steps(board):
    v = verify_board(board("Solve the equation", "x = 2", steps=[{"before": "3x - 6 = 0", "after": "3x = 6"}]))
    assert v.subject == "algebra"
    assert v.all_verified


def test_non_problem_boards_are_skipped(board):
    assert verify_board(board("Solve 2x+3=11", "x=4", type="NOTES")) is None
    assert verify_board(board(None, "x=4")) is None
    assert answer_status(None) is None


def test_nothing_to_check_returns_none(board):
    assert verify_board(board("Describe the water cycle.", "evaporation")) is None


# --- Dispatch ---

def test_plugin_order_and_subjects():
    names = [p.name for p in PLUGINS]
    assert names[0] == "algebra"
    assert names[-1] == "linear_algebra"
    assert len(set(names)) == len(names)


def test_failing_plugin_falls_through(board):
    router = SubjectRouter((ExplodingVerifier(), AlgebraVerifier()))
    assert router.rank("Solve 2x+3=11")[0].name == "exploding"
    v = router.route(board("Solve 2x+3=11", "x=4"))
    assert isinstance(v, Verification)
    assert v.subject == "algebra"


def test_verification_serializes():
    v = verify_board({"type": "problem", "question": "Solve 2x+3=11", "final": "x=4"})
    data = v.to_dict()
    assert data["allVerified"] is True
    assert data["checks"][0]["value"] == "x=4"
    assert data["method"] == "algebra-substitution"
