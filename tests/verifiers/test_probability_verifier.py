"""
Tests for counting, distributions and inference checks
"""

import pytest

from boardcheck.verifiers.probability_verifier import ProbabilityVerifier, alternative_tail, comparison, confidence_level


# --- Reading the question ---

def test_explicit_event_wins():
    assert comparison("Find P(X <= 3)") == ("<=", 3)
    assert comparison("Find P(X ≥ 2)") == (">=", 2)


def test_event_from_wording():
    assert comparison("probability of at most k = 2 successes") == ("<=", 2)
    assert comparison("exactly k = 4") == ("=", 4)


def test_tail_direction():
    assert alternative_tail("H1: mu > 50") == "greater"
    assert alternative_tail("left-tailed test") == "less"
    assert alternative_tail("two-tailed test of H1: mu != 50") is None
    assert alternative_tail("test the claim") is None


def test_confidence_level_default_and_parsed():
    assert confidence_level("construct an interval") == 0.95
    assert confidence_level("a 99% confidence interval") == pytest.approx(0.99)


# --- Verification ---

def test_combinations(board):
    v = ProbabilityVerifier().run(board("How many ways to choose: 5 choose 2?", "10"))
    assert v.checks[0].label == "nCr=10"
    assert v.all_verified


def test_permutations_wrong(board):
    v = ProbabilityVerifier().run(board("How many permutations P(5, 2) are there?", "10"))
    assert not v.all_verified
    assert v.checks[0].reason == "nPr mismatch"


def test_binomial_exact_event(board):
    question = "A binomial experiment has n = 10 trials with p = 0.5. Find P(X = 3)."
    v = ProbabilityVerifier().run(board(question, "0.1172"))
    assert len(v.checks) == 1
    assert v.all_verified


def test_binomial_cumulative_event(board):
    question = "A binomial experiment has n = 10 trials with p = 0.5. Find P(X <= 3)."
    assert ProbabilityVerifier().run(board(question, "0.1719")).all_verified
    assert not ProbabilityVerifier().run(board(question, "0.1172")).all_verified


def test_z_score(board):
    question = "Scores are normally distributed with mean = 100 and sd = 15. Find the z-score for x = 130."
    v = ProbabilityVerifier().run(board(question, "z = 2"))
    assert v.all_verified


def test_margin_of_error_with_known_sigma(board):
    question = "With sigma = 10 and n = 100, find the margin of error for a 95% confidence interval."
    v = ProbabilityVerifier().run(board(question, "E = 1.96"))
    assert v.checks[0].label.startswith("ME_mean_z")
    assert v.all_verified


def test_sample_size_for_proportion(board):
    question = "What sample size is needed for a margin of error of E = 0.03 at 95% confidence?"
    v = ProbabilityVerifier().run(board(question, "n = 1068"))
    assert v.all_verified
