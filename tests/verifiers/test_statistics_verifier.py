"""
Tests for descriptive statistics recomputation
"""

import numpy as np
import pytest

from boardcheck.verifiers.statistics_verifier import StatisticsVerifier, modes, nearest, spread

DATA = "[2, 4, 4, 4, 5, 5, 7, 9]"


def test_modes():
    assert modes([1, 2, 2, 3, 3]) == [2, 3]
    assert modes([1, 2, 3]) == []


def test_spread_population_and_sample():
    population, sample = spread(np.array([2, 4, 4, 4, 5, 5, 7, 9], dtype=float), squared=False)
    assert population == pytest.approx(2.0)
    assert sample == pytest.approx(2.138, abs=1e-3)


def test_nearest_skips_missing():
    assert nearest([None, 1.0, 5.0], 4.0) == 5.0
    assert nearest([None], 4.0) is None


@pytest.mark.parametrize("question, final", [
    (f"Find the mean of {DATA}", "mean = 5"),
    (f"Find the median of {DATA}", "median = 4.5"),
    (f"Find the mode of {DATA}", "mode = 4"),
    (f"Find the range of {DATA}", "range = 7"),
    (f"Find the standard deviation of {DATA}", "sd = 2"),
    (f"Find the standard deviation of {DATA}", "s = 2.138"),
    (f"Find the variance of {DATA}", "variance = 4"),
])
def test_correct_statistics(board, question, final):
    v = StatisticsVerifier().run(board(question, final))
    assert v.subject == "stats"
    assert len(v.checks) == 1
    assert v.all_verified


def test_unnamed_answer_defaults_to_mean(board):
    v = StatisticsVerifier().run(board("Data: 1, 2, 3, 4. Find the average.", "2.5"))
    assert v.checks[0].label == "mean=2.5"
    assert v.all_verified


def test_wrong_median(board):
    v = StatisticsVerifier().run(board(f"Find the median of {DATA}", "median = 5"))
    assert v.checks[0].reason == "median mismatch"


def test_board_without_data_gives_no_verdict(board):
    assert StatisticsVerifier().run(board("What is the mean of a distribution?", "mean = 3")) is None


def test_unspaced_labeled_data(board):
    v = StatisticsVerifier().run(board("Find the mean of data: 100,200,300", "mean=200"))
    assert v.checks[0].label == "mean=200"
    assert v.all_verified
