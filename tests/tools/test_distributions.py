"""
Tests for counting and distribution functions
"""

import math

import pytest

from boardcheck.tools.distributions import (
    binomial_cdf,
    binomial_pmf,
    incomplete_beta,
    inverse_normal,
    n_choose_k,
    n_permute_k,
    normal_cdf,
    poisson_cdf,
    poisson_pmf,
    t_cdf,
    t_star,
    t_test_p_value,
    tail_probability,
    z_star,
    z_test_p_value,
)


# --- Counting ---

def test_combinations_and_permutations():
    assert n_choose_k(5, 2) == 10
    assert n_permute_k(5, 2) == 20
    assert n_choose_k(52, 5) == 2598960
    assert n_choose_k(3, 5) == 0


@pytest.mark.parametrize("n", range(61))
def test_combinations_are_symmetric(n):
    for k in range(n + 1):
        assert n_choose_k(n, k) == n_choose_k(n, n - k)
        assert n_choose_k(n, k) == pytest.approx(math.comb(n, k), rel=1e-9)


# --- Discrete ---

def test_binomial_pmf_sums_to_one():
    assert sum(binomial_pmf(10, k, 0.3) for k in range(11)) == pytest.approx(1.0)


def test_binomial_exact_value():
    assert binomial_pmf(10, 3, 0.5) == pytest.approx(120 / 1024)
    assert binomial_cdf(10, 10, 0.5) == pytest.approx(1.0)


def test_poisson():
    assert poisson_pmf(2.0, 0) == pytest.approx(math.exp(-2))
    assert poisson_cdf(2.0, 50) == pytest.approx(1.0)


def test_tail_probability_operators():
    pair = (lambda k: binomial_pmf(4, k, 0.5), lambda k: binomial_cdf(4, k, 0.5))
    assert tail_probability(pair, 2, "=") == pytest.approx(6 / 16)
    assert tail_probability(pair, 2, "<=") == pytest.approx(11 / 16)
    assert tail_probability(pair, 2, "<") == pytest.approx(5 / 16)
    assert tail_probability(pair, 2, ">=") == pytest.approx(11 / 16)
    assert tail_probability(pair, 2, ">") == pytest.approx(5 / 16)
    assert tail_probability(pair, 0, ">=") == 1.0


# --- Normal ---

def test_normal_cdf_and_inverse():
    assert normal_cdf(0) == 0.5
    assert inverse_normal(0.975) == pytest.approx(1.959964, abs=1e-6)
    assert inverse_normal(normal_cdf(-2.5)) == pytest.approx(-2.5, abs=1e-6)


def test_z_star_table_and_fallback():
    assert z_star(0.95) == pytest.approx(1.959964, abs=1e-6)
    assert z_star(0.85) == pytest.approx(1.439531, abs=1e-5)


def test_z_test_p_values():
    assert z_test_p_value(1.96) == pytest.approx(0.05, abs=1e-3)
    assert z_test_p_value(1.645, "greater") == pytest.approx(0.05, abs=1e-3)
    assert z_test_p_value(-1.645, "less") == pytest.approx(0.05, abs=1e-3)


# --- Student t ---

def test_incomplete_beta_uniform_case():
    assert incomplete_beta(1, 1, 0.3) == pytest.approx(0.3, abs=1e-9)
    assert incomplete_beta(2, 3, 0) == 0.0
    assert incomplete_beta(2, 3, 1) == 1.0


def test_t_cdf_is_symmetric():
    assert t_cdf(0, 5) == 0.5
    assert t_cdf(1.5, 8) + t_cdf(-1.5, 8) == pytest.approx(1.0)


def test_t_cdf_matches_table_critical_value():
    assert t_cdf(2.228, 10) == pytest.approx(0.975, abs=1e-4)


def test_t_star():
    assert t_star(0.95, 10) == 2.228
    assert t_star(0.95, 100) == pytest.approx(1.959964, abs=1e-6)


def test_t_test_two_tailed():
    assert t_test_p_value(2.228, 10) == pytest.approx(0.05, abs=5e-4)
