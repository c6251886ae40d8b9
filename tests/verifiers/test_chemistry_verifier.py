"""
Tests for formulas, balancing and stoichiometry
"""

from collections import Counter

import pytest

from boardcheck.verifiers.chemistry_verifier import (
    ChemistryVerifier,
    balance,
    find_equation,
    is_balanced,
    molar_mass,
    parse_formula,
)


# --- Formulas ---

def test_parse_groups_and_hydrates():
    assert parse_formula("Ca(OH)2") == Counter({"Ca": 1, "O": 2, "H": 2})
    assert parse_formula("CuSO4*5H2O") == Counter({"Cu": 1, "S": 1, "O": 9, "H": 10})
    assert parse_formula("NaCl(aq)") == Counter({"Na": 1, "Cl": 1})


def test_molar_mass():
    assert molar_mass("H2O") == pytest.approx(18.015, abs=1e-3)
    assert molar_mass("Xx2") is None


# --- Equations ---

def test_balance_finds_smallest_integers():
    assert balance(["H2", "O2"], ["H2O"]) == [2, 1, 2]
    assert balance(["CH4", "O2"], ["CO2", "H2O"]) == [1, 2, 1, 2]


def test_atom_conservation():
    assert is_balanced([(2, "H2"), (1, "O2")], [(2, "H2O")])
    assert is_balanced([(4, "H2"), (2, "O2")], [(4, "H2O")])
    assert not is_balanced([(1, "H2"), (1, "O2")], [(1, "H2O")])


def test_plain_equals_needs_a_plus():
    assert find_equation("T = 300 K") is None
    reactants, products = find_equation("Balance H2 + O2 -> H2O")
    assert [f for _, f in reactants] == ["H2", "O2"]
    assert products == [(1, "H2O")]


# --- Verification ---

def test_balanced_answer(board):
    v = ChemistryVerifier().run(board("Balance the equation H2 + O2 -> H2O", "2H2 + O2 -> 2H2O"))
    assert v.subject == "chemistry"
    assert v.all_verified


def test_unbalanced_answer(board):
    v = ChemistryVerifier().run(board("Balance the equation H2 + O2 -> H2O", "H2 + O2 -> H2O"))
    assert v.checks[0].reason == "coefficients mismatch"


def test_answer_with_other_species(board):
    v = ChemistryVerifier().run(board("Balance the equation H2 + O2 -> H2O", "2H2 + O2 -> 2H2O2"))
    assert not v.all_verified


def test_percent_yield(board):
    question = "The theoretical yield = 20 g and the actual yield = 15 g. Find the percent yield of the reaction."
    v = ChemistryVerifier().run(board(question, "75%"))
    assert v.all_verified


def test_molar_mass_board(board):
    v = ChemistryVerifier().run(board("Find the molar mass of H2SO4.", "98.08 g/mol"))
    assert v.checks[0].lhs == pytest.approx(98.07, abs=0.01)
    assert v.all_verified
