"""
Tests for market and macro identity checks
"""

import pytest

from boardcheck.verifiers.economics_verifier import (
    Curve,
    EconomicsVerifier,
    arc_elasticity,
    equilibrium,
    parse_curves,
    tax_outcome,
)

MARKET = "Demand: Qd = 100 - 2P and supply: Qs = 20 + 2P."


def test_parse_curves_inverts_q_of_p():
    demand, supply = parse_curves(MARKET)
    assert demand == Curve(50.0, -0.5)
    assert supply == Curve(-10.0, 0.5)


def test_unlabeled_inverse_curves_bind_by_slope():
    demand, supply = parse_curves("P = 50 - 0.5Q, P = 10 + 0.5Q")
    assert demand.slope < 0 < supply.slope


def test_equilibrium_and_tax():
    demand, supply = Curve(50.0, -0.5), Curve(-10.0, 0.5)
    assert equilibrium(demand, supply) == pytest.approx((20.0, 60.0))
    outcome = tax_outcome(demand, supply, 4.0)
    assert outcome["q1"] == pytest.approx(56.0)
    assert outcome["buyer_price"] - outcome["seller_price"] == pytest.approx(4.0)
    assert outcome["dwl"] == pytest.approx(8.0)


def test_arc_elasticity():
    assert arc_elasticity(10, 100, 12, 80) == pytest.approx(-1.2222, abs=1e-4)
    assert arc_elasticity(10, 100, 10, 80) is None


# --- Verification ---

def test_equilibrium_price(board):
    v = EconomicsVerifier().run(board(MARKET + " Find the equilibrium price.", "P = 20"))
    assert v.subject == "economics"
    assert [c.label for c in v.checks] == ["P*=20"]
    assert v.all_verified


def test_consumer_surplus(board):
    assert EconomicsVerifier().run(board(MARKET + " Find the consumer surplus at equilibrium.", "900")).all_verified


def test_elasticity_in_absolute_value(board):
    question = ("Price rises from P1 = 10 to P2 = 12 while quantity falls from Q1 = 100 to Q2 = 80. "
                "Find the price elasticity of demand.")
    assert EconomicsVerifier().run(board(question, "E = -1.222222")).all_verified
    assert EconomicsVerifier().run(board(question, "E = 1.222222")).all_verified


def test_gdp_expenditure_identity(board):
    v = EconomicsVerifier().run(board("C = 500, I = 200, G = 150 and NX = -50. Compute GDP.", "GDP = 800"))
    assert v.all_verified


def test_unemployment_rate_as_percent(board):
    question = "unemployed = 20, employed = 180. Find the unemployment rate."
    assert EconomicsVerifier().run(board(question, "10%")).all_verified
    assert not EconomicsVerifier().run(board(question, "20%")).all_verified
