"""
Tests for time value of money and project evaluation
"""

import pytest

from boardcheck.verifiers.finance_verifier import (
    FinanceVerifier,
    bond_price,
    cash_flows,
    compounding,
    effective_rate,
    find_rate,
    fv_annuity,
    irr,
    loan_payment,
    npv,
    payback,
    pv_annuity,
)
from boardcheck.utils.quantities import labeled

FLOWS = [-1000, 300, 300, 300, 300]


# --- Discounted cash flows ---

def test_npv_discounts_from_period_one():
    assert npv(0.10, FLOWS) == pytest.approx(-49.04, abs=0.01)
    assert npv(0.0, FLOWS) == 200


def test_irr_zeroes_npv():
    rate = irr(FLOWS)
    assert rate == pytest.approx(0.0771, abs=1e-4)
    assert npv(rate, FLOWS) == pytest.approx(0.0, abs=1e-6)


def test_irr_without_sign_change():
    assert irr([100, 100]) is None
    assert irr([-100]) is None


def test_payback_interpolates():
    assert payback([-1000, 400, 400, 400]) == pytest.approx(2.5)
    assert payback([-1000, 100]) is None


# --- Annuities ---

def test_annuity_values():
    assert pv_annuity(100, 0.05, 3) == pytest.approx(272.32, abs=0.01)
    assert fv_annuity(100, 0.05, 3) == pytest.approx(315.25, abs=0.01)
    assert pv_annuity(100, 0.0, 3) == 300


def test_loan_payment_amortizes_principal():
    pmt = loan_payment(1000, 0.10, 2)
    assert pmt == pytest.approx(576.19, abs=0.01)
    assert pv_annuity(pmt, 0.10, 2) == pytest.approx(1000)


def test_effective_rate():
    assert effective_rate(0.12, 12) == pytest.approx(0.126825, abs=1e-6)


def test_bond_at_par():
    assert bond_price(1000, 0.05, 0.05, 10) == pytest.approx(1000)


# --- Board parsing ---

def test_rates_read_as_fractions():
    assert find_rate("r = 8%", labeled("r")) == pytest.approx(0.08)
    assert find_rate("r = 8", labeled("r")) == pytest.approx(0.08)
    assert find_rate("r = 0.08", labeled("r")) == pytest.approx(0.08)


def test_compounding_wording():
    assert compounding("compounded monthly") == 12
    assert compounding("compounded quarterly") == 4
    assert compounding("compounded continuously") is None
    assert compounding("simple") == 1


def test_cash_flows_from_indexed_labels():
    assert cash_flows("CF0 = -500, CF1 = 300, CF2 = 300") == [-500, 300, 300]


# --- Verification ---

def test_irr_board(board):
    v = FinanceVerifier().run(board("Cash flows: [-1000, 300, 300, 300, 300]. Find the IRR.", "IRR = 7.71%"))
    assert len(v.checks) == 1
    assert v.all_verified


def test_wrong_npv(board):
    v = FinanceVerifier().run(board("Cash flows: [-1000, 300, 300, 300, 300], r = 10%. Find the NPV.", "NPV = -20"))
    assert not v.all_verified
    assert v.checks[0].reason == "NPV mismatch"


def test_effective_annual_rate_board(board):
    v = FinanceVerifier().run(board("A loan has APR = 12% compounded monthly. Find the effective annual rate.",
                                    "EAR = 12.68%"))
    assert v.all_verified


def test_bond_price_board(board):
    question = "A bond with face value = 1000, coupon rate = 8%, years = 10 and ytm = 6%. Find the bond price."
    v = FinanceVerifier().run(board(question, "price = 1147.20"))
    assert v.checks[0].lhs == pytest.approx(1147.20, abs=0.01)
    assert v.all_verified
