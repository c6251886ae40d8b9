"""
Tests for ledger, depreciation and CVP checks
"""

import pytest

from boardcheck.verifiers.accounting_verifier import (
    AccountingVerifier,
    declining_balance,
    find_amount,
    parse_amount,
    straight_line,
)


def test_ledger_parentheses_are_negative():
    assert parse_amount("(1200)") == -1200
    assert parse_amount("450") == 450
    assert find_amount("Net income: (300)", r"net\s*income") == -300


def test_depreciation_schedules():
    assert straight_line(10000, 2000, 4) == 2000
    expense, book = declining_balance(10000, 1000, 5, 1)
    assert expense == pytest.approx(4000)
    assert book == pytest.approx(6000)


def test_declining_balance_stops_at_salvage():
    _, book = declining_balance(10000, 3000, 5, 5)
    assert book == pytest.approx(3000)


# --- Verification ---

def test_straight_line_board(board):
    question = ("A machine has cost = 10000, salvage value = 2000 and useful life = 4 years. "
                "Find the annual depreciation using the straight-line method.")
    v = AccountingVerifier().run(board(question, "2000"))
    assert v.subject == "accounting"
    assert v.all_verified


def test_missing_equity(board):
    question = "Total assets = 50000 and total liabilities = 20000. Find the equity."
    assert AccountingVerifier().run(board(question, "30000")).all_verified
    assert not AccountingVerifier().run(board(question, "70000")).all_verified


def test_journal_balance(board):
    balanced = board("Record the journal entry.", "balanced",
                     steps=[{"text": "Dr Cash 500"}, {"text": "Cr Revenue 500"}])
    assert AccountingVerifier().run(balanced).all_verified

    lopsided = board("Record the journal entry.", "balanced",
                     steps=[{"text": "Dr Cash 500"}, {"text": "Cr Revenue 400"}])
    assert AccountingVerifier().run(lopsided).checks[0].reason == "debits ≠ credits"


def test_break_even_units(board):
    question = ("Selling price = 50, variable cost = 30 per unit and fixed costs = 40000. "
                "Find the break-even point in units.")
    assert AccountingVerifier().run(board(question, "2000 units")).all_verified


def test_grouped_ledger_negative():
    assert parse_amount("(1,200)") == -1200
    assert find_amount("Net income: (1,200)", r"net\s*income") == -1200
