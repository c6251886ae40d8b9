"""
Tests for board text normalization
"""

from boardcheck.records import Step
from boardcheck.utils.text_normalizer import TextNormalizer, gather_problem_text, normalize_text


# --- Glyphs ---

def test_unicode_operators_become_ascii():
    assert normalize_text("3 × 4 ≈ 12") == "3 * 4 = 12"
    assert normalize_text("a − b ÷ c") == "a - b / c"
    assert normalize_text("√2 · π") == "sqrt2 * pi"


def test_currency_symbols_are_dropped():
    assert normalize_text("$1,250,000") == "1250000"


def test_bracketed_lists_keep_their_commas():
    assert normalize_text("data: [100,200,300]") == "data: [100,200,300]"


def test_labeled_lists_keep_their_commas():
    assert normalize_text("data: 100,200,300") == "data: 100,200,300"
    assert normalize_text("Cash flows: -500,100,200,300") == "Cash flows: -500,100,200,300"
    assert normalize_text("values - 1,250,4") == "values - 1,250,4"


def test_numeric_tuples_keep_their_commas():
    assert normalize_text("(1,234)") == "(1,234)"
    assert normalize_text("price 1,200 at (2,500)") == "price 1200 at (2,500)"


def test_whitespace_collapses_and_is_idempotent():
    once = normalize_text("  x  =\n  4  ")
    assert once == "x = 4"
    assert normalize_text(once) == once


def test_empty_input():
    assert normalize_text(None) == ""
    assert normalize_text("") == ""


# --- Gathering ---

def test_gather_joins_question_raw_text_and_steps():
    steps = [Step(before="2x + 3 = 11", after="2x = 8", action="subtract 3")]
    text = gather_problem_text("Solve for x", None, steps)
    assert text.split("\n") == ["Solve for x", "2x + 3 = 11", "2x = 8", "subtract 3"]


def test_gather_skips_blank_pieces():
    assert gather_problem_text("  ", "raw", ()) == "raw"


# --- Validation ---

def test_parentheses_validation():
    ok, error = TextNormalizer.validate_parentheses("(1 + (2)")
    assert not ok and "unclosed" in error
    assert TextNormalizer.validate_parentheses("(1 + 2)") == (True, None)


def test_character_validation():
    assert TextNormalizer.validate_characters("2*x + 3")[0]
    assert not TextNormalizer.validate_characters("import os; x")[0]
