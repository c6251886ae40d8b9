"""
Tests for labeled number and list parsing
"""

import math

from boardcheck.utils.quantities import (
    approx_equal,
    count_occurrences,
    extract_number_list,
    final_label,
    find_all_labeled,
    find_percent,
    find_value,
    labeled,
    parse_number,
    parse_percent_or_number,
    rel_close,
)


# --- Numbers ---

def test_parse_number_reads_scientific_notation():
    assert parse_number("about 1.5e3 units") == 1500.0
    assert parse_number("no digits") is None
    assert parse_number(None) is None


def test_percent_becomes_fraction():
    assert parse_percent_or_number("12.5%") == 0.125
    assert parse_percent_or_number("0.08") == 0.08


# --- Lists ---

def test_bracketed_list():
    assert extract_number_list("Find the mean of [2, 4, 4, 5]") == [2, 4, 4, 5]


def test_labeled_list_stops_at_next_label():
    text = "Cash flows: -1000, 300, 300 r = 10%"
    assert extract_number_list(text) == [-1000, 300, 300]


def test_labeled_list_prefers_bracket_inside_it():
    text = "Cash flows: [-1000, 300, 300, 300, 300], r = 10%. Find the NPV."
    assert extract_number_list(text) == [-1000, 300, 300, 300, 300]


def test_labeled_list_without_spaces():
    assert extract_number_list("Find the mean of data: 100,200,300") == [100, 200, 300]
    assert extract_number_list("cash flows: -500,100,200,300") == [-500, 100, 200, 300]


# --- Labeled values ---

def test_find_value_picks_unit_after_label():
    q = find_value("R = 2 kΩ, V = 10 V", labeled("R"), (r"kΩ", r"Ω"))
    assert q.value == 2
    assert q.unit == "kΩ"


def test_find_value_without_hint_has_no_unit():
    q = find_value("n = 12", labeled("n"))
    assert q.value == 12 and q.unit is None


def test_labeled_requires_whole_word():
    assert find_value("rate = 5", labeled("e")) is None


def test_find_percent_honours_trailing_sign():
    assert find_percent("r = 8%", labeled("r")) == 0.08
    assert find_percent("r = 0.08", labeled("r")) == 0.08


def test_indexed_labels():
    assert find_all_labeled("R1 = 10, R2 = 20, R1 = 99", "R") == {"1": 10, "2": 20}


def test_final_label():
    assert final_label("I = 5 A") == "I"
    assert final_label("f(x) = 3") == "f(x)"
    assert final_label("42") is None


# --- Comparison ---

def test_closeness_rejects_non_finite():
    assert rel_close(1.0, 1.0 + 1e-9)
    assert not rel_close(math.nan, math.nan)
    assert not approx_equal(math.inf, math.inf)


def test_count_occurrences_sums_patterns():
    assert count_occurrences("mean and median of the mean", [r"\bmean\b", r"\bmedian\b"]) == 3
