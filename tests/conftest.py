"""
Shared fixtures: builders for classified boards
"""

import pytest

from boardcheck.records import Problem, Step


def make_problem(question=None, final=None, steps=(), raw_text=None, type="PROBLEM_SOLVE"):
    return Problem(
        type=type,
        question=question,
        raw_text=raw_text,
        steps=tuple(s if isinstance(s, Step) else Step(**s) for s in steps),
        final=final,
    )


@pytest.fixture
def board():
    """Factory for `Problem` records with the usual problem type."""
    return make_problem
