"""Boardcheck: recomputes worked answers from first principles and reports every check"""

from .records import Check, Problem, Step, Verification
from .verifiers.subject_router import SubjectRouter, answer_status, verify_board

__version__ = "0.1.0"

__all__ = [
    'verify_board',
    'answer_status',
    'SubjectRouter',
    'Problem',
    'Step',
    'Check',
    'Verification'
]
