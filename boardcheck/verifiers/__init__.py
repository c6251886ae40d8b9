"""Verifiers package initialization"""

from .base import CheckCollector, Verifier
from .subject_router import PLUGINS, SubjectRouter, answer_status, verify_board

__all__ = [
    'Verifier',
    'CheckCollector',
    'SubjectRouter',
    'PLUGINS',
    'verify_board',
    'answer_status'
]
