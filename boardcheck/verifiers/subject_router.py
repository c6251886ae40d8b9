"""
Subject Router
Picks the domain verifiers for a board and returns the first verdict one of them produces
"""

import logging
from typing import Any, List, Mapping, Optional, Tuple, Union

from boardcheck.config import PROBLEM_TYPE_PREFIX
from boardcheck.records import Problem, Verification
from boardcheck.utils.text_normalizer import gather_problem_text
from boardcheck.verifiers.accounting_verifier import AccountingVerifier
from boardcheck.verifiers.algebra_verifier import AlgebraVerifier
from boardcheck.verifiers.base import Verifier
from boardcheck.verifiers.calculus_verifier import CalculusVerifier
from boardcheck.verifiers.chemistry_verifier import ChemistryVerifier
from boardcheck.verifiers.circuits_ac_verifier import CircuitsACVerifier
from boardcheck.verifiers.circuits_dc_verifier import CircuitsDCVerifier
from boardcheck.verifiers.economics_verifier import EconomicsVerifier
from boardcheck.verifiers.finance_verifier import FinanceVerifier
from boardcheck.verifiers.fluids_verifier import FluidsVerifier
from boardcheck.verifiers.geometry_verifier import GeometryVerifier
from boardcheck.verifiers.heat_verifier import HeatVerifier
from boardcheck.verifiers.linear_algebra_verifier import LinearAlgebraVerifier
from boardcheck.verifiers.materials_verifier import MaterialsVerifier
from boardcheck.verifiers.physics_verifier import PhysicsVerifier
from boardcheck.verifiers.probability_verifier import ProbabilityVerifier
from boardcheck.verifiers.statics_verifier import StaticsVerifier
from boardcheck.verifiers.statistics_verifier import StatisticsVerifier
from boardcheck.verifiers.thermo_verifier import ThermoVerifier

logger = logging.getLogger(__name__)

# Declaration order is also the fallback order
PLUGINS: Tuple[Verifier, ...] = (
    AlgebraVerifier(),
    StatisticsVerifier(),
    GeometryVerifier(),
    PhysicsVerifier(),
    FinanceVerifier(),
    CalculusVerifier(),
    ChemistryVerifier(),
    CircuitsDCVerifier(),
    CircuitsACVerifier(),
    ThermoVerifier(),
    HeatVerifier(),
    FluidsVerifier(),
    MaterialsVerifier(),
    StaticsVerifier(),
    EconomicsVerifier(),
    AccountingVerifier(),
    ProbabilityVerifier(),
    LinearAlgebraVerifier(),
)


class SubjectRouter:
    """
    Two-pass dispatch over the domain verifiers.

    1. Ranked: applicable plugins with a positive keyword score, highest
       score first (ties keep declaration order).
    2. Fallback: every applicable plugin in declaration order.

    The score only orders the attempts. A plugin that finds nothing to check
    returns None and the next one is tried.
    """

    def __init__(self, plugins: Tuple[Verifier, ...] = PLUGINS):
        self.plugins = plugins

    def is_verifiable(self, problem: Problem) -> bool:
        kind = (problem.type or "").strip().upper()
        return kind.startswith(PROBLEM_TYPE_PREFIX)

    def rank(self, text: str) -> List[Verifier]:
        """Applicable plugins with a positive score, best first."""
        scored = []
        for plugin in self.plugins:
            if not plugin.matches(text):
                continue
            score = plugin.score(text)
            if score > 0:
                scored.append((score, plugin))
        scored.sort(key=lambda pair: -pair[0])
        logger.debug("ranking: %s", [(p.name, s) for s, p in scored])
        return [plugin for _, plugin in scored]

    def _attempt(self, plugin: Verifier, problem: Problem) -> Optional[Verification]:
        try:
            return plugin.run(problem)
        except Exception:
            logger.debug("verifier %s failed", plugin.name, exc_info=True)
            return None

    def route(self, problem: Problem) -> Optional[Verification]:
        if not self.is_verifiable(problem):
            return None
        text = gather_problem_text(problem.question, problem.raw_text, problem.steps)
        if not text:
            return None

        tried = set()
        for plugin in self.rank(text):
            tried.add(plugin.name)
            result = self._attempt(plugin, problem)
            if result is not None:
                logger.debug("verdict from %s (ranked)", plugin.name)
                return result

        for plugin in self.plugins:
            if not plugin.matches(text):
                continue
            result = self._attempt(plugin, problem)
            if result is not None:
                logger.debug("verdict from %s (fallback, ranked=%s)", plugin.name, plugin.name in tried)
                return result
        return None


_router = SubjectRouter()


def verify_board(problem: Union[Problem, Mapping[str, Any]]) -> Optional[Verification]:
    """
    Verify one classified board.

    Accepts a `Problem` or the plain dict produced by the classification
    step. Returns None when the board is not a problem, no verifier applies,
    or none of them found anything to check.
    """
    if not isinstance(problem, Problem):
        problem = Problem.from_dict(problem or {})
    return _router.route(problem)


def answer_status(verification: Optional[Verification]) -> Optional[str]:
    """Tri-state answer status: "matches", "mismatch", or None when unverified."""
    if verification is None:
        return None
    return "matches" if verification.all_verified else "mismatch"
