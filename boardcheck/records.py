"""
Verification Records
Immutable inputs and outputs of a single verification call
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Step:
    """One worked step on the board."""
    before: Optional[str] = None
    after: Optional[str] = None
    text: Optional[str] = None
    action: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Step":
        return cls(
            before=data.get("before"),
            after=data.get("after"),
            text=data.get("text"),
            action=data.get("action"),
        )


@dataclass(frozen=True)
class Problem:
    """
    Structured problem record produced by the classification step.

    Only `type` and `final` matter to every verifier; the rest is text that
    is normalized and searched for labeled quantities.
    """
    type: Optional[str] = None
    question: Optional[str] = None
    raw_text: Optional[str] = None
    steps: Tuple[Step, ...] = ()
    final: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Problem":
        steps = tuple(
            s if isinstance(s, Step) else Step.from_dict(s)
            for s in (data.get("steps") or [])
            if s is not None
        )
        final = data.get("final")
        return cls(
            type=data.get("type"),
            question=data.get("question"),
            raw_text=data.get("raw_text"),
            steps=steps,
            final=None if final is None else str(final),
        )


@dataclass(frozen=True)
class Quantity:
    """A parsed number with the unit token found next to it, if any."""
    value: float
    unit: Optional[str] = None


@dataclass(frozen=True)
class Check:
    """One atomic comparison between a recomputed and a reported value."""
    label: str
    ok: bool
    lhs: Optional[float] = None
    rhs: Optional[float] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.label,
            "ok": self.ok,
            "lhs": self.lhs,
            "rhs": self.rhs,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class Verification:
    """
    Verdict for one problem.

    `all_verified` is always derived from the checks: true only when there is
    at least one check and every check passed.
    """
    subject: str
    method: str
    checks: Tuple[Check, ...]
    all_verified: bool = field(init=False)

    def __post_init__(self):
        checks = tuple(self.checks)
        object.__setattr__(self, "checks", checks)
        object.__setattr__(
            self, "all_verified", len(checks) > 0 and all(c.ok for c in checks)
        )

    @classmethod
    def from_checks(cls, subject: str, method: str, checks: Iterable[Check]) -> Optional["Verification"]:
        """Build a verification, or None when nothing was checked."""
        checks = tuple(checks)
        if not checks:
            return None
        return cls(subject=subject, method=method, checks=checks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "method": self.method,
            "allVerified": self.all_verified,
            "checks": [c.to_dict() for c in self.checks],
        }


@dataclass(frozen=True)
class Candidate:
    """
    One concrete reading of the reported final answer.

    `assignment` maps variable names to values. Vector and matrix answers
    carry the literal rows in `literal` instead.
    """
    assignment: Mapping[str, float]
    label: str
    literal: Optional[Tuple[Tuple[float, ...], ...]] = None

    def value(self, variable: Optional[str] = None) -> Optional[float]:
        if variable is not None and variable in self.assignment:
            return self.assignment[variable]
        if len(self.assignment) == 1:
            return next(iter(self.assignment.values()))
        return None

    @property
    def vector(self) -> Optional[List[float]]:
        if self.literal is None:
            return None
        if len(self.literal) == 1:
            return list(self.literal[0])
        if all(len(row) == 1 for row in self.literal):
            return [row[0] for row in self.literal]
        return None
