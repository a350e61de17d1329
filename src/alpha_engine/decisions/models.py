"""
Decision Data Models and Enums

Decision (this run's action per ticker) and ContinuityRecord (the subset of
the previous run handed to the next one). Both are internal dataclasses.

Lifecycle:
    previous run's ContinuityRecords ──(read-only)──► this run's Decisions
    this run's Top-N ──► new ContinuityRecords for the next run
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from alpha_engine.completeness.grader import CompletenessGrade
from alpha_engine.gates.models import Grade


class Action(str, Enum):
    """
    Trading action.

    ENTER: new candidate clears the entry bar
    MAINTAIN: incumbent still above the maintenance bar
    CAUTION: watch / degraded, no new exposure
    EXIT: below the exit floor or blocked by a gate
    REPLACE: incumbent displaced by a materially stronger candidate
    """

    ENTER = "ENTER"
    MAINTAIN = "MAINTAIN"
    CAUTION = "CAUTION"
    EXIT = "EXIT"
    REPLACE = "REPLACE"


@dataclass(slots=True)
class Decision:
    """
    Decision data model.

    Attributes:
        action: Final action
        confidence: Integer confidence, 1-99
        triggers_kr: Up to three user-facing reasons (Korean)
        boost_amount: Anti-churn boost applied to the comparison score
        is_boosted: True when boost_amount > 0

    Raises:
        ValueError: If confidence or boost are out of range
    """

    action: Action
    confidence: int
    triggers_kr: list[str] = field(default_factory=list)
    boost_amount: float = 0.0
    is_boosted: bool = False

    def __post_init__(self):
        if not isinstance(self.action, Action):
            raise ValueError(f"Invalid action: {self.action}")
        if not (1 <= self.confidence <= 99):
            raise ValueError(f"Confidence must be 1-99, got {self.confidence}")
        if self.boost_amount < 0:
            raise ValueError(f"Boost cannot be negative: {self.boost_amount}")
        if self.is_boosted != (self.boost_amount > 0):
            raise ValueError("is_boosted must match boost_amount")

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "confidence": self.confidence,
            "triggersKR": list(self.triggers_kr),
            "boostAmount": self.boost_amount,
            "isBoosted": self.is_boosted,
        }


@dataclass(frozen=True, slots=True)
class ContinuityRecord:
    """Previous-run snapshot of one ticker, passed by value."""

    ticker: str
    rank: int
    score: float
    action: Action

    def to_dict(self) -> dict[str, Any]:
        return {"ticker": self.ticker, "rank": self.rank, "score": self.score, "action": self.action.value}

    @classmethod
    def from_dict(cls, data: dict) -> "ContinuityRecord":
        return cls(
            ticker=str(data["ticker"]).upper(),
            rank=int(data["rank"]),
            score=float(data["score"]),
            action=Action(data["action"]),
        )


@dataclass(slots=True)
class DecisionInput:
    """
    Everything the state machine needs for one ticker.

    Attributes:
        ticker: Underlying symbol
        score: Final (gated) score
        grade: Letter grade
        gates: Fired gate codes
        completeness: Data completeness grade
        previous: Previous-run record when the ticker is an incumbent
    """

    ticker: str
    score: int
    grade: Grade
    gates: list[str] = field(default_factory=list)
    completeness: CompletenessGrade = CompletenessGrade.GRA
    previous: Optional[ContinuityRecord] = None

    @property
    def is_incumbent(self) -> bool:
        return self.previous is not None
