"""
Gate Data Models

A gate is a deterministic post-hoc override: it caps the score at a
ceiling, subtracts a flat penalty, or (opt-in gates only) adds a bonus.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class GateEffect(str, Enum):
    """How a fired gate changes the score."""

    CAP = "cap"
    PENALTY = "penalty"
    BONUS = "bonus"


class Grade(str, Enum):
    """Letter grade of the final score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


@dataclass(frozen=True, slots=True)
class GateResult:
    """
    One fired gate.

    Attributes:
        code: Trigger code (WALL_REJECTION, FAKE_PUMP, SHORT_STORM, ...)
        effect: CAP, PENALTY or BONUS
        applied_value: Cap ceiling, penalty or bonus points
        reason: Human-readable trigger description
    """

    code: str
    effect: GateEffect
    applied_value: float
    reason: str = ""

    def __post_init__(self):
        if not self.code:
            raise ValueError("Gate code cannot be empty")
        if self.applied_value < 0:
            raise ValueError(f"Gate value must be >= 0, got {self.applied_value}")

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "effect": self.effect.value, "appliedValue": self.applied_value}


@dataclass(slots=True)
class GateOutcome:
    """Raw score, fired gates and the resulting final score and grade."""

    raw_score: float
    final_score: int
    grade: Grade
    gates: list[GateResult] = field(default_factory=list)

    @property
    def codes(self) -> list[str]:
        return [g.code for g in self.gates]

    def has(self, code: str) -> bool:
        return code in self.codes
