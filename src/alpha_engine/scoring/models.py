"""
Pillar Score Data Models

A pillar is one scoring dimension with a point budget and an ordered list
of named factors. The pillar score is exactly the factor sum clamped to
``[0, max]``; factor values are rounded before summing so the equality
holds without tolerance.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PillarName(str, Enum):
    """The five scoring pillars."""

    MOMENTUM = "momentum"
    STRUCTURE = "structure"
    FLOW = "flow"
    REGIME = "regime"
    CATALYST = "catalyst"


PILLAR_MAX = {
    PillarName.MOMENTUM: 25,
    PillarName.STRUCTURE: 25,
    PillarName.FLOW: 25,
    PillarName.REGIME: 15,
    PillarName.CATALYST: 10,
}


@dataclass(frozen=True, slots=True)
class Factor:
    """
    One named contribution to a pillar.

    Attributes:
        name: Factor identifier (camelCase, part of the output contract)
        value: Points awarded (may be negative for penalty factors)
        max: Maximum points this factor can award
        detail: Short human-readable explanation of the input
    """

    name: str
    value: float
    max: float
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "max": self.max, "detail": self.detail}


@dataclass(slots=True)
class PillarScore:
    """Score of one pillar with its factor breakdown."""

    name: PillarName
    score: float
    max: float
    factors: list[Factor] = field(default_factory=list)

    def __post_init__(self):
        if not (0 <= self.score <= self.max):
            raise ValueError(f"{self.name.value} score {self.score} outside [0, {self.max}]")

    @classmethod
    def from_factors(cls, name: PillarName, factors: list[Factor]) -> "PillarScore":
        """Sum factors and clamp to the pillar budget."""
        maximum = PILLAR_MAX[name]
        total = sum(f.value for f in factors)
        return cls(name=name, score=max(0.0, min(float(maximum), total)), max=maximum, factors=factors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name.value,
            "score": round(self.score, 1),
            "max": self.max,
            "factors": [f.to_dict() for f in self.factors],
        }
