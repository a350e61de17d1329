"""Gate Engine: ordered risk overrides on the raw pillar sum."""

from alpha_engine.gates.engine import GateEngine, compose, grade_for
from alpha_engine.gates.models import GateEffect, GateOutcome, GateResult, Grade
from alpha_engine.gates.rules import (
    OPTIONAL_RULES,
    DeadVolume,
    FakePump,
    GateContext,
    ShortSqueezeReady,
    ShortStorm,
    TltFlight,
    WallRejection,
    flow_confirmed,
)

__all__ = [
    "GateEngine",
    "compose",
    "grade_for",
    "GateEffect",
    "GateOutcome",
    "GateResult",
    "Grade",
    "OPTIONAL_RULES",
    "DeadVolume",
    "FakePump",
    "GateContext",
    "ShortSqueezeReady",
    "ShortStorm",
    "TltFlight",
    "WallRejection",
    "flow_confirmed",
]
