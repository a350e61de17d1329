"""
Decisions: per-ticker state machine and batch-level continuity booster.
"""

from alpha_engine.decisions.continuity import ContinuityBooster, match_previous
from alpha_engine.decisions.models import Action, ContinuityRecord, Decision, DecisionInput
from alpha_engine.decisions.state_machine import DecisionStateMachine

__all__ = [
    "ContinuityBooster",
    "match_previous",
    "Action",
    "ContinuityRecord",
    "Decision",
    "DecisionInput",
    "DecisionStateMachine",
]
