"""
Data Completeness Grader

Grades how much of the required evidence is actually present, independently
of the score:

    momentum  : last, prev_close, vwap
    structure : options chain OK with contracts
    flow      : dark_pool_pct, short_volume_pct, relative_volume
    regime    : index_change_pct, volatility_index
    catalyst  : sentiment

- GRA: every group complete and the chain is not PENDING → score drives the decision
- GRB: price + (chain complete or NO_OPTIONS) + macro complete → advisory score
- GRC: anything less → never ENTER / REPLACE
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from alpha_engine.analytics.models import ChainStatus
from alpha_engine.evidence.models import Evidence


class CompletenessGrade(str, Enum):
    """Evidence completeness grade."""

    GRA = "GRA"
    GRB = "GRB"
    GRC = "GRC"


@dataclass(slots=True)
class CompletenessReport:
    """
    Completeness grade with the checklist breakdown.

    Attributes:
        grade: GRA / GRB / GRC
        present: Checklist items present
        total: Checklist size
        missing: Names of absent checklist items
        groups: Per-group completeness
    """

    grade: CompletenessGrade
    present: int
    total: int
    missing: list[str] = field(default_factory=list)
    groups: dict[str, bool] = field(default_factory=dict)

    @property
    def drives_decision(self) -> bool:
        return self.grade == CompletenessGrade.GRA

    @property
    def advisory(self) -> bool:
        return self.grade == CompletenessGrade.GRB

    def to_dict(self) -> dict[str, Any]:
        return {
            "grade": self.grade.value,
            "present": self.present,
            "total": self.total,
            "missing": list(self.missing),
            "groups": dict(self.groups),
            "drivesDecision": self.drives_decision,
            "advisory": self.advisory,
        }


def _checklist(evidence: Evidence) -> dict[str, dict[str, bool]]:
    price, flow, macro = evidence.price, evidence.flow, evidence.macro
    return {
        "momentum": {
            "price.last": price.last.present,
            "price.prev_close": price.prev_close.present,
            "price.vwap": price.vwap.present,
        },
        "structure": {
            "options.chain": evidence.options.complete,
        },
        "flow": {
            "flow.dark_pool_pct": flow.dark_pool_pct.present,
            "flow.short_volume_pct": flow.short_volume_pct.present,
            "flow.relative_volume": flow.relative_volume.present,
        },
        "regime": {
            "macro.index_change_pct": macro.index_change_pct.present,
            "macro.volatility_index": macro.volatility_index.present,
        },
        "catalyst": {
            "catalyst.sentiment": evidence.catalyst.sentiment.present,
        },
    }


def grade_completeness(evidence: Evidence) -> CompletenessReport:
    """
    Grade evidence completeness for one ticker.

    Args:
        evidence: Assembled evidence

    Returns:
        CompletenessReport
    """
    checklist = _checklist(evidence)
    groups = {name: all(items.values()) for name, items in checklist.items()}
    items = {name: ok for group in checklist.values() for name, ok in group.items()}

    status = evidence.options.status
    options_ok = groups["structure"] or status == ChainStatus.NO_OPTIONS

    if all(groups.values()) and status != ChainStatus.PENDING:
        grade = CompletenessGrade.GRA
    elif groups["momentum"] and options_ok and groups["regime"]:
        grade = CompletenessGrade.GRB
    else:
        grade = CompletenessGrade.GRC

    return CompletenessReport(
        grade=grade,
        present=sum(items.values()),
        total=len(items),
        missing=[name for name, ok in items.items() if not ok],
        groups=groups,
    )
