"""
Pipeline result models.

ScoredTicker is everything that depends only on the ticker's own evidence
(cached per ticker and epoch). TickerResult adds the decision, which
depends on the rest of the batch and on the previous run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from alpha_engine.analytics.models import OptionsAnalytics
from alpha_engine.completeness.grader import CompletenessReport
from alpha_engine.decisions.models import ContinuityRecord, Decision, DecisionInput
from alpha_engine.evidence.models import Evidence
from alpha_engine.gates.models import GateOutcome
from alpha_engine.regime.classifier import RegimeResult
from alpha_engine.scoring.models import PillarName, PillarScore
from alpha_engine.version import ENGINE_VERSION


@dataclass(slots=True)
class ScoredTicker:
    """Evidence, analytics, pillars and gates for one ticker."""

    ticker: str
    evidence: Evidence
    analytics: OptionsAnalytics
    regime: RegimeResult
    pillars: dict[PillarName, PillarScore]
    gate_outcome: GateOutcome
    completeness: CompletenessReport
    calculated_at: datetime = field(default_factory=datetime.now)

    @property
    def raw_score(self) -> float:
        return sum(p.score for p in self.pillars.values())

    @property
    def score(self) -> int:
        return self.gate_outcome.final_score

    def decision_input(self, previous: Optional[ContinuityRecord] = None) -> DecisionInput:
        return DecisionInput(
            ticker=self.ticker,
            score=self.score,
            grade=self.gate_outcome.grade,
            gates=self.gate_outcome.codes,
            completeness=self.completeness.grade,
            previous=previous,
        )


@dataclass(slots=True)
class TickerResult:
    """Scored ticker with its final decision."""

    scored: ScoredTicker
    decision: Decision
    incumbent: bool = False
    engine_version: str = ENGINE_VERSION

    @property
    def ticker(self) -> str:
        return self.scored.ticker

    @property
    def score(self) -> int:
        return self.scored.score

    def to_dict(self, include_analytics: bool = True) -> dict[str, Any]:
        """Output contract consumed verbatim by report/UI layers."""
        scored = self.scored
        data = {
            "ticker": scored.ticker,
            "score": scored.score,
            "grade": scored.gate_outcome.grade.value,
            "engineVersion": self.engine_version,
            "pillars": {name.value: pillar.to_dict() for name, pillar in scored.pillars.items()},
            "gatesApplied": scored.gate_outcome.codes,
            "dataCompleteness": scored.completeness.grade.value,
            "decisionSSOT": self.decision.to_dict(),
            "isIncumbent": self.incumbent,
            "rawScore": round(scored.raw_score, 1),
            "gateDetails": [g.to_dict() for g in scored.gate_outcome.gates],
            "dataCompletenessDetail": scored.completeness.to_dict(),
            "volatilityRegime": scored.regime.to_dict(),
            "missingFields": scored.evidence.missing,
            "upstreamFailures": list(scored.evidence.upstream_failures),
            "calculatedAt": scored.calculated_at.isoformat(),
        }
        if include_analytics:
            data["analytics"] = scored.analytics.to_dict()
        return data
