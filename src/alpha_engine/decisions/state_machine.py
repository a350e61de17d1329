"""
Decision State Machine

Maps (final score, gates, completeness, incumbency) to an action.

New candidate:
- blocking gate fired            → EXIT (stay out)
- score < exit floor             → EXIT
- score >= enter threshold       → ENTER
- otherwise                      → CAUTION

Incumbent:
- blocking gate fired            → EXIT
- score < exit floor             → EXIT
- score >= maintain threshold    → MAINTAIN
- otherwise                      → CAUTION

Completeness:
- GRB raises both thresholds by ``grb_premium`` and lowers confidence
- GRC never ENTERs; a score-driven EXIT is softened to CAUTION because
  the score itself is not trusted

REPLACE and the anti-churn boost need the whole batch and are resolved by
ContinuityBooster on top of these per-ticker decisions.
"""

from typing import Optional

from loguru import logger

from alpha_engine.completeness.grader import CompletenessGrade
from alpha_engine.config.engine_config import DecisionConfig
from alpha_engine.decisions.messages import MAX_TRIGGERS, gate_message, message
from alpha_engine.decisions.models import Action, Decision, DecisionInput


COMPLETENESS_PENALTY = {
    CompletenessGrade.GRA: 0,
    CompletenessGrade.GRB: 10,
    CompletenessGrade.GRC: 25,
}


def _fmt(value: float) -> str:
    return f"{value:g}"


class DecisionStateMachine:
    """
    Per-ticker decision logic.

    Example:
        ```python
        machine = DecisionStateMachine(config.decisions)
        decision = machine.decide(DecisionInput("NVDA", 72, Grade.A))
        ```
    """

    def __init__(self, config: Optional[DecisionConfig] = None):
        self.config = config or DecisionConfig()

    def thresholds(self, completeness: CompletenessGrade) -> tuple[int, int]:
        """Return (enter, maintain) thresholds for a completeness grade."""
        premium = self.config.grb_premium if completeness == CompletenessGrade.GRB else 0
        return self.config.enter_threshold + premium, self.config.maintain_threshold + premium

    def blocking_gates(self, candidate: DecisionInput) -> list[str]:
        return [code for code in candidate.gates if code in self.config.blocking_gates]

    def _confidence(self, base: float, candidate: DecisionInput) -> int:
        value = base - COMPLETENESS_PENALTY[candidate.completeness]
        return int(max(1, min(99, round(value))))

    def _reasons(self, primary: str, candidate: DecisionInput, boost: float = 0.0) -> list[str]:
        reasons = [primary]
        if boost > 0:
            reasons.append(message("boost", boost=_fmt(boost)))
        reasons.extend(gate_message(code) for code in candidate.gates if gate_message(code) not in reasons)
        if candidate.completeness == CompletenessGrade.GRB:
            reasons.append(message("grb"))
        elif candidate.completeness == CompletenessGrade.GRC:
            reasons.append(message("grc"))
        return reasons[:MAX_TRIGGERS]

    def _build(
        self,
        action: Action,
        base_confidence: float,
        primary: str,
        candidate: DecisionInput,
        boost: float = 0.0,
    ) -> Decision:
        return Decision(
            action=action,
            confidence=self._confidence(base_confidence, candidate),
            triggers_kr=self._reasons(primary, candidate, boost),
            boost_amount=boost,
            is_boosted=boost > 0,
        )

    def decide(self, candidate: DecisionInput, boost: float = 0.0) -> Decision:
        """
        Decide the action for one ticker.

        Args:
            candidate: Score, gates, completeness and incumbency
            boost: Anti-churn boost already granted (reported only; the
                displayed score is never changed)

        Returns:
            Decision (never REPLACE; see ContinuityBooster)
        """
        enter, maintain = self.thresholds(candidate.completeness)
        floor = self.config.exit_floor
        score = candidate.score
        grc = candidate.completeness == CompletenessGrade.GRC
        blocking = self.blocking_gates(candidate)

        if blocking:
            decision = self._build(
                Action.EXIT, 80, message("exit_gate", code=blocking[0]), candidate, boost
            )
        elif score < floor:
            if grc:
                decision = self._build(
                    Action.CAUTION, 45, message("caution_grc", score=score), candidate, boost
                )
            else:
                decision = self._build(
                    Action.EXIT,
                    55 + (floor - score) * 2,
                    message("exit_floor", score=score, threshold=floor),
                    candidate,
                    boost,
                )
        elif candidate.is_incumbent:
            if score >= maintain:
                decision = self._build(
                    Action.MAINTAIN,
                    55 + (score - maintain) * 2,
                    message("maintain", score=score, threshold=maintain),
                    candidate,
                    boost,
                )
            else:
                decision = self._build(
                    Action.CAUTION,
                    45,
                    message("caution_incumbent", score=score, threshold=maintain),
                    candidate,
                    boost,
                )
        elif score >= enter and not grc:
            decision = self._build(
                Action.ENTER,
                60 + (score - enter) * 2,
                message("enter", score=score, threshold=enter),
                candidate,
                boost,
            )
        elif grc:
            decision = self._build(Action.CAUTION, 45, message("caution_grc", score=score), candidate, boost)
        else:
            decision = self._build(
                Action.CAUTION,
                45,
                message("caution_new", score=score, threshold=enter),
                candidate,
                boost,
            )

        logger.debug(
            f"{candidate.ticker}: {decision.action.value} (score {score}, "
            f"{candidate.completeness.value}, incumbent={candidate.is_incumbent})"
        )
        return decision

    def replace(
        self,
        candidate: DecisionInput,
        challenger: DecisionInput,
        comparison: float,
        boost: float = 0.0,
    ) -> Decision:
        """Incumbent displaced by a stronger challenger."""
        edge = challenger.score - comparison - self.config.replace_margin
        return self._build(
            Action.REPLACE,
            55 + edge * 2,
            message(
                "replace",
                challenger=challenger.ticker,
                challenger_score=challenger.score,
                comparison=_fmt(comparison),
            ),
            candidate,
            boost,
        )

    def hold_back(self, candidate: DecisionInput) -> Decision:
        """ENTER-eligible candidate left out because no slot opened."""
        return self._build(
            Action.CAUTION, 40, message("waiting", top_n=self.config.top_n), candidate
        )
