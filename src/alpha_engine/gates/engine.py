"""
Gate Engine with Priority Ordered Execution

Applies risk overrides to the raw pillar sum.

Key patterns:
- Rule registration: gates registered dynamically, sorted by priority
- All gates evaluated (no first-wins): several may fire together
- Composition: caps first, then penalties and bonuses, then clamp to [0, 100]
- Idempotent: a code appears at most once, so re-registering or repeating
  a gate never changes the result
- Stats tracking: how often each gate fires
"""

import math
from typing import Iterable, Optional, Protocol, runtime_checkable

from loguru import logger

from alpha_engine.config.engine_config import GateConfig, GradeThresholds
from alpha_engine.gates.models import GateEffect, GateOutcome, GateResult, Grade
from alpha_engine.gates.rules import OPTIONAL_RULES, FakePump, GateContext, ShortStorm, WallRejection


@runtime_checkable
class GateRule(Protocol):
    """
    Gate rule protocol.

    Attributes:
        priority: Evaluation order (lower = earlier)
        name: Unique gate code
    """

    priority: int
    name: str

    def evaluate(self, context: GateContext) -> Optional[GateResult]:
        ...


def grade_for(score: float, thresholds: Optional[GradeThresholds] = None) -> Grade:
    """Letter grade of a final score."""
    thresholds = thresholds or GradeThresholds()
    if score >= thresholds.a:
        return Grade.A
    if score >= thresholds.b:
        return Grade.B
    if score >= thresholds.c:
        return Grade.C
    if score >= thresholds.d:
        return Grade.D
    return Grade.F


def compose(raw_score: float, results: Iterable[GateResult]) -> float:
    """
    Combine fired gates into a final score.

    final = clamp(min(raw, caps...) - Σ penalties + Σ bonuses, 0, 100)
    """
    unique: dict[str, GateResult] = {}
    for result in results:
        unique.setdefault(result.code, result)

    capped = raw_score
    for result in unique.values():
        if result.effect == GateEffect.CAP:
            capped = min(capped, result.applied_value)

    penalty = sum(r.applied_value for r in unique.values() if r.effect == GateEffect.PENALTY)
    bonus = sum(r.applied_value for r in unique.values() if r.effect == GateEffect.BONUS)
    return max(0.0, min(100.0, capped - penalty + bonus))


class GateEngine:
    """
    Evaluate gate rules in priority order.

    Example:
        ```python
        engine = GateEngine.default(config.gates, config.grades)
        outcome = engine.apply(raw_score, GateContext(evidence, analytics))
        print(outcome.final_score, outcome.grade, outcome.codes)
        ```
    """

    def __init__(
        self,
        rules: Optional[list[GateRule]] = None,
        grades: Optional[GradeThresholds] = None,
    ):
        self._rules: list[GateRule] = []
        self._stats: dict[str, int] = {}
        self.grades = grades or GradeThresholds()

        if rules:
            for rule in rules:
                self.register_rule(rule)

        logger.debug("GateEngine initialized")

    @classmethod
    def default(
        cls,
        config: Optional[GateConfig] = None,
        grades: Optional[GradeThresholds] = None,
    ) -> "GateEngine":
        """
        Engine with WALL_REJECTION, FAKE_PUMP and SHORT_STORM.

        Opt-in gates named in ``config.extra_gates`` are registered after them.

        Raises:
            ValueError: If an extra gate name is unknown
        """
        config = config or GateConfig()
        rules = [WallRejection(config), FakePump(config), ShortStorm(config)]
        for name in config.extra_gates:
            if name not in OPTIONAL_RULES:
                raise ValueError(f"Unknown gate: {name}")
            rules.append(OPTIONAL_RULES[name](config))
        return cls(rules, grades=grades)

    def register_rule(self, rule: GateRule) -> None:
        """
        Register a gate; a gate with the same name is replaced.

        Raises:
            ValueError: If priority is < 1
        """
        if rule.priority < 1:
            raise ValueError(f"Gate priority must be >= 1, got {rule.priority}")

        self._rules = [r for r in self._rules if r.name != rule.name]
        self._rules.append(rule)
        self._rules.sort(key=lambda r: r.priority)
        self._stats.setdefault(rule.name, 0)

        logger.debug(f"Registered gate: {rule.name} (priority {rule.priority}, {len(self._rules)} total)")

    @property
    def rules(self) -> list[GateRule]:
        return list(self._rules)

    def apply(self, raw_score: float, context: GateContext) -> GateOutcome:
        """
        Evaluate every gate and compose the final score.

        Args:
            raw_score: Sum of pillar scores
            context: Evidence and analytics of the ticker

        Returns:
            GateOutcome with integer final score, grade and fired gates in order
        """
        fired: list[GateResult] = []
        for rule in self._rules:
            result = rule.evaluate(context)
            if result is None or any(f.code == result.code for f in fired):
                continue
            fired.append(result)
            self._stats[rule.name] = self._stats.get(rule.name, 0) + 1
            logger.info(
                f"Gate fired: {result.code} on {context.evidence.ticker} "
                f"({result.effect.value} {result.applied_value}): {result.reason}"
            )

        final = math.floor(compose(raw_score, fired) + 0.5)
        return GateOutcome(
            raw_score=raw_score,
            final_score=final,
            grade=grade_for(final, self.grades),
            gates=fired,
        )

    def get_rule_stats(self) -> dict[str, int]:
        """Return a copy of per-gate firing counts."""
        return dict(self._stats)

    def reset_stats(self) -> None:
        for name in self._stats:
            self._stats[name] = 0
