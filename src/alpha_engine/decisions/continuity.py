"""
Continuity / Anti-Churn Booster

Resolves batch-level actions on top of per-ticker decisions:

1. Holders: incumbents whose decision is MAINTAIN or CAUTION occupy Top-N slots
2. Challengers: non-incumbents whose decision is ENTER, strongest first
3. Challengers fill free slots first; when every challenger fits, nobody
   is contested and nobody is boosted
4. Boost: when a remaining challenger contests the holders, each holder
   within ``boost_band`` of that challenger's replacement line
   (challenger score - ``replace_margin``) gets
   ``min(max_boost, enter_threshold - score)`` on its comparison score,
   never negative, so a boost alone cannot lift a holder past the ENTER bar
5. The contesting challenger displaces the weakest holder (lowest
   comparison score) when it beats it by at least ``replace_margin``, at
   most ``max_replacements_per_run`` times; GRC holders are never contested
6. Challengers left without a slot are held back as CAUTION

Cross-run state enters only through the previous run's ContinuityRecords,
passed in explicitly. Records for tickers outside the current universe are
ignored.
"""

from typing import Iterable, Optional, Sequence

from loguru import logger

from alpha_engine.completeness.grader import CompletenessGrade
from alpha_engine.config.engine_config import DecisionConfig
from alpha_engine.decisions.models import Action, ContinuityRecord, Decision, DecisionInput
from alpha_engine.decisions.state_machine import DecisionStateMachine


HOLDING_ACTIONS = (Action.MAINTAIN, Action.CAUTION)


def match_previous(
    tickers: Iterable[str],
    previous: Sequence[ContinuityRecord],
) -> dict[str, ContinuityRecord]:
    """
    Map current tickers to their previous-run records.

    Records referencing tickers absent from the current universe are dropped.
    """
    universe = set(tickers)
    matched = {}
    for record in previous:
        if record.ticker in universe:
            matched[record.ticker] = record
        else:
            logger.debug(f"Ignoring continuity record for {record.ticker}: not in current universe")
    return matched


class ContinuityBooster:
    """
    Stabilize Top-N membership across runs.

    Example:
        ```python
        booster = ContinuityBooster(config.decisions)
        decisions = booster.resolve(candidates)
        ```
    """

    def __init__(
        self,
        config: Optional[DecisionConfig] = None,
        state_machine: Optional[DecisionStateMachine] = None,
    ):
        self.config = config or DecisionConfig()
        self.machine = state_machine or DecisionStateMachine(self.config)

    def boost_amount(self, score: float, replacement_line: float) -> float:
        """
        Anti-churn boost for one holder.

        Args:
            score: Holder's displayed score
            replacement_line: Strongest challenger score - replace_margin

        Returns:
            Boost in [0, max_boost], never lifting score above the enter threshold
        """
        if abs(score - replacement_line) > self.config.boost_band:
            return 0.0
        headroom = self.config.enter_threshold - score
        return float(min(self.config.max_boost, max(0, headroom)))

    def resolve(self, candidates: list[DecisionInput]) -> dict[str, Decision]:
        """
        Decide every ticker of a batch.

        Args:
            candidates: One DecisionInput per ticker of the current run

        Returns:
            Decision per ticker
        """
        decisions = {c.ticker: self.machine.decide(c) for c in candidates}

        holders = [
            c for c in candidates
            if c.is_incumbent and decisions[c.ticker].action in HOLDING_ACTIONS
        ]
        challengers = sorted(
            (c for c in candidates if not c.is_incumbent and decisions[c.ticker].action == Action.ENTER),
            key=lambda c: (-c.score, c.ticker),
        )

        free_slots = max(0, self.config.top_n - len(holders))
        waiting = challengers[free_slots:]
        if not waiting:
            return decisions

        replaceable = [h for h in holders if h.completeness != CompletenessGrade.GRC]
        boosts: dict[str, float] = {}
        replacements = 0

        for challenger in waiting:
            if replacements < self.config.max_replacements_per_run and replaceable:
                # holders are boosted against the first challenger that contests them
                line = challenger.score - self.config.replace_margin
                for holder in replaceable:
                    if holder.ticker not in boosts:
                        boosts[holder.ticker] = self.boost_amount(holder.score, line)

                weakest = min(replaceable, key=lambda h: (h.score + boosts[h.ticker], h.ticker))
                comparison = weakest.score + boosts[weakest.ticker]
                if challenger.score - comparison >= self.config.replace_margin:
                    decisions[weakest.ticker] = self.machine.replace(
                        weakest, challenger, comparison, boosts[weakest.ticker]
                    )
                    replaceable.remove(weakest)
                    replacements += 1
                    logger.info(
                        f"REPLACE {weakest.ticker} ({comparison:g}) "
                        f"with {challenger.ticker} ({challenger.score})"
                    )
                    continue

            decisions[challenger.ticker] = self.machine.hold_back(challenger)
            logger.debug(f"{challenger.ticker} held back: no Top-{self.config.top_n} slot")

        for holder in replaceable:
            boost = boosts.get(holder.ticker, 0.0)
            if boost > 0:
                decisions[holder.ticker] = self.machine.decide(holder, boost=boost)
                logger.info(f"Continuity boost +{boost:g} for {holder.ticker} (score {holder.score})")

        return decisions
