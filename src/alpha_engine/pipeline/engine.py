"""
Alpha Engine Pipeline

Runs the per-ticker stages strictly in order:

    Evidence → Analytics → Regime → Pillars → Gates → Completeness
                                                    ↓
                           (batch) Decision State Machine + Continuity Booster

Tickers of a batch are independent and dispatched concurrently through a
bounded semaphore; nothing mutable is shared between them. Per-ticker
results are cached for a short epoch so near-simultaneous callers see the
same score.

Usage:
    engine = AlphaEngine(source, config=load_config())
    result = await engine.score_ticker("NVDA")
    report = await engine.score_batch(["NVDA", "AAPL", "TSLA"], previous=records)
"""

import asyncio
from datetime import date
from typing import Callable, Iterable, Optional, Sequence

from loguru import logger

from alpha_engine.analytics.chain import analyze_chain
from alpha_engine.analytics.models import OptionsAnalytics, SqueezeRisk
from alpha_engine.analytics.squeeze import squeeze_score
from alpha_engine.completeness.grader import grade_completeness
from alpha_engine.config.engine_config import EngineConfig
from alpha_engine.decisions.continuity import ContinuityBooster, match_previous
from alpha_engine.decisions.models import ContinuityRecord
from alpha_engine.decisions.state_machine import DecisionStateMachine
from alpha_engine.errors import InvalidInvocation
from alpha_engine.evidence.assembler import EvidenceAssembler
from alpha_engine.evidence.models import Evidence, MacroEvidence
from alpha_engine.evidence.sources import DataSource
from alpha_engine.gates.engine import GateEngine
from alpha_engine.gates.rules import GateContext
from alpha_engine.pipeline.cache import ResultCache
from alpha_engine.pipeline.models import ScoredTicker, TickerResult
from alpha_engine.pipeline.report import BatchReport, build_report
from alpha_engine.regime.classifier import VolatilityRegimeClassifier
from alpha_engine.scoring.pillars import PillarScorer
from alpha_engine.utils.calendar import TradingCalendar
from alpha_engine.utils.retry import RetryPolicy


def normalize_ticker(ticker) -> str:
    """
    Validate and normalize a ticker symbol.

    Raises:
        InvalidInvocation: If the ticker is missing or blank
    """
    if ticker is None or not str(ticker).strip():
        raise InvalidInvocation("Ticker is required")
    return str(ticker).strip().upper()


def squeeze_from_evidence(evidence: Evidence) -> Optional[SqueezeRisk]:
    """Squeeze risk from short interest / short volume, None when nothing is known."""
    si = evidence.short_interest
    inputs = {
        "short_interest_pct": si.short_interest_pct.value,
        "days_to_cover": si.days_to_cover.value,
        "short_interest_change": si.short_interest_change.value,
        "short_volume_pct": evidence.flow.short_volume_pct.value,
    }
    if all(value is None for value in inputs.values()):
        return None
    return squeeze_score(**inputs)


class AlphaEngine:
    """
    Score tickers end to end.

    Attributes:
        config: Engine configuration
        assembler: Evidence assembler over the injected data source
        cache: Per-ticker result cache
    """

    def __init__(
        self,
        source: DataSource,
        config: Optional[EngineConfig] = None,
        calendar: Optional[TradingCalendar] = None,
        cache: Optional[ResultCache] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize the engine.

        Args:
            source: Upstream data capability
            config: Engine configuration (default: built-in thresholds)
            calendar: Trading calendar for DTE (default: NYSE)
            cache: Result cache (default: ttl from config)
            today: Date provider, injectable for replays and tests
        """
        self.config = config or EngineConfig()
        retry = self.config.retry
        self.assembler = EvidenceAssembler(
            source,
            RetryPolicy(
                max_attempts=retry.max_attempts,
                base_delay=retry.base_delay,
                max_delay=retry.max_delay,
                jitter=retry.jitter,
                attempt_timeout=retry.attempt_timeout,
            ),
        )
        self.calendar = calendar or TradingCalendar()
        self.cache = cache or ResultCache(ttl=self.config.runtime.cache_ttl)
        self.scorer = PillarScorer()
        self.regime_classifier = VolatilityRegimeClassifier()
        self.gate_engine = GateEngine.default(self.config.gates, self.config.grades)
        self.state_machine = DecisionStateMachine(self.config.decisions)
        self.booster = ContinuityBooster(self.config.decisions, self.state_machine)
        self._today = today or date.today

        logger.debug(
            f"AlphaEngine initialized (workers={self.config.runtime.max_workers}, "
            f"cache_ttl={self.config.runtime.cache_ttl}s)"
        )

    # ------------------------------------------------------------------
    # Pure stage chain
    # ------------------------------------------------------------------

    def score_evidence(self, evidence: Evidence, today: Optional[date] = None) -> ScoredTicker:
        """
        Run analytics, regime, pillars, gates and completeness on evidence.

        Args:
            evidence: Assembled evidence
            today: Run date for DTE (default: engine's date provider)

        Returns:
            ScoredTicker

        Raises:
            InvalidInvocation: Missing ticker or underlying price <= 0
        """
        ticker = normalize_ticker(evidence.ticker)
        spot = evidence.spot
        if spot is not None and spot <= 0:
            raise InvalidInvocation(f"Invalid underlying price for {ticker}: {spot}", ticker=ticker)

        squeeze = squeeze_from_evidence(evidence)
        if spot is None:
            logger.warning(f"{ticker}: no underlying price, options analytics skipped")
            analytics = OptionsAnalytics.empty(squeeze)
        else:
            analytics = analyze_chain(
                list(evidence.options.contracts),
                spot,
                today=today or self._today(),
                calendar=self.calendar,
                squeeze=squeeze,
            )

        regime = self.regime_classifier.classify(analytics, spot or 0.0)
        pillars = self.scorer.score(evidence, analytics)
        raw_score = sum(p.score for p in pillars.values())
        outcome = self.gate_engine.apply(raw_score, GateContext(evidence, analytics))
        completeness = grade_completeness(evidence)

        logger.info(
            f"Scored {ticker}: raw {raw_score:.1f} → {outcome.final_score} ({outcome.grade.value}), "
            f"gates={outcome.codes or '-'}, {completeness.grade.value}, regime {regime.regime.value}"
        )

        return ScoredTicker(
            ticker=ticker,
            evidence=evidence,
            analytics=analytics,
            regime=regime,
            pillars=pillars,
            gate_outcome=outcome,
            completeness=completeness,
        )

    # ------------------------------------------------------------------
    # Async entry points
    # ------------------------------------------------------------------

    async def _compute(
        self,
        ticker: str,
        macro: Optional[MacroEvidence],
        macro_failures: Optional[list[str]],
    ) -> ScoredTicker:
        evidence = await self.assembler.assemble(ticker, macro=macro, macro_failures=macro_failures)
        return self.score_evidence(evidence)

    async def _scored(
        self,
        ticker: str,
        macro: Optional[MacroEvidence] = None,
        macro_failures: Optional[list[str]] = None,
    ) -> ScoredTicker:
        return await self.cache.get_or_compute(
            ticker, lambda: self._compute(ticker, macro, macro_failures)
        )

    async def score_ticker(
        self,
        ticker: str,
        previous: Optional[ContinuityRecord] = None,
    ) -> TickerResult:
        """
        Score and decide a single ticker.

        Args:
            ticker: Underlying symbol
            previous: Previous-run record for this ticker, if it was held

        Returns:
            TickerResult (no REPLACE: replacement needs a batch)

        Raises:
            InvalidInvocation: Missing ticker or underlying price <= 0
        """
        ticker = normalize_ticker(ticker)
        scored = await self._scored(ticker)

        if previous is not None and previous.ticker != ticker:
            logger.debug(f"Ignoring continuity record for {previous.ticker} when scoring {ticker}")
            previous = None

        decision = self.state_machine.decide(scored.decision_input(previous))
        return TickerResult(scored=scored, decision=decision, incumbent=previous is not None)

    async def score_batch(
        self,
        tickers: Iterable[str],
        previous: Sequence[ContinuityRecord] = (),
    ) -> BatchReport:
        """
        Score a universe of tickers and resolve batch-level decisions.

        Invalid tickers are collected in ``failures``; every other ticker
        always yields a result.

        Args:
            tickers: Universe of this run
            previous: Previous run's ContinuityRecords (read-only)

        Returns:
            BatchReport with ranked list, Top-N and next-run continuity
        """
        failures: dict[str, str] = {}
        universe: list[str] = []
        for raw in tickers:
            try:
                ticker = normalize_ticker(raw)
            except InvalidInvocation as e:
                failures[str(raw)] = str(e)
                continue
            if ticker not in universe:
                universe.append(ticker)

        macro, macro_failures = await self.assembler.fetch_macro()
        semaphore = asyncio.Semaphore(self.config.runtime.max_workers)

        async def run(ticker: str) -> ScoredTicker:
            async with semaphore:
                return await self._scored(ticker, macro, macro_failures)

        outcomes = await asyncio.gather(*(run(t) for t in universe), return_exceptions=True)

        scored: list[ScoredTicker] = []
        for ticker, outcome in zip(universe, outcomes):
            if isinstance(outcome, InvalidInvocation):
                logger.warning(f"Rejected {ticker}: {outcome}")
                failures[ticker] = str(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                scored.append(outcome)

        matched = match_previous([s.ticker for s in scored], previous)
        candidates = [s.decision_input(matched.get(s.ticker)) for s in scored]
        decisions = self.booster.resolve(candidates)

        results = [
            TickerResult(scored=s, decision=decisions[s.ticker], incumbent=s.ticker in matched)
            for s in scored
        ]
        report = build_report(results, self.config.decisions.top_n, failures)

        logger.info(
            f"Batch complete: {len(results)} scored, {len(failures)} rejected, "
            f"top {self.config.decisions.top_n}: {[e.ticker for e in report.top_n]}"
        )
        return report
