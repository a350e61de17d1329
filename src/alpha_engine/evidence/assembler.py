"""
Evidence Assembler

Fetches every upstream field for one ticker through the shared RetryPolicy,
validates the payloads with the pydantic schemas and produces the typed
Evidence record.

Key patterns:
- Each fetch is independent: one field failing never aborts the ticker
- UpstreamUnavailable degrades the field to absent and is recorded in
  ``Evidence.upstream_failures``
- A payload failing schema validation is treated the same way
- The macro snapshot is market-wide and can be fetched once per batch
"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from alpha_engine.errors import UpstreamUnavailable
from alpha_engine.evidence.models import (
    CatalystEvidence,
    Evidence,
    FlowEvidence,
    MacroEvidence,
    PriceEvidence,
    ShortInterestEvidence,
)
from alpha_engine.evidence.normalize import normalize_chain
from alpha_engine.evidence.schemas import (
    RawEvents,
    RawFlow,
    RawMacro,
    RawQuote,
    RawShortInterest,
)
from alpha_engine.evidence.sources import DataSource
from alpha_engine.utils.retry import RetryPolicy


M = TypeVar("M", bound=BaseModel)


class EvidenceAssembler:
    """
    Build Evidence records from a DataSource.

    Example:
        ```python
        assembler = EvidenceAssembler(source, RetryPolicy(max_attempts=3))
        macro, failures = await assembler.fetch_macro()
        evidence = await assembler.assemble("NVDA", macro=macro)
        ```
    """

    def __init__(self, source: DataSource, retry_policy: Optional[RetryPolicy] = None):
        self.source = source
        self.retry_policy = retry_policy or RetryPolicy()

    async def _fetch(self, label: str, func: Callable[[], Awaitable[Any]]) -> tuple[Any, Optional[str]]:
        """Run one fetch under the retry policy; absent on UpstreamUnavailable."""
        try:
            return await self.retry_policy.run(func, label), None
        except UpstreamUnavailable as e:
            logger.warning(f"{e}; treating {label} as absent")
            return None, label

    @staticmethod
    def _parse(model: Type[M], payload: Any, label: str, failures: list[str]) -> Optional[M]:
        if payload is None:
            return None
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Malformed {label} payload ({e.error_count()} errors); treating as absent")
            failures.append(label)
            return None

    async def fetch_macro(self) -> tuple[MacroEvidence, list[str]]:
        """
        Fetch the market-wide snapshot.

        Returns:
            (MacroEvidence, failed labels)
        """
        payload, failed = await self._fetch("macro", self.source.fetch_macro)
        failures = [failed] if failed else []
        raw = self._parse(RawMacro, payload, "macro", failures)
        return self._macro(raw), failures

    async def assemble(
        self,
        ticker: str,
        macro: Optional[MacroEvidence] = None,
        macro_failures: Optional[list[str]] = None,
    ) -> Evidence:
        """
        Assemble evidence for one ticker.

        Args:
            ticker: Underlying symbol
            macro: Pre-fetched market snapshot (fetched here when None)
            macro_failures: Failures recorded while pre-fetching the macro snapshot

        Returns:
            Evidence with every field tagged present/absent
        """
        fetches = {
            "options": lambda: self.source.fetch_options_chain(ticker),
            "quote": lambda: self.source.fetch_quote(ticker),
            "flow": lambda: self.source.fetch_flow(ticker),
            "short_interest": lambda: self.source.fetch_short_interest(ticker),
            "events": lambda: self.source.fetch_events(ticker),
        }
        results = await asyncio.gather(
            *(self._fetch(f"{ticker}.{name}", func) for name, func in fetches.items())
        )
        payloads = {}
        failures = []
        for name, (payload, failed) in zip(fetches, results):
            payloads[name] = payload
            if failed:
                failures.append(failed)

        if macro is None:
            macro, fetched_failures = await self.fetch_macro()
            failures.extend(fetched_failures)
        elif macro_failures:
            failures.extend(macro_failures)

        quote = self._parse(RawQuote, payloads["quote"], f"{ticker}.quote", failures)
        flow = self._parse(RawFlow, payloads["flow"], f"{ticker}.flow", failures)
        short = self._parse(RawShortInterest, payloads["short_interest"], f"{ticker}.short_interest", failures)
        events = self._parse(RawEvents, payloads["events"], f"{ticker}.events", failures)

        evidence = Evidence(
            ticker=ticker,
            price=self._price(quote),
            options=normalize_chain(payloads["options"]),
            flow=self._flow(flow, short, quote),
            short_interest=self._short_interest(short),
            macro=macro,
            catalyst=self._catalyst(events),
            upstream_failures=tuple(failures),
            collected_at=datetime.now(),
        )

        logger.debug(
            f"Assembled evidence for {ticker}: options={evidence.options.status.value}, "
            f"{len(evidence.missing)} missing fields, {len(failures)} upstream failures"
        )
        return evidence

    @staticmethod
    def _price(quote: Optional[RawQuote]) -> PriceEvidence:
        if quote is None:
            return PriceEvidence()

        change = quote.change_pct
        if change is None and quote.last is not None and quote.prev_close:
            change = (quote.last - quote.prev_close) / quote.prev_close * 100

        return PriceEvidence.of(
            last=quote.last,
            prev_close=quote.prev_close,
            vwap=quote.vwap,
            day_volume=quote.day_volume,
            change_pct=change,
            trend_3d_pct=quote.trend_3d_pct,
        )

    @staticmethod
    def _flow(
        flow: Optional[RawFlow],
        short: Optional[RawShortInterest],
        quote: Optional[RawQuote],
    ) -> FlowEvidence:
        relative_volume = flow.relative_volume if flow else None
        if relative_volume is None and quote is not None and quote.day_volume is not None and quote.avg_volume:
            relative_volume = quote.day_volume / quote.avg_volume

        short_volume = flow.short_volume_pct if flow else None
        if short_volume is None and short is not None:
            short_volume = short.short_volume_pct

        return FlowEvidence.of(
            net_flow=flow.net_flow if flow else None,
            dark_pool_pct=flow.dark_pool_pct if flow else None,
            whale_index=flow.whale_index if flow else None,
            block_trades=flow.block_trades if flow else None,
            relative_volume=relative_volume,
            short_volume_pct=short_volume,
        )

    @staticmethod
    def _short_interest(short: Optional[RawShortInterest]) -> ShortInterestEvidence:
        if short is None:
            return ShortInterestEvidence()
        return ShortInterestEvidence.of(
            short_interest_pct=short.short_interest_pct,
            days_to_cover=short.days_to_cover,
            short_interest_change=short.short_interest_change,
        )

    @staticmethod
    def _macro(macro: Optional[RawMacro]) -> MacroEvidence:
        if macro is None:
            return MacroEvidence()
        return MacroEvidence.of(
            index_change_pct=macro.index_change_pct,
            volatility_index=macro.volatility_index,
            volatility_index_change_pct=macro.volatility_index_change_pct,
            rate_proxy_change_pct=macro.rate_proxy_change_pct,
            dollar_proxy_change_pct=macro.dollar_proxy_change_pct,
        )

    @staticmethod
    def _catalyst(events: Optional[RawEvents]) -> CatalystEvidence:
        if events is None:
            return CatalystEvidence()
        return CatalystEvidence.of(
            sentiment=events.sentiment,
            has_earnings=events.has_earnings,
            has_fomc=events.has_fomc,
        )
