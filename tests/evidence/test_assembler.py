"""
Unit Tests for EvidenceAssembler

Test cases:
- test_full_payload: Every field present, derived change % and relative volume
- test_missing_payloads_absent: Nothing upstream → every field absent, no failure
- test_failing_field_degrades: Retry budget exhausted → field absent + failure recorded
- test_non_retryable_error_stops: Auth errors are not retried
- test_malformed_payload_recorded
- test_short_volume_fallback: Short volume taken from the short interest payload
- test_prefetched_macro: Macro fetched once per batch and failures carried
"""

import pytest

from alpha_engine.analytics.models import ChainStatus
from alpha_engine.evidence.assembler import EvidenceAssembler
from alpha_engine.evidence.schemas import Sentiment
from alpha_engine.evidence.sources import StaticDataSource
from alpha_engine.utils.retry import RetryPolicy
from tests.fixtures.evidence_fixtures import full_payload


# =============================================================================
# Helpers
# =============================================================================


async def no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def retry_policy():
    return RetryPolicy(max_attempts=3, base_delay=0.2, sleep=no_sleep)


# =============================================================================
# Test Cases
# =============================================================================


@pytest.mark.asyncio
async def test_full_payload(static_source, retry_policy):
    evidence = await EvidenceAssembler(static_source, retry_policy).assemble("NVDA")

    assert evidence.ticker == "NVDA"
    assert evidence.spot == 100.0
    assert evidence.price.change_pct.value == pytest.approx(1.5228, abs=1e-4)
    assert evidence.flow.relative_volume.value == pytest.approx(1.5)
    assert evidence.flow.short_volume_pct.value == 30.0
    assert evidence.options.status == ChainStatus.OK
    assert len(evidence.options.contracts) == 8
    assert evidence.macro.volatility_index.value == 15.0
    assert evidence.catalyst.sentiment.value == Sentiment.POSITIVE
    assert evidence.upstream_failures == ()
    assert evidence.missing == []


@pytest.mark.asyncio
async def test_missing_payloads_absent(retry_policy):
    source = StaticDataSource({})

    evidence = await EvidenceAssembler(source, retry_policy).assemble("ZZZ")

    assert evidence.spot is None
    assert evidence.options.status == ChainStatus.PENDING
    assert not evidence.flow.dark_pool_pct.present
    assert "price.last" in evidence.missing
    assert "options.chain" in evidence.missing
    assert evidence.upstream_failures == ()


@pytest.mark.asyncio
async def test_failing_field_degrades(retry_policy, macro_payload):
    payload = full_payload()
    payload["flow"] = ConnectionError("connection reset by peer")
    source = StaticDataSource({"NVDA": payload}, macro=macro_payload)

    evidence = await EvidenceAssembler(source, retry_policy).assemble("NVDA")

    assert source.calls[("NVDA", "flow")] == 3
    assert evidence.upstream_failures == ("NVDA.flow",)
    assert not evidence.flow.dark_pool_pct.present
    # Relative volume still derived from the quote
    assert evidence.flow.relative_volume.value == pytest.approx(1.5)
    assert evidence.spot == 100.0


@pytest.mark.asyncio
async def test_non_retryable_error_stops(retry_policy):
    source = StaticDataSource({"NVDA": {"quote": PermissionError("403 Forbidden")}})

    evidence = await EvidenceAssembler(source, retry_policy).assemble("NVDA")

    assert source.calls[("NVDA", "quote")] == 1
    assert "NVDA.quote" in evidence.upstream_failures
    assert evidence.spot is None


@pytest.mark.asyncio
async def test_malformed_payload_recorded(retry_policy):
    source = StaticDataSource({"NVDA": {"quote": {"last": 10.0, "vwap": -3}}})

    evidence = await EvidenceAssembler(source, retry_policy).assemble("NVDA")

    assert "NVDA.quote" in evidence.upstream_failures
    assert not evidence.price.last.present


@pytest.mark.asyncio
async def test_short_volume_fallback(retry_policy):
    source = StaticDataSource({"NVDA": {"shortInterest": {"shortInterestPct": 12, "shortVolumePct": 48}}})

    evidence = await EvidenceAssembler(source, retry_policy).assemble("NVDA")

    assert evidence.flow.short_volume_pct.value == 48
    assert evidence.short_interest.short_interest_pct.value == 12


@pytest.mark.asyncio
async def test_prefetched_macro(retry_policy):
    source = StaticDataSource({"A": {}, "B": {}}, macro=TimeoutError("timed out"))
    assembler = EvidenceAssembler(source, retry_policy)

    macro, failures = await assembler.fetch_macro()
    first = await assembler.assemble("A", macro=macro, macro_failures=failures)
    second = await assembler.assemble("B", macro=macro, macro_failures=failures)

    assert source.calls[("*", "macro")] == 3
    assert failures == ["macro"]
    assert first.upstream_failures == ("macro",)
    assert second.upstream_failures == ("macro",)
    assert not first.macro.volatility_index.present
