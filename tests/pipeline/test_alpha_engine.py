"""
Integration Tests for AlphaEngine

Test cases:
- test_score_evidence_full: Fixture ticker scores 65 / B / GRA
- test_score_evidence_rejects_bad_input: Empty ticker or price <= 0
- test_no_price_zero_fills_analytics
- test_fake_pump_blocks_entry
- test_score_ticker: End to end through the data source
- test_concurrent_calls_share_result: Two near-simultaneous calls, one fetch
- test_upstream_failure_degrades_field
- test_hung_fetch_degrades_field: A fetch that never returns times out instead of stalling
- test_score_batch: Failures collected, incumbents held, Top-N and continuity
- test_batch_survives_garbage_chain: A non-list chain payload never aborts the batch
- test_batch_output_contract: Field names consumed by report layers
"""

import asyncio
from dataclasses import replace

import pytest

from alpha_engine.analytics.models import ChainStatus
from alpha_engine.completeness.grader import CompletenessGrade
from alpha_engine.config.engine_config import EngineConfig, RetryConfig
from alpha_engine.decisions.models import Action, ContinuityRecord
from alpha_engine.errors import InvalidInvocation
from alpha_engine.evidence.models import Evidence, FlowEvidence, PriceEvidence, Signal
from alpha_engine.evidence.sources import StaticDataSource
from alpha_engine.gates.models import Grade
from alpha_engine.pipeline.engine import AlphaEngine, normalize_ticker
from alpha_engine.regime.classifier import VolatilityRegime
from alpha_engine.version import ENGINE_VERSION
from tests.fixtures.chain_fixtures import RUN_DATE
from tests.fixtures.evidence_fixtures import full_payload


class HangingFlowSource(StaticDataSource):
    """Flow endpoint that never answers."""

    async def fetch_flow(self, ticker: str):
        self.calls[(ticker.upper(), "flow")] += 1
        await asyncio.sleep(3600)


@pytest.fixture
def engine(static_source, fast_config):
    return AlphaEngine(static_source, config=fast_config, today=lambda: RUN_DATE)


# =============================================================================
# score_evidence
# =============================================================================


def test_score_evidence_full(engine, full_evidence):
    scored = engine.score_evidence(full_evidence)

    assert scored.ticker == "TEST"
    assert scored.raw_score == pytest.approx(65.1)
    assert scored.score == 65
    assert scored.gate_outcome.grade == Grade.B
    assert scored.gate_outcome.codes == []
    assert scored.completeness.grade == CompletenessGrade.GRA
    assert scored.analytics.squeeze.score == 5
    assert scored.regime.regime == VolatilityRegime.CALM


@pytest.mark.parametrize("ticker", ["", "   "])
def test_score_evidence_rejects_empty_ticker(engine, ticker):
    with pytest.raises(InvalidInvocation):
        engine.score_evidence(Evidence(ticker=ticker))


@pytest.mark.parametrize("last", [0.0, -12.5])
def test_score_evidence_rejects_bad_price(engine, full_evidence, last):
    evidence = replace(full_evidence, price=replace(full_evidence.price, last=Signal(last)))

    with pytest.raises(InvalidInvocation) as exc_info:
        engine.score_evidence(evidence)
    assert exc_info.value.ticker == "TEST"


def test_no_price_zero_fills_analytics(engine):
    scored = engine.score_evidence(Evidence(ticker="nop"))

    assert scored.ticker == "NOP"
    assert scored.analytics.has_chain is False
    assert scored.score == 0
    assert scored.gate_outcome.grade == Grade.F
    assert scored.completeness.grade == CompletenessGrade.GRC


def test_fake_pump_blocks_entry(engine, full_evidence):
    pumped = replace(
        full_evidence,
        price=PriceEvidence.of(last=100.0, prev_close=92.0, vwap=99.2, change_pct=8.7, trend_3d_pct=4.2),
        flow=FlowEvidence.of(relative_volume=1.5, short_volume_pct=30.0),
    )

    scored = engine.score_evidence(pumped)
    decision = engine.state_machine.decide(scored.decision_input())

    assert scored.gate_outcome.codes == ["FAKE_PUMP"]
    assert scored.score <= 45
    assert decision.action == Action.EXIT


def test_normalize_ticker():
    assert normalize_ticker(" nvda ") == "NVDA"
    with pytest.raises(InvalidInvocation):
        normalize_ticker(None)


# =============================================================================
# score_ticker
# =============================================================================


@pytest.mark.asyncio
async def test_score_ticker(engine):
    result = await engine.score_ticker("nvda")

    assert result.ticker == "NVDA"
    assert result.score == 65
    assert result.decision.action == Action.ENTER
    assert result.decision.confidence == 60
    assert result.incumbent is False


@pytest.mark.asyncio
async def test_score_ticker_incumbent(engine):
    previous = ContinuityRecord("NVDA", 1, 70, Action.MAINTAIN)

    result = await engine.score_ticker("NVDA", previous=previous)

    assert result.incumbent is True
    assert result.decision.action == Action.MAINTAIN


@pytest.mark.asyncio
async def test_score_ticker_invalid(engine):
    with pytest.raises(InvalidInvocation):
        await engine.score_ticker("BAD")
    with pytest.raises(InvalidInvocation):
        await engine.score_ticker("")


@pytest.mark.asyncio
async def test_concurrent_calls_share_result(engine, static_source):
    first, second = await asyncio.gather(engine.score_ticker("NVDA"), engine.score_ticker("NVDA"))

    assert first.scored is second.scored
    assert static_source.calls[("NVDA", "quote")] == 1
    assert static_source.calls[("*", "macro")] == 1


@pytest.mark.asyncio
async def test_upstream_failure_degrades_field(fast_config, macro_payload):
    payload = full_payload()
    payload["flow"] = ConnectionError("connection reset by peer")
    source = StaticDataSource({"NVDA": payload}, macro=macro_payload)
    engine = AlphaEngine(source, config=fast_config, today=lambda: RUN_DATE)

    result = await engine.score_ticker("NVDA")

    assert source.calls[("NVDA", "flow")] == fast_config.retry.max_attempts
    assert result.scored.evidence.upstream_failures == ("NVDA.flow",)
    assert result.scored.completeness.grade == CompletenessGrade.GRC
    assert result.decision.action != Action.ENTER
    assert "NVDA.flow" in result.to_dict()["upstreamFailures"]


@pytest.mark.asyncio
async def test_hung_fetch_degrades_field(macro_payload):
    config = EngineConfig(retry=RetryConfig(max_attempts=2, base_delay=0.0, attempt_timeout=0.05))
    source = HangingFlowSource({"NVDA": full_payload()}, macro=macro_payload)
    engine = AlphaEngine(source, config=config, today=lambda: RUN_DATE)

    result = await asyncio.wait_for(engine.score_ticker("NVDA"), timeout=5)

    assert source.calls[("NVDA", "flow")] == 2
    assert result.scored.evidence.upstream_failures == ("NVDA.flow",)
    assert result.scored.evidence.flow.dark_pool_pct.present is False
    assert result.decision.action != Action.ENTER


# =============================================================================
# score_batch
# =============================================================================


@pytest.mark.asyncio
async def test_score_batch(engine, static_source):
    previous = [
        ContinuityRecord("WEAK", 1, 50, Action.MAINTAIN),
        ContinuityRecord("GONE", 2, 61, Action.MAINTAIN),
    ]

    report = await engine.score_batch(["nvda", " weak ", "", "BAD", "NVDA"], previous=previous)

    assert set(report.results) == {"NVDA", "WEAK"}
    assert set(report.failures) == {"", "BAD"}
    assert static_source.calls[("*", "macro")] == 1

    nvda, weak = report.results["NVDA"], report.results["WEAK"]
    assert nvda.decision.action == Action.ENTER
    assert weak.incumbent is True
    assert weak.scored.completeness.grade == CompletenessGrade.GRC
    # GRC incumbent below the exit floor is softened, not exited
    assert weak.decision.action == Action.CAUTION

    assert [e.ticker for e in report.ranked] == ["NVDA", "WEAK"]
    assert [e.ticker for e in report.top_n] == ["NVDA", "WEAK"]
    assert [(r.ticker, r.rank) for r in report.continuity] == [("NVDA", 1), ("WEAK", 2)]


@pytest.mark.asyncio
async def test_batch_output_contract(engine):
    report = await engine.score_batch(["NVDA"])

    data = report.to_dict()
    result = data["results"]["NVDA"]

    assert data["engineVersion"] == ENGINE_VERSION
    assert {
        "ticker", "score", "grade", "engineVersion", "pillars", "gatesApplied",
        "dataCompleteness", "decisionSSOT",
    } <= set(result)
    assert result["score"] == 65
    assert result["grade"] == "B"
    assert result["dataCompleteness"] == "GRA"
    assert result["decisionSSOT"]["action"] == "ENTER"
    assert "analytics" not in result
    assert set(result["pillars"]) == {"momentum", "structure", "flow", "regime", "catalyst"}
    assert data["continuity"] == [{"ticker": "NVDA", "rank": 1, "score": 65, "action": "ENTER"}]


@pytest.mark.asyncio
async def test_empty_batch(engine):
    report = await engine.score_batch([])

    assert report.results == {}
    assert report.top_n == []
    assert report.to_frame().height == 0


@pytest.mark.asyncio
async def test_batch_survives_garbage_chain(fast_config, macro_payload):
    garbage = full_payload()
    garbage["options"] = 42
    source = StaticDataSource({"NVDA": garbage, "AAPL": full_payload()}, macro=macro_payload)
    engine = AlphaEngine(source, config=fast_config, today=lambda: RUN_DATE)

    report = await engine.score_batch(["NVDA", "AAPL"])

    assert set(report.results) == {"NVDA", "AAPL"}
    assert report.failures == {}
    nvda = report.results["NVDA"].scored
    assert nvda.evidence.options.status == ChainStatus.PENDING
    assert nvda.analytics.has_chain is False
    assert report.results["AAPL"].score == 65
