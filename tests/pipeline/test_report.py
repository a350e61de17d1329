"""
Unit Tests for the Batch Report

Test cases:
- test_ranking_order: Score desc, ticker asc on ties, rank from 1
- test_top_n_membership: ENTER / MAINTAIN plus incumbent CAUTION, capped at N
- test_continuity_records: Built from Top-N in rank order
- test_to_frame
- test_failures_carried
"""

import pytest

from alpha_engine.analytics.models import OptionsAnalytics
from alpha_engine.completeness.grader import CompletenessGrade, CompletenessReport
from alpha_engine.decisions.models import Action, Decision
from alpha_engine.evidence.models import Evidence
from alpha_engine.gates.engine import grade_for
from alpha_engine.gates.models import GateOutcome
from alpha_engine.pipeline.models import ScoredTicker, TickerResult
from alpha_engine.pipeline.report import build_report
from alpha_engine.regime.classifier import RegimeResult, VolatilityRegime


def make_result(ticker: str, score: int, action: Action, incumbent: bool = False) -> TickerResult:
    scored = ScoredTicker(
        ticker=ticker,
        evidence=Evidence(ticker=ticker),
        analytics=OptionsAnalytics.empty(),
        regime=RegimeResult(score=0.0, regime=VolatilityRegime.CALM),
        pillars={},
        gate_outcome=GateOutcome(raw_score=score, final_score=score, grade=grade_for(score)),
        completeness=CompletenessReport(grade=CompletenessGrade.GRA, present=10, total=10),
    )
    return TickerResult(scored=scored, decision=Decision(action=action, confidence=50), incumbent=incumbent)


@pytest.fixture
def results():
    return [
        make_result("MSFT", 58, Action.CAUTION, incumbent=True),
        make_result("AAPL", 72, Action.ENTER),
        make_result("TSLA", 30, Action.EXIT, incumbent=True),
        make_result("AMZN", 72, Action.ENTER),
        make_result("META", 66, Action.CAUTION),
        make_result("NVDA", 61, Action.MAINTAIN, incumbent=True),
    ]


def test_ranking_order(results):
    report = build_report(results, top_n=3)

    assert [(e.rank, e.ticker) for e in report.ranked] == [
        (1, "AAPL"), (2, "AMZN"), (3, "META"), (4, "NVDA"), (5, "MSFT"), (6, "TSLA"),
    ]
    assert list(report.results) == ["AAPL", "AMZN", "META", "NVDA", "MSFT", "TSLA"]


def test_top_n_membership(results):
    report = build_report(results, top_n=3)

    assert [e.ticker for e in report.top_n] == ["AAPL", "AMZN", "NVDA"]


def test_incumbent_caution_held(results):
    report = build_report(results, top_n=5)

    # META is CAUTION without being held, TSLA is exiting
    assert [e.ticker for e in report.top_n] == ["AAPL", "AMZN", "NVDA", "MSFT"]


def test_continuity_records(results):
    report = build_report(results, top_n=3)

    assert [(r.ticker, r.rank, r.action) for r in report.continuity] == [
        ("AAPL", 1, Action.ENTER),
        ("AMZN", 2, Action.ENTER),
        ("NVDA", 3, Action.MAINTAIN),
    ]


def test_to_frame(results):
    frame = build_report(results, top_n=3).to_frame()

    assert frame.columns == ["rank", "ticker", "score", "grade", "action", "completeness", "incumbent", "boosted"]
    assert frame.height == 6
    assert frame["ticker"][0] == "AAPL"


def test_failures_carried(results):
    report = build_report(results, top_n=3, failures={"BAD": "Invalid underlying price"})

    assert report.to_dict()["failures"] == {"BAD": "Invalid underlying price"}
    assert report.to_dict()["ranked"][0]["dataCompleteness"] == "GRA"
