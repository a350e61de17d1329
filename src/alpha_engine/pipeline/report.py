"""
Batch report.

Ranks every scored ticker (score desc, ticker asc), derives the Top-N
summary and the ContinuityRecords the next run receives.

Top-N membership: ENTER and MAINTAIN tickers plus incumbents on CAUTION
(still held, under watch), in rank order.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

import polars as pl

from alpha_engine.decisions.models import Action, ContinuityRecord
from alpha_engine.pipeline.models import TickerResult
from alpha_engine.version import ENGINE_VERSION


RANK_SCHEMA = {
    "ticker": pl.Utf8,
    "score": pl.Int64,
    "grade": pl.Utf8,
    "action": pl.Utf8,
    "completeness": pl.Utf8,
    "incumbent": pl.Boolean,
    "boosted": pl.Boolean,
}


@dataclass(slots=True)
class RankedEntry:
    """One row of the ranked list."""

    rank: int
    ticker: str
    score: int
    grade: str
    action: str
    completeness: str
    incumbent: bool
    boosted: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "ticker": self.ticker,
            "score": self.score,
            "grade": self.grade,
            "action": self.action,
            "dataCompleteness": self.completeness,
            "isIncumbent": self.incumbent,
            "isBoosted": self.boosted,
        }


@dataclass(slots=True)
class BatchReport:
    """Output of one batch run."""

    results: dict[str, TickerResult]
    ranked: list[RankedEntry]
    top_n: list[RankedEntry]
    continuity: list[ContinuityRecord]
    failures: dict[str, str] = field(default_factory=dict)
    engine_version: str = ENGINE_VERSION
    generated_at: datetime = field(default_factory=datetime.now)

    def to_frame(self) -> pl.DataFrame:
        """Ranked list as a polars DataFrame."""
        return pl.DataFrame(
            [asdict(entry) for entry in self.ranked],
            schema={"rank": pl.Int64, **RANK_SCHEMA},
        )

    def to_dict(self, include_analytics: bool = False) -> dict[str, Any]:
        return {
            "engineVersion": self.engine_version,
            "generatedAt": self.generated_at.isoformat(),
            "ranked": [entry.to_dict() for entry in self.ranked],
            "topN": [entry.to_dict() for entry in self.top_n],
            "results": {
                ticker: result.to_dict(include_analytics=include_analytics)
                for ticker, result in self.results.items()
            },
            "failures": dict(self.failures),
            "continuity": [record.to_dict() for record in self.continuity],
        }


def rank_frame(results: list[TickerResult]) -> pl.DataFrame:
    """Ranked polars frame: score desc, ticker asc, rank from 1."""
    frame = pl.DataFrame(
        {
            "ticker": [r.ticker for r in results],
            "score": [r.score for r in results],
            "grade": [r.scored.gate_outcome.grade.value for r in results],
            "action": [r.decision.action.value for r in results],
            "completeness": [r.scored.completeness.grade.value for r in results],
            "incumbent": [r.incumbent for r in results],
            "boosted": [r.decision.is_boosted for r in results],
        },
        schema=RANK_SCHEMA,
    )
    return frame.sort(["score", "ticker"], descending=[True, False]).with_row_index("rank", offset=1)


def build_report(
    results: list[TickerResult],
    top_n: int,
    failures: Optional[dict[str, str]] = None,
) -> BatchReport:
    """
    Rank results and derive the Top-N summary and next-run continuity.

    Args:
        results: Decided tickers of this run
        top_n: Number of Top-N slots
        failures: Tickers rejected as invalid invocations

    Returns:
        BatchReport
    """
    frame = rank_frame(results)
    ranked = [
        RankedEntry(**{**row, "rank": int(row["rank"])})
        for row in frame.iter_rows(named=True)
    ]

    holding = frame.filter(
        pl.col("action").is_in([Action.ENTER.value, Action.MAINTAIN.value])
        | ((pl.col("action") == Action.CAUTION.value) & pl.col("incumbent"))
    ).head(top_n)
    held = set(holding["ticker"].to_list())
    top = [entry for entry in ranked if entry.ticker in held]

    continuity = [
        ContinuityRecord(ticker=entry.ticker, rank=position, score=entry.score, action=Action(entry.action))
        for position, entry in enumerate(top, start=1)
    ]

    by_ticker = {r.ticker: r for r in results}
    return BatchReport(
        results={entry.ticker: by_ticker[entry.ticker] for entry in ranked},
        ranked=ranked,
        top_n=top,
        continuity=continuity,
        failures=dict(failures or {}),
    )
