"""Scoring pipeline: per-ticker stages, result cache and batch report."""

from alpha_engine.pipeline.cache import ResultCache
from alpha_engine.pipeline.engine import AlphaEngine, normalize_ticker, squeeze_from_evidence
from alpha_engine.pipeline.models import ScoredTicker, TickerResult
from alpha_engine.pipeline.report import BatchReport, RankedEntry, build_report

__all__ = [
    "ResultCache",
    "AlphaEngine",
    "normalize_ticker",
    "squeeze_from_evidence",
    "ScoredTicker",
    "TickerResult",
    "BatchReport",
    "RankedEntry",
    "build_report",
]
