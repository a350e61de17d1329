"""Shared utilities: trading calendar and retry policy."""

from alpha_engine.utils.calendar import TradingCalendar
from alpha_engine.utils.retry import RetryPolicy, classify_error

__all__ = ["TradingCalendar", "RetryPolicy", "classify_error"]
