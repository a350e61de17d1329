"""
Alpha Engine Exceptions

Only InvalidInvocation is surfaced to callers. Everything else degrades a
single field or contract and is recorded on the result instead of aborting
the ticker.
"""

from typing import Optional


class AlphaEngineError(Exception):
    """Base exception for the alpha engine."""


class InvalidInvocation(AlphaEngineError):
    """Raised when a scoring call cannot be honoured (no ticker, price <= 0)."""

    def __init__(self, message: str, ticker: Optional[str] = None):
        self.ticker = ticker
        super().__init__(message)


class UpstreamError(AlphaEngineError):
    """Classified upstream failure, decides whether a fetch is retried."""

    def __init__(self, message: str, error_type: str, should_retry: bool = True):
        self.message = message
        self.error_type = error_type
        self.should_retry = should_retry
        super().__init__(message)


class UpstreamUnavailable(AlphaEngineError):
    """A data field could not be fetched within the retry budget."""

    def __init__(self, field: str, attempts: int, error_type: str, message: str = ""):
        self.field = field
        self.attempts = attempts
        self.error_type = error_type
        super().__init__(
            f"{field} unavailable after {attempts} attempt(s) ({error_type}): {message}"
        )


class MalformedContract(AlphaEngineError):
    """An option chain record is missing a required field."""

    def __init__(self, message: str, index: Optional[int] = None):
        self.index = index
        super().__init__(message)
