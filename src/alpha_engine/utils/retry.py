"""
Retry policy for upstream fetches.

One injectable policy replaces per-helper retry loops: bounded attempts,
exponential backoff doubling from base_delay, optional jitter, and a hard
delay ceiling. Errors are classified first so auth/not-found failures stop
immediately instead of burning the budget.
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from loguru import logger

from alpha_engine.errors import UpstreamError, UpstreamUnavailable


T = TypeVar("T")


def classify_error(error: Exception) -> UpstreamError:
    """
    Classify an exception to determine retry strategy.

    Args:
        error: The exception raised by the data source

    Returns:
        UpstreamError with error type and retry flag
    """
    if isinstance(error, UpstreamError):
        return error

    if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return UpstreamError(str(error) or type(error).__name__, error_type="connection")

    error_str = str(error).lower()

    # Network/connection errors - always retry
    if any(term in error_str for term in [
        "timeout", "timed out", "connection", "network", "socket", "reset by peer"
    ]):
        return UpstreamError(str(error), error_type="connection", should_retry=True)

    # Authentication errors - don't retry (need fix)
    if any(term in error_str for term in [
        "auth", "unauthorized", "forbidden", "401", "403"
    ]):
        return UpstreamError(str(error), error_type="auth", should_retry=False)

    # Unknown symbol - expected for delisted tickers, don't retry
    if any(term in error_str for term in ["not found", "404", "unknown symbol"]):
        return UpstreamError(str(error), error_type="not_found", should_retry=False)

    # Rate limiting - retry with backoff
    if any(term in error_str for term in ["rate limit", "429", "too many requests"]):
        return UpstreamError(str(error), error_type="rate_limit", should_retry=True)

    # No data available - might be temporary, retry
    if "no data" in error_str:
        return UpstreamError(str(error), error_type="no_data", should_retry=True)

    # Unknown errors - retry with caution
    return UpstreamError(str(error), error_type="unknown", should_retry=True)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff.

    Delay before retry n (1-based) is ``base_delay * 2 ** (n - 1)`` plus a
    uniform jitter in ``[0, jitter]``, capped at ``max_delay``. With the
    defaults a field gets 3 attempts spaced 0.2s and 0.4s apart.
    Each attempt is bounded by ``attempt_timeout``; an attempt that does not
    finish in time counts as a retryable connection failure.

    Attributes:
        max_attempts: Total attempts including the first call
        base_delay: Delay before the first retry (seconds)
        max_delay: Ceiling for a single delay (seconds)
        jitter: Upper bound of the random component added to each delay
        attempt_timeout: Seconds a single attempt may take (None: unbounded)
        sleep: Awaitable sleep, injectable for tests
    """

    max_attempts: int = 3
    base_delay: float = 0.2
    max_delay: float = 5.0
    jitter: float = 0.0
    attempt_timeout: Optional[float] = 10.0
    sleep: Callable[[float], Awaitable[None]] = field(
        default=asyncio.sleep, repr=False, compare=False
    )

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0 or self.max_delay < 0 or self.jitter < 0:
            raise ValueError("Retry delays must be non-negative")
        if self.attempt_timeout is not None and self.attempt_timeout <= 0:
            raise ValueError(f"attempt_timeout must be > 0, got {self.attempt_timeout}")

    def delay_for(self, retry: int) -> float:
        """Return the delay before retry number ``retry`` (1-based)."""
        delay = self.base_delay * (2 ** (retry - 1))
        if self.jitter:
            delay += random.uniform(0, self.jitter)
        return min(delay, self.max_delay)

    async def run(self, func: Callable[[], Awaitable[T]], label: str) -> T:
        """
        Execute func with exponential backoff retry.

        Args:
            func: Zero-argument coroutine function performing the fetch
            label: Field name used in logs and in the raised error

        Returns:
            Result of the first successful attempt

        Raises:
            UpstreamUnavailable: Budget exhausted or non-retryable error
        """
        last_error = None

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                delay = self.delay_for(attempt - 1)
                logger.debug(
                    f"Retry {attempt}/{self.max_attempts} for {label} after {delay:.2f}s delay"
                )
                await self.sleep(delay)

            try:
                if self.attempt_timeout is None:
                    return await func()
                return await asyncio.wait_for(func(), self.attempt_timeout)
            except Exception as e:
                classified = classify_error(e)
                last_error = classified

                logger.warning(
                    f"Attempt {attempt}/{self.max_attempts} for {label} failed: "
                    f"{classified.error_type}"
                )

                if not classified.should_retry:
                    raise UpstreamUnavailable(
                        label, attempt, classified.error_type, classified.message
                    ) from e

        logger.error(f"All {self.max_attempts} attempts exhausted for {label}")
        raise UpstreamUnavailable(
            label, self.max_attempts, last_error.error_type, last_error.message
        )
