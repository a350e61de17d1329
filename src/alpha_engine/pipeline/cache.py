"""
Short-lived result cache.

Keys on (ticker, epoch) with ``epoch = floor(clock() / ttl)``. Concurrent
callers asking for the same key share one in-flight computation, so two
near-simultaneous requests observe the identical result. Failed
computations are not cached.

In-flight computations are shielded: a caller that gives up does not
cancel the work other callers are waiting on.
"""

import asyncio
import math
import time
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from loguru import logger


T = TypeVar("T")


def _failed(future: asyncio.Future) -> bool:
    if not future.done():
        return False
    return future.cancelled() or future.exception() is not None


class ResultCache(Generic[T]):
    """
    Epoch-keyed single-flight cache.

    Example:
        ```python
        cache = ResultCache(ttl=30)
        result = await cache.get_or_compute("NVDA", lambda: score("NVDA"))
        ```
    """

    def __init__(self, ttl: float = 30.0, clock: Optional[Callable[[], float]] = None):
        if ttl <= 0:
            raise ValueError(f"Cache ttl must be > 0, got {ttl}")
        self.ttl = ttl
        self.clock = clock or time.monotonic
        self._entries: dict[tuple[str, int], asyncio.Future] = {}
        self.hits = 0
        self.misses = 0

    def epoch(self) -> int:
        return math.floor(self.clock() / self.ttl)

    def _evict_stale(self, current: int) -> None:
        for key in [k for k in self._entries if k[1] < current]:
            del self._entries[key]

    async def get_or_compute(self, ticker: str, compute: Callable[[], Awaitable[T]]) -> T:
        """
        Return the cached result for ticker in the current epoch, computing it once.

        Args:
            ticker: Cache key
            compute: Zero-argument coroutine function producing the result

        Returns:
            The shared result
        """
        current = self.epoch()
        self._evict_stale(current)
        key = (ticker, current)

        future = self._entries.get(key)
        if future is not None and not _failed(future):
            self.hits += 1
            logger.debug(f"Cache hit for {ticker} (epoch {current})")
            return await asyncio.shield(future)

        self.misses += 1
        future = asyncio.ensure_future(compute())
        self._entries[key] = future
        future.add_done_callback(lambda f: self._discard_failed(key, f))
        return await asyncio.shield(future)

    def _discard_failed(self, key: tuple[str, int], future: asyncio.Future) -> None:
        if _failed(future):
            if self._entries.get(key) is future:
                del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
