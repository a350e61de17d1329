"""
Unit Tests for ResultCache

Test cases:
- test_concurrent_callers_share_computation: Single flight within an epoch
- test_new_epoch_recomputes
- test_failed_computation_not_cached
- test_cancelled_caller_does_not_cancel_work
- test_invalid_ttl
"""

import asyncio

import pytest

from alpha_engine.pipeline.cache import ResultCache


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class CountingCompute:
    """Coroutine factory that counts invocations and waits on an event."""

    def __init__(self, value="result", error: Exception = None):
        self.value = value
        self.error = error
        self.call_count = 0
        self.release = asyncio.Event()

    def __call__(self):
        self.call_count += 1
        return self._run()

    async def _run(self):
        await self.release.wait()
        if self.error:
            raise self.error
        return f"{self.value}-{self.call_count}"


@pytest.mark.asyncio
async def test_concurrent_callers_share_computation():
    cache = ResultCache(ttl=30, clock=FakeClock(5.0))
    compute = CountingCompute()

    tasks = [asyncio.ensure_future(cache.get_or_compute("NVDA", compute)) for _ in range(5)]
    await asyncio.sleep(0)
    compute.release.set()
    results = await asyncio.gather(*tasks)

    assert compute.call_count == 1
    assert results == ["result-1"] * 5
    assert cache.misses == 1
    assert cache.hits == 4


@pytest.mark.asyncio
async def test_new_epoch_recomputes():
    clock = FakeClock(5.0)
    cache = ResultCache(ttl=30, clock=clock)
    compute = CountingCompute()
    compute.release.set()

    first = await cache.get_or_compute("NVDA", compute)
    same_epoch = await cache.get_or_compute("NVDA", compute)
    clock.now = 31.0
    next_epoch = await cache.get_or_compute("NVDA", compute)

    assert first == same_epoch == "result-1"
    assert next_epoch == "result-2"
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_keys_are_per_ticker():
    cache = ResultCache(ttl=30, clock=FakeClock())
    compute = CountingCompute()
    compute.release.set()

    await cache.get_or_compute("NVDA", compute)
    await cache.get_or_compute("AAPL", compute)

    assert compute.call_count == 2


@pytest.mark.asyncio
async def test_failed_computation_not_cached():
    cache = ResultCache(ttl=30, clock=FakeClock())
    failing = CountingCompute(error=RuntimeError("boom"))
    failing.release.set()

    with pytest.raises(RuntimeError):
        await cache.get_or_compute("NVDA", failing)

    compute = CountingCompute()
    compute.release.set()
    assert await cache.get_or_compute("NVDA", compute) == "result-1"


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_work():
    cache = ResultCache(ttl=30, clock=FakeClock())
    compute = CountingCompute()

    first = asyncio.ensure_future(cache.get_or_compute("NVDA", compute))
    second = asyncio.ensure_future(cache.get_or_compute("NVDA", compute))
    await asyncio.sleep(0)

    first.cancel()
    await asyncio.sleep(0)
    compute.release.set()

    assert await second == "result-1"
    assert first.cancelled()
    assert compute.call_count == 1


def test_invalid_ttl():
    with pytest.raises(ValueError):
        ResultCache(ttl=0)


@pytest.mark.asyncio
async def test_clear():
    cache = ResultCache(ttl=30, clock=FakeClock())
    compute = CountingCompute()
    compute.release.set()
    await cache.get_or_compute("NVDA", compute)

    cache.clear()

    assert len(cache) == 0
