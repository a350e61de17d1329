"""
Data source protocol.

Fetching is an injected capability: any object with these coroutine methods
can feed the engine. Each method returns raw JSON-like data, None when the
upstream has nothing, or raises on failure.
"""

from collections import Counter
from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class DataSource(Protocol):
    """Upstream capability consumed by the Evidence Assembler."""

    async def fetch_options_chain(self, ticker: str) -> Any:
        ...

    async def fetch_quote(self, ticker: str) -> Any:
        ...

    async def fetch_flow(self, ticker: str) -> Any:
        ...

    async def fetch_short_interest(self, ticker: str) -> Any:
        ...

    async def fetch_events(self, ticker: str) -> Any:
        ...

    async def fetch_macro(self) -> Any:
        ...


class StaticDataSource:
    """
    In-memory data source for replays and fixtures.

    Payloads are keyed by ticker, then by ``options``, ``quote``, ``flow``,
    ``shortInterest`` and ``events``. A stored Exception instance is raised
    instead of returned, which makes failure paths reproducible.

    Example:
        ```python
        source = StaticDataSource(
            {"NVDA": {"quote": {"last": 182.5, "prevClose": 180.0}}},
            macro={"vix": 15.2},
        )
        ```
    """

    def __init__(self, payloads: dict[str, dict[str, Any]], macro: Optional[Any] = None):
        self.payloads = {ticker.upper(): data for ticker, data in payloads.items()}
        self.macro = macro
        self.calls: Counter = Counter()

    def _get(self, ticker: str, key: str) -> Any:
        self.calls[(ticker.upper(), key)] += 1
        value = self.payloads.get(ticker.upper(), {}).get(key)
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_options_chain(self, ticker: str) -> Any:
        return self._get(ticker, "options")

    async def fetch_quote(self, ticker: str) -> Any:
        return self._get(ticker, "quote")

    async def fetch_flow(self, ticker: str) -> Any:
        return self._get(ticker, "flow")

    async def fetch_short_interest(self, ticker: str) -> Any:
        return self._get(ticker, "shortInterest")

    async def fetch_events(self, ticker: str) -> Any:
        return self._get(ticker, "events")

    async def fetch_macro(self) -> Any:
        self.calls[("*", "macro")] += 1
        if isinstance(self.macro, Exception):
            raise self.macro
        return self.macro
