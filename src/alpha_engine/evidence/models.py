"""
Evidence Data Models

Typed per-ticker evidence with a presence flag on every field.

Invariant: a present Signal carries a non-null, finite value. Scoring
reads ``signal.value`` only after checking ``signal.present``, so an absent
field never stands in for a real observation.
"""

import math
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Optional

from alpha_engine.analytics.models import ChainStatus, OptionContract


@dataclass(frozen=True, slots=True)
class Signal:
    """One evidence field with its presence flag."""

    value: Any = None

    def __post_init__(self):
        if isinstance(self.value, float) and not math.isfinite(self.value):
            raise ValueError(f"Signal value must be finite, got {self.value}")

    @property
    def present(self) -> bool:
        return self.value is not None


ABSENT = Signal()


def _of(cls, **values):
    """Build an evidence group from plain values (None = absent)."""
    return cls(**{name: Signal(value) for name, value in values.items()})


def _missing(group: Any, prefix: str) -> list[str]:
    return [
        f"{prefix}.{f.name}"
        for f in fields(group)
        if isinstance(getattr(group, f.name), Signal) and not getattr(group, f.name).present
    ]


@dataclass(frozen=True, slots=True)
class PriceEvidence:
    last: Signal = ABSENT
    prev_close: Signal = ABSENT
    vwap: Signal = ABSENT
    day_volume: Signal = ABSENT
    change_pct: Signal = ABSENT
    trend_3d_pct: Signal = ABSENT

    of = classmethod(_of)


@dataclass(frozen=True, slots=True)
class FlowEvidence:
    net_flow: Signal = ABSENT
    dark_pool_pct: Signal = ABSENT
    whale_index: Signal = ABSENT
    block_trades: Signal = ABSENT
    relative_volume: Signal = ABSENT
    short_volume_pct: Signal = ABSENT

    of = classmethod(_of)


@dataclass(frozen=True, slots=True)
class ShortInterestEvidence:
    short_interest_pct: Signal = ABSENT
    days_to_cover: Signal = ABSENT
    short_interest_change: Signal = ABSENT

    of = classmethod(_of)


@dataclass(frozen=True, slots=True)
class MacroEvidence:
    index_change_pct: Signal = ABSENT
    volatility_index: Signal = ABSENT
    volatility_index_change_pct: Signal = ABSENT
    rate_proxy_change_pct: Signal = ABSENT
    dollar_proxy_change_pct: Signal = ABSENT

    of = classmethod(_of)


@dataclass(frozen=True, slots=True)
class CatalystEvidence:
    sentiment: Signal = ABSENT
    has_earnings: Signal = ABSENT
    has_fomc: Signal = ABSENT

    of = classmethod(_of)


@dataclass(frozen=True, slots=True)
class OptionsEvidence:
    """
    Normalized options chain.

    Attributes:
        status: OK, PENDING (empty / failed / unreliable) or NO_OPTIONS
        contracts: Valid contracts
        total_records: Records received from upstream
        malformed: Records skipped as malformed
        missing_oi: Records without open interest
    """

    status: ChainStatus = ChainStatus.PENDING
    contracts: tuple[OptionContract, ...] = ()
    total_records: int = 0
    malformed: int = 0
    missing_oi: int = 0

    @property
    def complete(self) -> bool:
        return self.status == ChainStatus.OK and len(self.contracts) > 0


@dataclass(frozen=True, slots=True)
class Evidence:
    """
    Per-ticker evidence record.

    Attributes:
        ticker: Underlying symbol
        price: Quote fields
        options: Normalized chain
        flow: Institutional flow fields
        short_interest: Short interest fields
        macro: Market-wide fields
        catalyst: Sentiment and scheduled events
        upstream_failures: Fetches that exhausted the retry budget
        collected_at: When assembly finished
    """

    ticker: str
    price: PriceEvidence = field(default_factory=PriceEvidence)
    options: OptionsEvidence = field(default_factory=OptionsEvidence)
    flow: FlowEvidence = field(default_factory=FlowEvidence)
    short_interest: ShortInterestEvidence = field(default_factory=ShortInterestEvidence)
    macro: MacroEvidence = field(default_factory=MacroEvidence)
    catalyst: CatalystEvidence = field(default_factory=CatalystEvidence)
    upstream_failures: tuple[str, ...] = ()
    collected_at: datetime = field(default_factory=datetime.now)

    @property
    def spot(self) -> Optional[float]:
        """Last price when present."""
        return self.price.last.value if self.price.last.present else None

    @property
    def missing(self) -> list[str]:
        """Names of every absent field, ``group.field``."""
        names = []
        names.extend(_missing(self.price, "price"))
        if not self.options.complete:
            names.append("options.chain")
        names.extend(_missing(self.flow, "flow"))
        names.extend(_missing(self.short_interest, "short_interest"))
        names.extend(_missing(self.macro, "macro"))
        names.extend(_missing(self.catalyst, "catalyst"))
        return names
