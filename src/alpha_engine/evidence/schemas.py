"""
Pydantic Schemas for Upstream Payloads

Upstream payloads are external and can be malformed, so they are validated
here before anything reaches the analytics or the scorer. Every model
accepts snake_case or camelCase keys; option contracts additionally accept
the nested provider layout (``details`` / ``greeks`` / ``day`` /
``last_trade``).

Non-finite numbers (NaN, ±inf) are converted to None so the field is
treated as absent rather than as a real signal.

Decision tree:
    Does this data come from outside my process?
    ├─ Yes → Use Pydantic (validation critical) ← WE ARE HERE
    └─ No → Use dataclass (performance matters)
"""

import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from alpha_engine.analytics.models import ContractType, OptionContract
from alpha_engine.errors import MalformedContract


class Sentiment(str, Enum):
    """News sentiment label."""

    POSITIVE = "POSITIVE"
    NEUTRAL = "NEUTRAL"
    NEGATIVE = "NEGATIVE"


class UpstreamPayload(BaseModel):
    """Base model: camelCase aliases, unknown keys ignored, NaN/inf dropped."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def drop_non_finite(cls, v):
        if isinstance(v, float) and not math.isfinite(v):
            return None
        return v


def _to_datetime(v):
    """Convert epoch seconds / ms / ns to an aware datetime."""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        if v > 1e14:
            return datetime.fromtimestamp(v / 1e9, tz=timezone.utc)
        if v > 1e11:
            return datetime.fromtimestamp(v / 1e3, tz=timezone.utc)
        return datetime.fromtimestamp(v, tz=timezone.utc)
    return v


class RawOptionContract(UpstreamPayload):
    """
    One option chain record as delivered upstream.

    Strike, type and expiration are required. Open interest is optional at
    this layer so that missing OI can be counted (a chain where too many
    records lack OI is not trusted), but a record without OI cannot become
    an OptionContract.
    """

    strike: float = Field(..., gt=0, description="Strike price")
    contract_type: ContractType
    expiration_date: date
    open_interest: Optional[int] = Field(None, ge=0)
    delta: Optional[float] = Field(None, ge=-1, le=1)
    gamma: Optional[float] = Field(None, ge=0)
    implied_volatility: Optional[float] = Field(None, ge=0)
    day_volume: Optional[int] = Field(None, ge=0)
    last_trade_price: Optional[float] = Field(None, ge=0)
    last_trade_size: Optional[int] = Field(None, ge=0)
    last_trade_timestamp: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def flatten_provider_layout(cls, data: Any) -> Any:
        """Map the nested provider snapshot onto the flat field names."""
        if not isinstance(data, dict) or "details" not in data:
            return data

        details = data.get("details") or {}
        greeks = data.get("greeks") or {}
        day = data.get("day") or {}
        last_trade = data.get("last_trade") or {}

        return {
            "strike": details.get("strike_price"),
            "contract_type": details.get("contract_type"),
            "expiration_date": details.get("expiration_date"),
            "open_interest": data.get("open_interest"),
            "delta": greeks.get("delta"),
            "gamma": greeks.get("gamma"),
            "implied_volatility": data.get("implied_volatility"),
            "day_volume": day.get("volume"),
            "last_trade_price": last_trade.get("price"),
            "last_trade_size": last_trade.get("size"),
            "last_trade_timestamp": last_trade.get("sip_timestamp"),
        }

    @field_validator("contract_type", mode="before")
    @classmethod
    def normalize_contract_type(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return {"c": "call", "p": "put"}.get(v, v)
        return v

    @field_validator("last_trade_timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, v):
        return _to_datetime(v)

    def to_contract(self, index: Optional[int] = None) -> OptionContract:
        """
        Build the internal contract.

        Raises:
            MalformedContract: If open interest is missing
        """
        if self.open_interest is None:
            raise MalformedContract(
                f"Contract {self.contract_type.value} {self.strike} {self.expiration_date} "
                f"has no open interest",
                index=index,
            )
        return OptionContract(
            strike=self.strike,
            contract_type=self.contract_type,
            expiration_date=self.expiration_date,
            open_interest=self.open_interest,
            delta=self.delta,
            gamma=self.gamma,
            implied_volatility=self.implied_volatility,
            day_volume=self.day_volume or 0,
            last_trade_price=self.last_trade_price,
            last_trade_size=self.last_trade_size,
            last_trade_timestamp=self.last_trade_timestamp,
        )


class RawQuote(UpstreamPayload):
    """Price/quote snapshot: last, previous close, day volume, VWAP."""

    last: Optional[float] = Field(None, validation_alias=AliasChoices("last", "price", "lastPrice"))
    prev_close: Optional[float] = Field(
        None, validation_alias=AliasChoices("prev_close", "prevClose", "previousClose")
    )
    vwap: Optional[float] = Field(None, gt=0)
    day_volume: Optional[float] = Field(None, ge=0)
    avg_volume: Optional[float] = Field(None, ge=0)
    change_pct: Optional[float] = None
    trend_3d_pct: Optional[float] = Field(
        None, validation_alias=AliasChoices("trend_3d_pct", "trend3dPct", "change3dPct")
    )


class RawFlow(UpstreamPayload):
    """Institutional flow snapshot."""

    net_flow: Optional[float] = None
    dark_pool_pct: Optional[float] = Field(None, ge=0, le=100)
    whale_index: Optional[float] = Field(None, ge=0, le=100)
    block_trades: Optional[int] = Field(None, ge=0)
    relative_volume: Optional[float] = Field(
        None, ge=0, validation_alias=AliasChoices("relative_volume", "relativeVolume", "relVol")
    )
    short_volume_pct: Optional[float] = Field(
        None, ge=0, le=100, validation_alias=AliasChoices("short_volume_pct", "shortVolumePct", "shortVolPct")
    )


class RawShortInterest(UpstreamPayload):
    """Short interest / short volume snapshot."""

    short_interest_pct: Optional[float] = Field(None, ge=0)
    days_to_cover: Optional[float] = Field(None, ge=0)
    short_interest_change: Optional[float] = None
    short_volume_pct: Optional[float] = Field(
        None, ge=0, le=100, validation_alias=AliasChoices("short_volume_pct", "shortVolumePct", "shortVolPct")
    )


class RawMacro(UpstreamPayload):
    """Market-wide snapshot shared by every ticker of a run."""

    index_change_pct: Optional[float] = Field(
        None, validation_alias=AliasChoices("index_change_pct", "indexChangePct", "ndxChangePct")
    )
    volatility_index: Optional[float] = Field(
        None, ge=0, validation_alias=AliasChoices("volatility_index", "volatilityIndex", "vix")
    )
    volatility_index_change_pct: Optional[float] = Field(
        None,
        validation_alias=AliasChoices(
            "volatility_index_change_pct", "volatilityIndexChangePct", "vixChangePct"
        ),
    )
    rate_proxy_change_pct: Optional[float] = Field(
        None, validation_alias=AliasChoices("rate_proxy_change_pct", "rateProxyChangePct", "tltChangePct")
    )
    dollar_proxy_change_pct: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("dollar_proxy_change_pct", "dollarProxyChangePct", "dxyChangePct"),
    )


class RawEvents(UpstreamPayload):
    """Catalyst snapshot: sentiment and scheduled events."""

    sentiment: Optional[Sentiment] = None
    has_earnings: Optional[bool] = None
    has_fomc: Optional[bool] = None

    @field_validator("sentiment", mode="before")
    @classmethod
    def normalize_sentiment(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v
