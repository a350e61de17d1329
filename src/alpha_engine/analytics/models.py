"""
Options Analytics Data Models

Internal records produced by the chain analytics. Contracts are validated on
entry by the evidence schemas, so these are plain dataclasses.

Decision tree:
    Is this data internal to my process?
    ├─ Yes → Use dataclass (performance matters) ← WE ARE HERE
    └─ No → Use Pydantic (validation critical)
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional


class ContractType(str, Enum):
    """Option type enum."""

    CALL = "call"
    PUT = "put"


class ChainStatus(str, Enum):
    """State of the options chain for one underlying."""

    OK = "OK"
    PENDING = "PENDING"  # Empty, failed fetch, or too many records without OI
    NO_OPTIONS = "NO_OPTIONS"  # Underlying has no listed options


class FlipType(str, Enum):
    """How the gamma flip level was resolved."""

    EXACT = "EXACT"  # Interpolated zero crossing
    ALL_LONG = "ALL_LONG"  # Cumulative GEX never goes negative
    ALL_SHORT = "ALL_SHORT"  # Cumulative GEX never goes positive
    NO_DATA = "NO_DATA"


class ConcentrationLabel(str, Enum):
    """ATM gamma concentration of the nearest expiry."""

    STICKY = "STICKY"
    ELEVATED = "ELEVATED"
    NORMAL = "NORMAL"
    LOW = "LOW"


class SqueezeStatus(str, Enum):
    """Short squeeze risk label."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True, slots=True)
class OptionContract:
    """
    One tradable option, immutable snapshot.

    Attributes:
        strike: Strike price (> 0)
        contract_type: CALL or PUT
        expiration_date: Expiration date
        open_interest: Outstanding contracts (>= 0)
        delta: Delta, None when the upstream did not provide greeks
        gamma: Gamma, None when the upstream did not provide greeks
        implied_volatility: IV as a decimal (0.35 = 35%)
        day_volume: Contracts traded today (>= 0)
        last_trade_price: Price of the last print
        last_trade_size: Size of the last print
        last_trade_timestamp: Time of the last print

    Raises:
        ValueError: If strike, open interest or volume are out of range
    """

    strike: float
    contract_type: ContractType
    expiration_date: date
    open_interest: int = 0
    delta: Optional[float] = None
    gamma: Optional[float] = None
    implied_volatility: Optional[float] = None
    day_volume: int = 0
    last_trade_price: Optional[float] = None
    last_trade_size: Optional[int] = None
    last_trade_timestamp: Optional[datetime] = None

    def __post_init__(self):
        if not math.isfinite(self.strike) or self.strike <= 0:
            raise ValueError(f"Strike must be a positive number, got {self.strike}")
        if not isinstance(self.contract_type, ContractType):
            raise ValueError(f"Invalid contract type: {self.contract_type}")
        if self.open_interest < 0:
            raise ValueError(f"Open interest cannot be negative: {self.open_interest}")
        if self.day_volume < 0:
            raise ValueError(f"Day volume cannot be negative: {self.day_volume}")

    @property
    def is_call(self) -> bool:
        return self.contract_type == ContractType.CALL


@dataclass(slots=True)
class ExpiryBucket:
    """
    Contracts sharing one expiration date.

    Attributes:
        expiration_date: Shared expiration
        dte: Days to expiry from the trading-aware today
        contracts: Contracts in this bucket
        total_gamma: Sum of |GEX contribution|
        atm_gamma: Part of total_gamma within +/-2% of spot
        atm_concentration_pct: atm_gamma / total_gamma * 100
        gamma_share_pct: This bucket's share of the whole chain's total gamma
        call_oi: Call open interest
        put_oi: Put open interest
        net_gex: Signed GEX (calls +, puts -)
    """

    expiration_date: date
    dte: int
    contracts: tuple[OptionContract, ...]
    total_gamma: float = 0.0
    atm_gamma: float = 0.0
    atm_concentration_pct: float = 0.0
    gamma_share_pct: float = 0.0
    call_oi: int = 0
    put_oi: int = 0
    net_gex: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "expirationDate": self.expiration_date.isoformat(),
            "dte": self.dte,
            "contracts": len(self.contracts),
            "totalGamma": round(self.total_gamma, 2),
            "atmGamma": round(self.atm_gamma, 2),
            "atmConcentrationPct": round(self.atm_concentration_pct, 1),
            "gammaSharePct": round(self.gamma_share_pct, 1),
            "callOI": self.call_oi,
            "putOI": self.put_oi,
            "netGex": round(self.net_gex, 2),
        }


@dataclass(slots=True)
class GammaProfile:
    """Chain-wide gamma exposure and flip level."""

    net_gex: float = 0.0
    total_gamma: float = 0.0
    call_gex: float = 0.0
    put_gex: float = 0.0
    flip_level: Optional[float] = None
    flip_type: FlipType = FlipType.NO_DATA
    gamma_coverage: float = 0.0  # Share of contracts carrying gamma (0-1)


@dataclass(slots=True)
class SqueezeRisk:
    """Additive squeeze score (0-100) with its factor breakdown."""

    score: int
    status: SqueezeStatus
    factors: dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if self.score < 0 or self.score > 100:
            raise ValueError(f"Squeeze score must be 0-100, got {self.score}")

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "status": self.status.value, "factors": dict(self.factors)}


@dataclass(slots=True)
class OptionsPressure:
    """Options-Pressure Index (OPI)."""

    call_pressure: float = 0.0
    put_pressure: float = 0.0
    raw: float = 0.0
    ratio: float = 0.0  # Bounded to [-100, 100]

    def to_dict(self) -> dict[str, Any]:
        return {
            "callPressure": round(self.call_pressure, 2),
            "putPressure": round(self.put_pressure, 2),
            "raw": round(self.raw, 2),
            "ratio": round(self.ratio, 2),
        }


@dataclass(slots=True)
class OptionsAnalytics:
    """
    Derived options-market analytics for one underlying.

    An empty chain produces ``OptionsAnalytics.empty()``: has_chain=False,
    zero GEX/OPI and None for every level, never an exception.
    """

    has_chain: bool
    contract_count: int = 0
    gamma: GammaProfile = field(default_factory=GammaProfile)
    buckets: tuple[ExpiryBucket, ...] = ()
    nearest_expiry: Optional[date] = None
    nearest_dte: Optional[int] = None
    atm_concentration_pct: float = 0.0
    concentration_label: ConcentrationLabel = ConcentrationLabel.LOW
    max_pain: Optional[float] = None
    pressure: OptionsPressure = field(default_factory=OptionsPressure)
    call_wall: Optional[float] = None
    put_floor: Optional[float] = None
    put_call_ratio: Optional[float] = None
    atm_iv: Optional[float] = None  # Percent
    iv_skew: Optional[float] = None  # ATM put IV / ATM call IV
    top3_oi_share_pct: Optional[float] = None
    implied_move_pct: Optional[float] = None
    squeeze: Optional[SqueezeRisk] = None

    @classmethod
    def empty(cls, squeeze: Optional[SqueezeRisk] = None) -> "OptionsAnalytics":
        """Zero-filled analytics for an empty or unusable chain."""
        return cls(has_chain=False, squeeze=squeeze)

    def flip_distance_pct(self, spot: float) -> Optional[float]:
        """Distance from spot to the gamma flip in percent, None without a flip."""
        if self.gamma.flip_level is None or spot <= 0:
            return None
        return abs(spot - self.gamma.flip_level) / spot * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasChain": self.has_chain,
            "contracts": self.contract_count,
            "netGex": round(self.gamma.net_gex, 2),
            "totalGamma": round(self.gamma.total_gamma, 2),
            "gammaFlip": self.gamma.flip_level,
            "gammaFlipType": self.gamma.flip_type.value,
            "nearestExpiry": self.nearest_expiry.isoformat() if self.nearest_expiry else None,
            "nearestDte": self.nearest_dte,
            "atmConcentrationPct": round(self.atm_concentration_pct, 1),
            "concentrationLabel": self.concentration_label.value,
            "maxPain": self.max_pain,
            "opi": self.pressure.to_dict(),
            "callWall": self.call_wall,
            "putFloor": self.put_floor,
            "pcr": None if self.put_call_ratio is None else round(self.put_call_ratio, 3),
            "atmIv": None if self.atm_iv is None else round(self.atm_iv, 1),
            "ivSkew": None if self.iv_skew is None else round(self.iv_skew, 3),
            "impliedMovePct": None if self.implied_move_pct is None else round(self.implied_move_pct, 2),
            "squeeze": self.squeeze.to_dict() if self.squeeze else None,
            "expiries": [bucket.to_dict() for bucket in self.buckets],
        }
