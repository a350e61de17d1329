"""
Structural levels derived from open interest and implied volatility.

- Call wall: max-OI call strike above spot (within +20%)
- Put floor: max-OI put strike below spot (within -20%)
- Put/call OI ratio
- ATM IV and ATM IV skew (put IV / call IV)
- Top-3 OI share (OI heat)
- Expected move over the nearest expiry
"""

import math
from collections import defaultdict
from typing import Iterable, Optional

from alpha_engine.analytics.models import OptionContract


WALL_RANGE = 0.20


def _oi_by_strike(contracts: Iterable[OptionContract], calls: bool) -> dict[float, int]:
    totals: dict[float, int] = defaultdict(int)
    for contract in contracts:
        if contract.is_call == calls:
            totals[contract.strike] += contract.open_interest
    return totals


def call_wall(contracts: list[OptionContract], spot: float) -> Optional[float]:
    """Strike with the most call OI in (spot, spot × 1.2]."""
    candidates = {
        strike: oi
        for strike, oi in _oi_by_strike(contracts, calls=True).items()
        if spot < strike <= spot * (1 + WALL_RANGE) and oi > 0
    }
    if not candidates:
        return None
    # Ties go to the strike closest to spot
    return min(candidates, key=lambda k: (-candidates[k], k))


def put_floor(contracts: list[OptionContract], spot: float) -> Optional[float]:
    """Strike with the most put OI in [spot × 0.8, spot)."""
    candidates = {
        strike: oi
        for strike, oi in _oi_by_strike(contracts, calls=False).items()
        if spot * (1 - WALL_RANGE) <= strike < spot and oi > 0
    }
    if not candidates:
        return None
    return min(candidates, key=lambda k: (-candidates[k], -k))


def put_call_ratio(contracts: Iterable[OptionContract]) -> Optional[float]:
    """Put OI / call OI, None when there is no call OI."""
    call_oi = 0
    put_oi = 0
    for contract in contracts:
        if contract.is_call:
            call_oi += contract.open_interest
        else:
            put_oi += contract.open_interest
    if call_oi == 0:
        return None
    return put_oi / call_oi


def _atm_contract(contracts: list[OptionContract], spot: float, calls: bool) -> Optional[OptionContract]:
    priced = [
        c for c in contracts
        if c.is_call == calls and c.implied_volatility is not None and c.implied_volatility > 0
    ]
    if not priced:
        return None
    return min(priced, key=lambda c: (abs(c.strike - spot), c.strike))


def atm_iv(contracts: list[OptionContract], spot: float) -> Optional[float]:
    """ATM implied volatility in percent, call preferred over put."""
    contract = _atm_contract(contracts, spot, calls=True) or _atm_contract(contracts, spot, calls=False)
    if contract is None:
        return None
    return contract.implied_volatility * 100


def iv_skew(contracts: list[OptionContract], spot: float) -> Optional[float]:
    """ATM put IV divided by ATM call IV."""
    call = _atm_contract(contracts, spot, calls=True)
    put = _atm_contract(contracts, spot, calls=False)
    if call is None or put is None:
        return None
    return put.implied_volatility / call.implied_volatility


def top3_oi_share(contracts: Iterable[OptionContract]) -> Optional[float]:
    """
    Share of open interest held by the three largest contracts, in percent.

    Needs at least three contracts with open interest.
    """
    interest = sorted((c.open_interest for c in contracts if c.open_interest > 0), reverse=True)
    if len(interest) < 3:
        return None
    return sum(interest[:3]) / sum(interest) * 100


def implied_move_pct(iv_pct: Optional[float], dte: Optional[int]) -> Optional[float]:
    """One-sigma expected move to expiry: IV × sqrt(max(DTE, 1) / 365)."""
    if iv_pct is None or dte is None:
        return None
    return iv_pct * math.sqrt(max(dte, 1) / 365)
