"""
Gamma Exposure (GEX)

Dealer-long-gamma convention: calls contribute positive GEX, puts negative.

    contribution = gamma × open_interest × 100

The flip level is where cumulative GEX (ascending strike) changes sign,
linearly interpolated between the two adjacent strikes. When the profile
crosses zero more than once, the crossing nearest the spot price wins.
"""

from typing import Iterable, Optional

import numpy as np

from alpha_engine.analytics.models import FlipType, GammaProfile, OptionContract


CONTRACT_MULTIPLIER = 100


def gex_contribution(contract: OptionContract) -> Optional[float]:
    """Signed GEX of one contract, None when gamma is unknown."""
    if contract.gamma is None:
        return None
    value = contract.gamma * contract.open_interest * CONTRACT_MULTIPLIER
    return value if contract.is_call else -value


def gex_by_strike(contracts: Iterable[OptionContract]) -> dict[float, float]:
    """Net signed GEX per strike, ordered by ascending strike."""
    totals: dict[float, float] = {}
    for contract in contracts:
        value = gex_contribution(contract)
        if value is None:
            continue
        totals[contract.strike] = totals.get(contract.strike, 0.0) + value
    return dict(sorted(totals.items()))


def find_gamma_flip(
    strike_gex: dict[float, float],
    spot: float,
) -> tuple[Optional[float], FlipType]:
    """
    Locate the gamma flip level.

    Args:
        strike_gex: Net GEX per strike (any order)
        spot: Current underlying price

    Returns:
        (flip_level, flip_type). flip_level is None unless flip_type is EXACT.
    """
    if not strike_gex:
        return None, FlipType.NO_DATA

    strikes = np.array(sorted(strike_gex), dtype=float)
    values = np.array([strike_gex[s] for s in strikes], dtype=float)
    if not np.any(values):
        return None, FlipType.NO_DATA

    cumulative = np.cumsum(values)
    prev, curr = cumulative[:-1], cumulative[1:]
    crossing = ((prev < 0) & (curr >= 0)) | ((prev > 0) & (curr <= 0))
    idx = np.nonzero(crossing)[0]

    if idx.size == 0:
        if np.all(cumulative >= 0):
            return None, FlipType.ALL_LONG
        return None, FlipType.ALL_SHORT

    lo, hi = strikes[idx], strikes[idx + 1]
    a, b = prev[idx], curr[idx]
    levels = lo + (hi - lo) * (-a) / (b - a)

    nearest = levels[np.argmin(np.abs(levels - spot))]
    return round(float(nearest), 2), FlipType.EXACT


def gamma_profile(contracts: list[OptionContract], spot: float) -> GammaProfile:
    """
    Compute chain-wide GEX and the flip level.

    Contracts without gamma are excluded from every sum and reported through
    ``gamma_coverage``.
    """
    call_gex = 0.0
    put_gex = 0.0
    total_gamma = 0.0
    with_gamma = 0

    for contract in contracts:
        value = gex_contribution(contract)
        if value is None:
            continue
        with_gamma += 1
        total_gamma += abs(value)
        if contract.is_call:
            call_gex += value
        else:
            put_gex += value

    flip_level, flip_type = find_gamma_flip(gex_by_strike(contracts), spot)

    return GammaProfile(
        net_gex=call_gex + put_gex,
        total_gamma=total_gamma,
        call_gex=call_gex,
        put_gex=put_gex,
        flip_level=flip_level,
        flip_type=flip_type,
        gamma_coverage=with_gamma / len(contracts) if contracts else 0.0,
    )
