"""
Max Pain

Settlement price minimizing aggregate option-writer payout, computed over the
nearest-expiry contracts only:

    pain(P) = Σ calls K<P (P - K) × OI  +  Σ puts K>P (K - P) × OI

Candidates are the distinct strikes present; ties go to the lowest strike.
The result does not depend on the order of the input list.
"""

from typing import Iterable, Optional

from alpha_engine.analytics.models import OptionContract


def pain_at(contracts: Iterable[OptionContract], price: float) -> float:
    """Aggregate intrinsic value owed to holders if the underlying settles at price."""
    pain = 0.0
    for contract in contracts:
        if contract.is_call and contract.strike < price:
            pain += (price - contract.strike) * contract.open_interest
        elif not contract.is_call and contract.strike > price:
            pain += (contract.strike - price) * contract.open_interest
    return pain


def max_pain(contracts: list[OptionContract]) -> Optional[float]:
    """
    Max-pain strike of a single-expiry chain.

    Args:
        contracts: Contracts of the nearest expiry

    Returns:
        Strike with minimal pain, None for an empty chain
    """
    best_strike = None
    best_pain = None

    # Ascending iteration with strict < keeps the lowest strike on ties
    for strike in sorted({c.strike for c in contracts}):
        pain = pain_at(contracts, strike)
        if best_pain is None or pain < best_pain:
            best_strike = strike
            best_pain = pain

    return best_strike
