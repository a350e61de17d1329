"""
Options Chain Analytics entry point.

Every consumer (pillar scoring, regime classification, report payloads)
goes through ``analyze_chain`` so the GEX / max pain / OPI arithmetic lives
in exactly one place.
"""

from datetime import date
from typing import Optional

from loguru import logger

from alpha_engine.analytics import levels
from alpha_engine.analytics.expiry import build_buckets, concentration_label
from alpha_engine.analytics.gamma import gamma_profile
from alpha_engine.analytics.max_pain import max_pain
from alpha_engine.analytics.models import OptionContract, OptionsAnalytics, SqueezeRisk
from alpha_engine.analytics.pressure import options_pressure
from alpha_engine.utils.calendar import TradingCalendar


def analyze_chain(
    contracts: list[OptionContract],
    spot: float,
    today: Optional[date] = None,
    calendar: Optional[TradingCalendar] = None,
    squeeze: Optional[SqueezeRisk] = None,
) -> OptionsAnalytics:
    """
    Compute all chain analytics for one underlying.

    GEX, flip and OPI use the whole chain. Max pain, walls, ATM IV and the
    concentration label use the nearest live expiry.

    Args:
        contracts: Normalized contracts (malformed records already skipped)
        spot: Current underlying price
        today: Calendar date of the run (default: today)
        calendar: Trading calendar for DTE (default: NYSE)
        squeeze: Precomputed squeeze risk to carry on the result

    Returns:
        OptionsAnalytics, zero-filled when no live contracts remain
    """
    if spot <= 0:
        raise ValueError(f"Spot price must be positive, got {spot}")

    calendar = calendar or TradingCalendar()
    today = today or date.today()

    buckets = build_buckets(contracts, spot, today, calendar)
    if not buckets:
        logger.debug("Empty chain, returning zero-filled analytics")
        return OptionsAnalytics.empty(squeeze)

    live = [c for bucket in buckets for c in bucket.contracts]
    nearest = buckets[0]
    nearest_contracts = list(nearest.contracts)

    iv = levels.atm_iv(nearest_contracts, spot)

    return OptionsAnalytics(
        has_chain=True,
        contract_count=len(live),
        gamma=gamma_profile(live, spot),
        buckets=tuple(buckets),
        nearest_expiry=nearest.expiration_date,
        nearest_dte=nearest.dte,
        atm_concentration_pct=nearest.atm_concentration_pct,
        concentration_label=concentration_label(nearest.atm_concentration_pct),
        max_pain=max_pain(nearest_contracts),
        pressure=options_pressure(live),
        call_wall=levels.call_wall(nearest_contracts, spot),
        put_floor=levels.put_floor(nearest_contracts, spot),
        put_call_ratio=levels.put_call_ratio(live),
        atm_iv=iv,
        iv_skew=levels.iv_skew(nearest_contracts, spot),
        top3_oi_share_pct=levels.top3_oi_share(live),
        implied_move_pct=levels.implied_move_pct(iv, nearest.dte),
        squeeze=squeeze,
    )
