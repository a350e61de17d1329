"""
Gamma concentration by expiry.

Contracts are grouped into ExpiryBuckets with DTE measured from the
trading-calendar today. The nearest bucket is the reference for the ATM
concentration label.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable

from loguru import logger

from alpha_engine.analytics.gamma import gex_contribution
from alpha_engine.analytics.models import ConcentrationLabel, ExpiryBucket, OptionContract
from alpha_engine.utils.calendar import TradingCalendar


ATM_BAND = 0.02  # ±2% of spot


def concentration_label(pct: float) -> ConcentrationLabel:
    if pct >= 70:
        return ConcentrationLabel.STICKY
    if pct >= 50:
        return ConcentrationLabel.ELEVATED
    if pct >= 30:
        return ConcentrationLabel.NORMAL
    return ConcentrationLabel.LOW


def is_atm(strike: float, spot: float, band: float = ATM_BAND) -> bool:
    return abs(strike - spot) <= spot * band


def build_buckets(
    contracts: Iterable[OptionContract],
    spot: float,
    today: date,
    calendar: TradingCalendar,
) -> list[ExpiryBucket]:
    """
    Group contracts by expiration.

    Args:
        contracts: Normalized contracts for one underlying
        spot: Current underlying price
        today: Calendar date of the run
        calendar: Trading calendar used for DTE

    Returns:
        Buckets ordered by ascending DTE; expired buckets are dropped
    """
    grouped: dict[date, list[OptionContract]] = defaultdict(list)
    for contract in contracts:
        grouped[contract.expiration_date].append(contract)

    buckets = []
    for expiration, members in grouped.items():
        dte = calendar.days_to_expiry(expiration, today=today)
        if dte < 0:
            logger.debug(f"Dropping expired bucket {expiration} ({len(members)} contracts)")
            continue

        bucket = ExpiryBucket(expiration_date=expiration, dte=dte, contracts=tuple(members))
        for contract in members:
            if contract.is_call:
                bucket.call_oi += contract.open_interest
            else:
                bucket.put_oi += contract.open_interest

            value = gex_contribution(contract)
            if value is None:
                continue
            bucket.net_gex += value
            bucket.total_gamma += abs(value)
            if is_atm(contract.strike, spot):
                bucket.atm_gamma += abs(value)

        if bucket.total_gamma > 0:
            bucket.atm_concentration_pct = bucket.atm_gamma / bucket.total_gamma * 100
        buckets.append(bucket)

    buckets.sort(key=lambda b: b.dte)

    chain_gamma = sum(b.total_gamma for b in buckets)
    if chain_gamma > 0:
        for bucket in buckets:
            bucket.gamma_share_pct = bucket.total_gamma / chain_gamma * 100

    return buckets
