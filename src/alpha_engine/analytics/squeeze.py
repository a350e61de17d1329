"""
Short Squeeze Risk

Additive 0-100 score:
- short interest % of float: up to 40
- days to cover: up to 25
- short interest change (percentage points): up to 15
- short volume % of daily volume: up to 20

Every factor is monotonically non-decreasing in its input and absent inputs
contribute 0.
"""

from typing import Optional

from alpha_engine.analytics.models import SqueezeRisk, SqueezeStatus


def _short_interest_points(pct: Optional[float]) -> int:
    if pct is None:
        return 0
    if pct >= 20:
        return 40
    if pct >= 10:
        return 25
    if pct >= 5:
        return 10
    return 0


def _days_to_cover_points(days: Optional[float]) -> int:
    if days is None:
        return 0
    if days >= 5:
        return 25
    if days >= 3:
        return 15
    if days >= 2:
        return 8
    return 0


def _change_points(change: Optional[float]) -> int:
    if change is None:
        return 0
    if change > 5:
        return 15
    if change > 0:
        return 8
    return 0


def _short_volume_points(pct: Optional[float]) -> int:
    if pct is None:
        return 0
    if pct >= 50:
        return 20
    if pct >= 40:
        return 10
    if pct >= 30:
        return 5
    return 0


def squeeze_status(score: int) -> SqueezeStatus:
    if score >= 70:
        return SqueezeStatus.CRITICAL
    if score >= 45:
        return SqueezeStatus.HIGH
    if score >= 20:
        return SqueezeStatus.MEDIUM
    return SqueezeStatus.LOW


def squeeze_score(
    short_interest_pct: Optional[float] = None,
    days_to_cover: Optional[float] = None,
    short_interest_change: Optional[float] = None,
    short_volume_pct: Optional[float] = None,
) -> SqueezeRisk:
    """
    Compute squeeze risk.

    Args:
        short_interest_pct: Short interest as % of float
        days_to_cover: Short interest / average daily volume
        short_interest_change: Change of short interest % since last report (pp)
        short_volume_pct: Off-exchange short volume as % of daily volume

    Returns:
        SqueezeRisk with score capped at 100 and status label
    """
    factors = {
        "shortInterest": _short_interest_points(short_interest_pct),
        "daysToCover": _days_to_cover_points(days_to_cover),
        "shortInterestChange": _change_points(short_interest_change),
        "shortVolume": _short_volume_points(short_volume_pct),
    }
    score = min(100, sum(factors.values()))
    return SqueezeRisk(score=score, status=squeeze_status(score), factors=factors)
