"""
Unit Tests for Squeeze Risk

Test cases:
- test_absent_inputs_score_zero
- test_maximum_is_capped: Every factor maxed gives 100 / CRITICAL
- test_monotonic_in_each_input: Raising one input never lowers the score
- test_status_thresholds
"""

import pytest

from alpha_engine.analytics.models import SqueezeStatus
from alpha_engine.analytics.squeeze import squeeze_score, squeeze_status


def test_absent_inputs_score_zero():
    risk = squeeze_score()

    assert risk.score == 0
    assert risk.status == SqueezeStatus.LOW
    assert set(risk.factors) == {"shortInterest", "daysToCover", "shortInterestChange", "shortVolume"}


def test_maximum_is_capped():
    risk = squeeze_score(
        short_interest_pct=35,
        days_to_cover=9,
        short_interest_change=12,
        short_volume_pct=70,
    )

    assert risk.score == 100
    assert risk.status == SqueezeStatus.CRITICAL


@pytest.mark.parametrize(
    "name,values",
    [
        ("short_interest_pct", [0, 4.9, 5, 9.9, 10, 19.9, 20, 50]),
        ("days_to_cover", [0, 1.9, 2, 2.9, 3, 4.9, 5, 12]),
        ("short_interest_change", [-3, 0, 0.1, 5, 5.1, 20]),
        ("short_volume_pct", [0, 29.9, 30, 39.9, 40, 49.9, 50, 90]),
    ],
)
def test_monotonic_in_each_input(name, values):
    scores = [squeeze_score(**{name: v}).score for v in values]

    assert scores == sorted(scores)
    assert all(0 <= s <= 100 for s in scores)


def test_realistic_mix():
    risk = squeeze_score(short_interest_pct=12, days_to_cover=3.5, short_interest_change=1.2, short_volume_pct=42)

    # 25 + 15 + 8 + 10
    assert risk.score == 58
    assert risk.status == SqueezeStatus.HIGH


@pytest.mark.parametrize(
    "score,status",
    [
        (0, SqueezeStatus.LOW),
        (19, SqueezeStatus.LOW),
        (20, SqueezeStatus.MEDIUM),
        (45, SqueezeStatus.HIGH),
        (70, SqueezeStatus.CRITICAL),
    ],
)
def test_status_thresholds(score, status):
    assert squeeze_status(score) == status
