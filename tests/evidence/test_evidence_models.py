"""
Unit Tests for Evidence Models

Test cases:
- test_signal_presence: None is absent, zero and False are real observations
- test_signal_rejects_non_finite
- test_missing_lists_absent_fields
"""

import math

import pytest

from alpha_engine.evidence.models import Evidence, FlowEvidence, PriceEvidence, Signal


@pytest.mark.parametrize("value,present", [(None, False), (0.0, True), (0, True), (False, True), ("POSITIVE", True)])
def test_signal_presence(value, present):
    assert Signal(value).present is present


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_signal_rejects_non_finite(value):
    with pytest.raises(ValueError):
        Signal(value)


def test_missing_lists_absent_fields():
    evidence = Evidence(
        ticker="NVDA",
        price=PriceEvidence.of(last=100.0, prev_close=99.0, vwap=None, day_volume=None,
                               change_pct=1.0, trend_3d_pct=None),
        flow=FlowEvidence.of(net_flow=0.0, dark_pool_pct=None, whale_index=None,
                             block_trades=None, relative_volume=None, short_volume_pct=None),
    )

    missing = evidence.missing

    assert "price.vwap" in missing
    assert "price.last" not in missing
    # zero net flow is an observation, not a gap
    assert "flow.net_flow" not in missing
    assert "flow.dark_pool_pct" in missing
    assert "options.chain" in missing
    assert evidence.spot == 100.0
