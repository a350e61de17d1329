"""
Unit Tests for Upstream Payload Schemas

Test cases:
- test_flat_camel_case_record
- test_provider_layout_flattened: details/greeks/day/last_trade mapping
- test_contract_type_shorthand: "C"/"P" accepted
- test_non_finite_dropped: NaN greeks become absent
- test_missing_open_interest: Valid record, but no OptionContract
- test_invalid_strike_rejected
- test_quote_aliases / test_macro_aliases / test_events_sentiment
"""

import math
from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from alpha_engine.analytics.models import ContractType
from alpha_engine.errors import MalformedContract
from alpha_engine.evidence.schemas import (
    RawEvents,
    RawFlow,
    RawMacro,
    RawOptionContract,
    RawQuote,
    Sentiment,
)


def test_flat_camel_case_record():
    raw = RawOptionContract.model_validate({
        "strike": 100,
        "contractType": "put",
        "expirationDate": "2026-03-20",
        "openInterest": 400,
        "delta": -0.5,
        "gamma": 0.05,
        "impliedVolatility": 0.37,
    })

    contract = raw.to_contract()
    assert contract.contract_type == ContractType.PUT
    assert contract.expiration_date == date(2026, 3, 20)
    assert contract.open_interest == 400
    assert contract.day_volume == 0


def test_provider_layout_flattened(provider_record):
    contract = RawOptionContract.model_validate(provider_record).to_contract()

    assert contract.strike == 105
    assert contract.is_call
    assert contract.open_interest == 812
    assert contract.gamma == pytest.approx(0.041)
    assert contract.day_volume == 1520
    assert contract.last_trade_size == 3
    assert contract.last_trade_timestamp == datetime(2026, 3, 16, 16, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value,expected", [("C", ContractType.CALL), ("p", ContractType.PUT), ("Call", ContractType.CALL)])
def test_contract_type_shorthand(value, expected):
    raw = RawOptionContract.model_validate(
        {"strike": 50, "contract_type": value, "expiration_date": "2026-04-17", "open_interest": 1}
    )
    assert raw.contract_type == expected


def test_non_finite_dropped():
    raw = RawOptionContract.model_validate({
        "strike": 100,
        "contractType": "call",
        "expirationDate": "2026-03-20",
        "openInterest": 10,
        "gamma": math.nan,
        "delta": math.inf,
    })

    assert raw.gamma is None
    assert raw.delta is None


def test_missing_open_interest():
    raw = RawOptionContract.model_validate(
        {"strike": 100, "contractType": "call", "expirationDate": "2026-03-20"}
    )

    assert raw.open_interest is None
    with pytest.raises(MalformedContract) as exc_info:
        raw.to_contract(index=3)
    assert exc_info.value.index == 3


@pytest.mark.parametrize(
    "record",
    [
        {"strike": 0, "contractType": "call", "expirationDate": "2026-03-20", "openInterest": 1},
        {"strike": 100, "contractType": "straddle", "expirationDate": "2026-03-20", "openInterest": 1},
        {"strike": 100, "contractType": "call", "openInterest": 1},
        {"strike": 100, "contractType": "call", "expirationDate": "2026-03-20", "openInterest": -4},
    ],
)
def test_invalid_record_rejected(record):
    with pytest.raises(ValidationError):
        RawOptionContract.model_validate(record)


def test_quote_aliases():
    quote = RawQuote.model_validate({"price": 182.5, "previousClose": 180.0, "change3dPct": 2.1, "unknown": 1})

    assert quote.last == 182.5
    assert quote.prev_close == 180.0
    assert quote.trend_3d_pct == 2.1


def test_flow_bounds():
    with pytest.raises(ValidationError):
        RawFlow.model_validate({"darkPoolPct": 140})


def test_macro_aliases():
    macro = RawMacro.model_validate({"ndxChangePct": -0.4, "vix": 18.2, "dxyChangePct": 0.1})

    assert macro.index_change_pct == -0.4
    assert macro.volatility_index == 18.2
    assert macro.dollar_proxy_change_pct == 0.1
    assert macro.rate_proxy_change_pct is None


def test_events_sentiment():
    events = RawEvents.model_validate({"sentiment": " negative ", "hasEarnings": True})

    assert events.sentiment == Sentiment.NEGATIVE
    assert events.has_earnings is True
    assert events.has_fomc is None
