"""
Options-Pressure Index (OPI)

    call_pressure = Σ delta × OI          (calls, delta > 0)
    put_pressure  = Σ |delta| × OI        (puts, delta < 0)
    raw           = call_pressure - put_pressure
    ratio         = raw / (call_pressure + put_pressure) × 100

The ratio is bounded to [-100, 100] and resolves to 0 when both sides are 0.
"""

from typing import Iterable

from alpha_engine.analytics.models import OptionContract, OptionsPressure


def options_pressure(contracts: Iterable[OptionContract]) -> OptionsPressure:
    """Compute OPI over every contract that carries a delta."""
    call_pressure = 0.0
    put_pressure = 0.0

    for contract in contracts:
        if contract.delta is None:
            continue
        if contract.is_call and contract.delta > 0:
            call_pressure += contract.delta * contract.open_interest
        elif not contract.is_call and contract.delta < 0:
            put_pressure += abs(contract.delta) * contract.open_interest

    total = call_pressure + put_pressure
    raw = call_pressure - put_pressure
    ratio = raw / total * 100 if total > 0 else 0.0

    return OptionsPressure(
        call_pressure=call_pressure,
        put_pressure=put_pressure,
        raw=raw,
        ratio=max(-100.0, min(100.0, ratio)),
    )
