"""
Pillar Scorer

Five independent pillars computed from Evidence and chain analytics:

    MOMENTUM  (25)  priceChange 8, vwapPosition 5, trend3D 7, smartDip 5
    STRUCTURE (25)  oiHeat 5, gammaSetup 5, wallSandwich 5, pcrBalance 5,
                    squeezePotential 5, ivSkew ±2
    FLOW      (25)  darkPool 7, whaleIndex 6, relativeVol 5, shortVolume 4,
                    blockTrades 3
    REGIME    (15)  indexTrend 5, volatilityIndex 5, safeHaven 5
    CATALYST  (10)  impliedMove 4, sentiment 3, optionsPressure 3,
                    eventGate -4..0

A factor whose inputs are absent scores 0 and says so in its detail; the
absence itself is reported by the completeness grader.
"""

from typing import Optional

from loguru import logger

from alpha_engine.analytics.models import OptionsAnalytics
from alpha_engine.evidence.models import Evidence, Signal
from alpha_engine.evidence.schemas import Sentiment
from alpha_engine.scoring.models import Factor, PillarName, PillarScore


ABSENT_DETAIL = "no data"
NO_CHAIN_DETAIL = "no options chain"


def _factor(name: str, value: float, maximum: float, detail: str) -> Factor:
    return Factor(name=name, value=round(value, 1), max=maximum, detail=detail)


def _absent(name: str, maximum: float, detail: str = ABSENT_DETAIL) -> Factor:
    return Factor(name=name, value=0.0, max=maximum, detail=detail)


def _value(signal: Signal) -> Optional[float]:
    return float(signal.value) if signal.present else None


# =============================================================================
# Momentum
# =============================================================================


def price_change_points(change: float) -> float:
    if change >= 5:
        return 8.0
    if change >= 3:
        return 6.0
    if change >= 1:
        return 2 + (change - 1) * 2
    if change >= 0:
        return change * 2
    return 0.0


def vwap_points(distance_pct: float) -> float:
    if distance_pct > 2:
        return 5.0
    if distance_pct > 0.5:
        return 3.0
    if distance_pct > -0.5:
        return 2.0
    if distance_pct > -2:
        return 1.0
    return 0.0


def trend_points(trend: float) -> float:
    if trend >= 8:
        return 7.0
    if trend >= 5:
        return 6.0
    if trend >= 3:
        return 5.0
    if trend >= 1:
        return 3.0
    if trend >= 0:
        return 2.0
    if trend >= -2:
        return 1.0
    return 0.0


def smart_dip_points(evidence: Evidence) -> tuple[float, str]:
    """Reward dips bought by institutions: down day with strong flow."""
    change = _value(evidence.price.change_pct)
    if change is None or change >= -0.5:
        return 0.0, "no dip"

    net_flow = _value(evidence.flow.net_flow)
    whale = _value(evidence.flow.whale_index)
    dark_pool = _value(evidence.flow.dark_pool_pct)

    if (
        (net_flow is not None and net_flow > 1_000_000)
        or (whale is not None and whale >= 70)
        or (dark_pool is not None and dark_pool >= 50)
    ):
        return 5.0, "dip with strong institutional buying"
    if (net_flow is not None and net_flow > 0) or (whale is not None and whale >= 50):
        return 3.0, "dip with moderate buying"
    return 0.0, "dip without support"


def score_momentum(evidence: Evidence) -> PillarScore:
    price = evidence.price
    factors = []

    change = _value(price.change_pct)
    if change is None:
        factors.append(_absent("priceChange", 8))
    else:
        factors.append(_factor("priceChange", price_change_points(change), 8, f"{change:+.2f}%"))

    last, vwap = _value(price.last), _value(price.vwap)
    if last is None or vwap is None or vwap <= 0:
        factors.append(_absent("vwapPosition", 5))
    else:
        distance = (last - vwap) / vwap * 100
        factors.append(_factor("vwapPosition", vwap_points(distance), 5, f"{distance:+.2f}% vs VWAP"))

    trend = _value(price.trend_3d_pct)
    if trend is None:
        factors.append(_absent("trend3D", 7))
    else:
        factors.append(_factor("trend3D", trend_points(trend), 7, f"{trend:+.2f}% over 3 days"))

    points, detail = smart_dip_points(evidence)
    factors.append(_factor("smartDip", points, 5, detail))

    return PillarScore.from_factors(PillarName.MOMENTUM, factors)


# =============================================================================
# Structure
# =============================================================================


def gamma_setup_points(flip_distance_pct: Optional[float], net_gex: float) -> float:
    points = 0.0
    if flip_distance_pct is not None:
        if flip_distance_pct < 2:
            points += 5
        elif flip_distance_pct < 5:
            points += 3
        elif flip_distance_pct < 10:
            points += 1
    if net_gex > 2_000_000:
        points += 2
    elif net_gex > 0:
        points += 1
    return min(5.0, points)


def wall_sandwich_score(spot: float, call_wall: Optional[float], put_floor: Optional[float]) -> int:
    """
    0-3 score for price sitting between a nearby put floor and call wall.

    Both walls within 5% → 3, both within 10% → 2, any other pair or a
    single wall → 1, no walls → 0.
    """
    if call_wall is None and put_floor is None:
        return 0
    if call_wall is None or put_floor is None:
        return 1
    to_wall = (call_wall - spot) / spot * 100
    to_floor = (spot - put_floor) / spot * 100
    if to_wall < 5 and to_floor < 5:
        return 3
    if to_wall < 10 and to_floor < 10:
        return 2
    return 1


def pcr_points(pcr: float) -> float:
    if pcr < 0.5:
        return 5.0
    if pcr < 0.7:
        return 4.0
    if pcr < 0.9:
        return 3.0
    if pcr < 1.1:
        return 2.0
    if pcr < 1.3:
        return 1.0
    return 0.0


def squeeze_points(score: int) -> float:
    if score >= 80:
        return 5.0
    if score >= 60:
        return 4.0
    if score >= 45:
        return 3.0
    if score >= 30:
        return 2.0
    return 1.0


def iv_skew_points(skew: float) -> float:
    if skew > 1.2:
        return -2.0
    if skew > 1.1:
        return -1.0
    if skew < 0.85:
        return 2.0
    if skew < 0.92:
        return 1.0
    return 0.0


def score_structure(evidence: Evidence, analytics: OptionsAnalytics) -> PillarScore:
    factors = []
    spot = evidence.spot

    if not analytics.has_chain or spot is None:
        factors.extend([
            _absent("oiHeat", 5, NO_CHAIN_DETAIL),
            _absent("gammaSetup", 5, NO_CHAIN_DETAIL),
            _absent("wallSandwich", 5, NO_CHAIN_DETAIL),
            _absent("pcrBalance", 5, NO_CHAIN_DETAIL),
        ])
    else:
        share = analytics.top3_oi_share_pct
        if share is None:
            factors.append(_absent("oiHeat", 5, "fewer than 3 contracts with OI"))
        else:
            factors.append(_factor("oiHeat", min(5.0, share / 100 * 15), 5, f"top-3 OI share {share:.1f}%"))

        distance = analytics.flip_distance_pct(spot)
        flip_detail = "no flip" if distance is None else f"flip {distance:.1f}% away"
        factors.append(_factor(
            "gammaSetup",
            gamma_setup_points(distance, analytics.gamma.net_gex),
            5,
            f"{flip_detail}, net GEX {analytics.gamma.net_gex:,.0f}",
        ))

        walls = wall_sandwich_score(spot, analytics.call_wall, analytics.put_floor)
        factors.append(_factor(
            "wallSandwich",
            walls * 5 / 3,
            5,
            f"call wall {analytics.call_wall}, put floor {analytics.put_floor}",
        ))

        pcr = analytics.put_call_ratio
        if pcr is None:
            factors.append(_absent("pcrBalance", 5, "no call OI"))
        else:
            factors.append(_factor("pcrBalance", pcr_points(pcr), 5, f"PCR {pcr:.2f}"))

    if analytics.squeeze is None:
        factors.append(_absent("squeezePotential", 5))
    else:
        factors.append(_factor(
            "squeezePotential",
            squeeze_points(analytics.squeeze.score),
            5,
            f"squeeze {analytics.squeeze.score} ({analytics.squeeze.status.value})",
        ))

    if analytics.iv_skew is None:
        factors.append(_absent("ivSkew", 2, NO_CHAIN_DETAIL if not analytics.has_chain else ABSENT_DETAIL))
    else:
        factors.append(_factor("ivSkew", iv_skew_points(analytics.iv_skew), 2, f"put/call IV {analytics.iv_skew:.2f}"))

    return PillarScore.from_factors(PillarName.STRUCTURE, factors)


# =============================================================================
# Flow
# =============================================================================


def dark_pool_points(pct: float) -> float:
    if pct >= 60:
        return 7.0
    if pct >= 50:
        return 6.0
    if pct >= 40:
        return 5.0
    if pct >= 30:
        return 3.0
    if pct >= 20:
        return 1.0
    return 0.0


def whale_points(index: float) -> float:
    if index >= 80:
        return 6.0
    if index >= 65:
        return 5.0
    if index >= 50:
        return 4.0
    if index >= 35:
        return 2.0
    return 1.0


def relative_volume_points(rel_vol: float) -> float:
    if rel_vol >= 3:
        return 5.0
    if rel_vol >= 2:
        return 4.0
    if rel_vol >= 1.5:
        return 3.0
    if rel_vol >= 1:
        return 2.0
    if rel_vol >= 0.5:
        return 1.0
    return 0.0


def short_volume_points(pct: float) -> float:
    if pct < 25:
        return 4.0
    if pct < 35:
        return 3.0
    if pct < 45:
        return 2.0
    if pct < 55:
        return 1.0
    return 0.0


def block_trade_points(count: float) -> float:
    if count >= 5:
        return 3.0
    if count >= 3:
        return 2.0
    if count >= 1:
        return 1.0
    return 0.0


def score_flow(evidence: Evidence) -> PillarScore:
    flow = evidence.flow
    table = [
        ("darkPool", flow.dark_pool_pct, dark_pool_points, 7, "{:.1f}% dark pool"),
        ("whaleIndex", flow.whale_index, whale_points, 6, "whale index {:.0f}"),
        ("relativeVol", flow.relative_volume, relative_volume_points, 5, "{:.2f}x avg volume"),
        ("shortVolume", flow.short_volume_pct, short_volume_points, 4, "{:.1f}% short volume"),
        ("blockTrades", flow.block_trades, block_trade_points, 3, "{:.0f} block trades"),
    ]

    factors = []
    for name, signal, points, maximum, detail in table:
        value = _value(signal)
        if value is None:
            factors.append(_absent(name, maximum))
        else:
            factors.append(_factor(name, points(value), maximum, detail.format(value)))

    return PillarScore.from_factors(PillarName.FLOW, factors)


# =============================================================================
# Regime
# =============================================================================


def index_trend_points(change: float) -> float:
    if change >= 1:
        return 5.0
    if change >= 0.5:
        return 4.0
    if change >= 0:
        return 3.0
    if change >= -0.5:
        return 2.0
    if change >= -1:
        return 1.0
    return 0.0


def volatility_index_points(level: float, change_pct: Optional[float]) -> float:
    if level < 13:
        points = 5.0
    elif level < 16:
        points = 4.0
    elif level < 20:
        points = 3.0
    elif level < 25:
        points = 2.0
    elif level < 30:
        points = 1.0
    else:
        points = 0.0

    # Falling fear is supportive, spiking fear is not
    if change_pct is not None:
        if change_pct < -5:
            points += 1
        elif change_pct > 10:
            points -= 1
    return max(0.0, min(5.0, points))


def safe_haven_points(avg_change: float) -> float:
    """Money rotating into rates/dollar proxies is risk-off."""
    if avg_change > 2:
        raw = 0
    elif avg_change > 0.5:
        raw = 1
    elif avg_change < -1:
        raw = 4
    elif avg_change < 0:
        raw = 3
    else:
        raw = 2
    return raw * 5 / 4


def score_regime(evidence: Evidence) -> PillarScore:
    macro = evidence.macro
    factors = []

    change = _value(macro.index_change_pct)
    if change is None:
        factors.append(_absent("indexTrend", 5))
    else:
        factors.append(_factor("indexTrend", index_trend_points(change), 5, f"index {change:+.2f}%"))

    level = _value(macro.volatility_index)
    if level is None:
        factors.append(_absent("volatilityIndex", 5))
    else:
        vix_change = _value(macro.volatility_index_change_pct)
        factors.append(_factor(
            "volatilityIndex",
            volatility_index_points(level, vix_change),
            5,
            f"VIX {level:.1f}" + ("" if vix_change is None else f" ({vix_change:+.1f}%)"),
        ))

    proxies = [v for v in (_value(macro.rate_proxy_change_pct), _value(macro.dollar_proxy_change_pct)) if v is not None]
    if not proxies:
        factors.append(_absent("safeHaven", 5))
    else:
        avg = sum(proxies) / len(proxies)
        factors.append(_factor("safeHaven", safe_haven_points(avg), 5, f"safe-haven flow {avg:+.2f}%"))

    return PillarScore.from_factors(PillarName.REGIME, factors)


# =============================================================================
# Catalyst
# =============================================================================


def implied_move_points(move_pct: float) -> float:
    if move_pct >= 8:
        return 4.0
    if move_pct >= 5:
        return 3.0
    if move_pct >= 3:
        return 2.0
    if move_pct >= 1:
        return 1.0
    return 0.0


SENTIMENT_POINTS = {
    Sentiment.POSITIVE: 3.0,
    Sentiment.NEUTRAL: 1.0,
    Sentiment.NEGATIVE: 0.0,
}


def options_pressure_points(ratio: float) -> float:
    if ratio > 20:
        return 3.0
    if ratio > 5:
        return 2.0
    if ratio > -5:
        return 1.0
    return 0.0


def score_catalyst(evidence: Evidence, analytics: OptionsAnalytics) -> PillarScore:
    catalyst = evidence.catalyst
    factors = []

    if analytics.implied_move_pct is None:
        factors.append(_absent("impliedMove", 4))
    else:
        move = analytics.implied_move_pct
        factors.append(_factor("impliedMove", implied_move_points(move), 4, f"±{move:.2f}% to expiry"))

    if catalyst.sentiment.present:
        sentiment = Sentiment(catalyst.sentiment.value)
        factors.append(_factor("sentiment", SENTIMENT_POINTS[sentiment], 3, sentiment.value))
    else:
        factors.append(_absent("sentiment", 3))

    if analytics.has_chain:
        ratio = analytics.pressure.ratio
        factors.append(_factor("optionsPressure", options_pressure_points(ratio), 3, f"OPI {ratio:+.1f}"))
    else:
        factors.append(_absent("optionsPressure", 3, NO_CHAIN_DETAIL))

    if catalyst.has_earnings.present and catalyst.has_earnings.value:
        factors.append(_factor("eventGate", -4, 0, "earnings ahead"))
    elif catalyst.has_fomc.present and catalyst.has_fomc.value:
        factors.append(_factor("eventGate", -3, 0, "FOMC ahead"))
    else:
        factors.append(_factor("eventGate", 0, 0, "no scheduled event"))

    return PillarScore.from_factors(PillarName.CATALYST, factors)


class PillarScorer:
    """
    Score every pillar for one ticker.

    Example:
        ```python
        pillars = PillarScorer().score(evidence, analytics)
        raw = sum(p.score for p in pillars.values())
        ```
    """

    def score(self, evidence: Evidence, analytics: OptionsAnalytics) -> dict[PillarName, PillarScore]:
        pillars = {
            PillarName.MOMENTUM: score_momentum(evidence),
            PillarName.STRUCTURE: score_structure(evidence, analytics),
            PillarName.FLOW: score_flow(evidence),
            PillarName.REGIME: score_regime(evidence),
            PillarName.CATALYST: score_catalyst(evidence, analytics),
        }
        logger.debug(
            f"{evidence.ticker} pillars: "
            + ", ".join(f"{name.value}={p.score:.1f}/{p.max}" for name, p in pillars.items())
        )
        return pillars
