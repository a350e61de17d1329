"""
Volatility Regime Classification

Combines chain analytics into a capped 0-100 regime score and a four-state
label. Stateless: recomputed from the current analytics on every call.

Factors:
- Short gamma magnitude (0-30): only when net GEX is negative
- Squeeze pressure (0-25): squeeze score / 4
- ATM IV level (0-20)
- Gamma flip proximity (0-15): 0 when no flip level exists
- Gamma concentration (0-10)

Usage:
    classifier = VolatilityRegimeClassifier()
    result = classifier.classify(analytics, spot=182.5)
    print(result.regime)  # VolatilityRegime.LOADED
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from loguru import logger

from alpha_engine.analytics.models import OptionsAnalytics


class VolatilityRegime(str, Enum):
    """Volatility regime label."""

    ERUPTING = "ERUPTING"  # Score >= 75
    LOADED = "LOADED"  # Score >= 50
    COILING = "COILING"  # Score >= 25
    CALM = "CALM"


@dataclass(slots=True)
class RegimeResult:
    """Regime score, label and per-factor points."""

    score: float
    regime: VolatilityRegime
    factors: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": round(self.score, 1),
            "regime": self.regime.value,
            "factors": {k: round(v, 1) for k, v in self.factors.items()},
        }


class VolatilityRegimeClassifier:
    """Classify the volatility regime of one underlying."""

    def __init__(self):
        self.gex_scale = 1_000_000  # 3 points per $1M of short gamma
        self.max_short_gamma = 30.0
        self.max_squeeze = 25.0

    def short_gamma_points(self, net_gex: float) -> float:
        if net_gex >= 0:
            return 0.0
        return min(self.max_short_gamma, abs(net_gex) / self.gex_scale * 3)

    def squeeze_points(self, squeeze_score: Optional[float]) -> float:
        if squeeze_score is None:
            return 0.0
        return min(self.max_squeeze, squeeze_score / 4)

    @staticmethod
    def iv_points(atm_iv: Optional[float]) -> float:
        if atm_iv is None:
            return 0.0
        if atm_iv > 50:
            return 20.0
        if atm_iv > 35:
            return 12.0
        if atm_iv > 25:
            return 6.0
        return 0.0

    @staticmethod
    def flip_points(distance_pct: Optional[float]) -> float:
        if distance_pct is None:
            return 0.0
        if distance_pct < 1:
            return 15.0
        if distance_pct < 3:
            return 10.0
        if distance_pct < 5:
            return 5.0
        return 0.0

    @staticmethod
    def concentration_points(pct: float) -> float:
        if pct >= 70:
            return 10.0
        if pct >= 50:
            return 6.0
        if pct >= 30:
            return 3.0
        return 0.0

    @staticmethod
    def label(score: float) -> VolatilityRegime:
        if score >= 75:
            return VolatilityRegime.ERUPTING
        if score >= 50:
            return VolatilityRegime.LOADED
        if score >= 25:
            return VolatilityRegime.COILING
        return VolatilityRegime.CALM

    def classify(self, analytics: OptionsAnalytics, spot: float) -> RegimeResult:
        """
        Classify the regime from chain analytics.

        Args:
            analytics: Output of analyze_chain
            spot: Current underlying price

        Returns:
            RegimeResult with score capped at 100
        """
        squeeze = analytics.squeeze.score if analytics.squeeze else None
        factors = {
            "shortGamma": self.short_gamma_points(analytics.gamma.net_gex),
            "squeeze": self.squeeze_points(squeeze),
            "atmIv": self.iv_points(analytics.atm_iv),
            "flipProximity": self.flip_points(analytics.flip_distance_pct(spot)),
            "concentration": self.concentration_points(analytics.atm_concentration_pct),
        }
        score = min(100.0, sum(factors.values()))
        regime = self.label(score)

        logger.debug(f"Volatility regime {regime.value} ({score:.1f}): {factors}")
        return RegimeResult(score=score, regime=regime, factors=factors)
