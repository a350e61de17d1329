"""Volatility regime classification."""

from alpha_engine.regime.classifier import RegimeResult, VolatilityRegime, VolatilityRegimeClassifier

__all__ = ["RegimeResult", "VolatilityRegime", "VolatilityRegimeClassifier"]
