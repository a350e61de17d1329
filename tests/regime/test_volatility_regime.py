"""
Unit Tests for VolatilityRegimeClassifier

Test cases:
- test_empty_analytics_is_calm
- test_erupting: Short gamma, squeeze, high IV, flip next to spot, sticky gamma
- test_score_capped: Every factor at its maximum sums to 100
- test_no_flip_scores_zero_proximity
- test_labels
"""

import pytest

from alpha_engine.analytics.models import GammaProfile, OptionsAnalytics
from alpha_engine.analytics.squeeze import squeeze_score
from alpha_engine.regime.classifier import VolatilityRegime, VolatilityRegimeClassifier


@pytest.fixture
def classifier():
    return VolatilityRegimeClassifier()


def test_empty_analytics_is_calm(classifier):
    result = classifier.classify(OptionsAnalytics.empty(), spot=100.0)

    assert result.score == 0
    assert result.regime == VolatilityRegime.CALM
    assert set(result.factors) == {"shortGamma", "squeeze", "atmIv", "flipProximity", "concentration"}


def test_erupting(classifier):
    analytics = OptionsAnalytics(
        has_chain=True,
        gamma=GammaProfile(net_gex=-5_000_000, flip_level=100.4),
        atm_iv=55.0,
        atm_concentration_pct=75.0,
        squeeze=squeeze_score(short_interest_pct=25, days_to_cover=6, short_volume_pct=45),
    )

    result = classifier.classify(analytics, spot=100.0)

    # 15 + 18.75 + 20 + 15 + 10
    assert result.factors["shortGamma"] == pytest.approx(15.0)
    assert result.factors["squeeze"] == pytest.approx(18.75)
    assert result.score == pytest.approx(78.75)
    assert result.regime == VolatilityRegime.ERUPTING


def test_score_capped(classifier):
    analytics = OptionsAnalytics(
        has_chain=True,
        gamma=GammaProfile(net_gex=-50_000_000, flip_level=100.0),
        atm_iv=90.0,
        atm_concentration_pct=95.0,
        squeeze=squeeze_score(short_interest_pct=40, days_to_cover=10, short_interest_change=9, short_volume_pct=80),
    )

    result = classifier.classify(analytics, spot=100.0)

    assert result.score == 100.0


def test_positive_gex_adds_nothing(classifier):
    assert classifier.short_gamma_points(3_000_000) == 0.0


def test_no_flip_scores_zero_proximity(classifier):
    analytics = OptionsAnalytics(has_chain=True, gamma=GammaProfile(net_gex=-1_000_000))

    result = classifier.classify(analytics, spot=100.0)

    assert result.factors["flipProximity"] == 0.0
    assert result.factors["shortGamma"] == pytest.approx(3.0)


@pytest.mark.parametrize(
    "score,regime",
    [
        (0, VolatilityRegime.CALM),
        (24.9, VolatilityRegime.CALM),
        (25, VolatilityRegime.COILING),
        (50, VolatilityRegime.LOADED),
        (75, VolatilityRegime.ERUPTING),
    ],
)
def test_labels(classifier, score, regime):
    assert classifier.label(score) == regime
