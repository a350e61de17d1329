"""
Options Chain Analytics

Pure functions over one underlying's option contracts: gamma exposure and
flip level, gamma concentration by expiry, max pain, squeeze risk and the
options-pressure index.
"""

from alpha_engine.analytics.chain import analyze_chain
from alpha_engine.analytics.gamma import find_gamma_flip, gamma_profile, gex_contribution
from alpha_engine.analytics.max_pain import max_pain, pain_at
from alpha_engine.analytics.models import (
    ChainStatus,
    ConcentrationLabel,
    ContractType,
    ExpiryBucket,
    FlipType,
    GammaProfile,
    OptionContract,
    OptionsAnalytics,
    OptionsPressure,
    SqueezeRisk,
    SqueezeStatus,
)
from alpha_engine.analytics.pressure import options_pressure
from alpha_engine.analytics.squeeze import squeeze_score

__all__ = [
    "analyze_chain",
    "find_gamma_flip",
    "gamma_profile",
    "gex_contribution",
    "max_pain",
    "pain_at",
    "options_pressure",
    "squeeze_score",
    "ChainStatus",
    "ConcentrationLabel",
    "ContractType",
    "ExpiryBucket",
    "FlipType",
    "GammaProfile",
    "OptionContract",
    "OptionsAnalytics",
    "OptionsPressure",
    "SqueezeRisk",
    "SqueezeStatus",
]
