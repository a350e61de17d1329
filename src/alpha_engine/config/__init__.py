"""Engine configuration, loader and logging setup."""

from alpha_engine.config.engine_config import (
    DecisionConfig,
    EngineConfig,
    GateConfig,
    GradeThresholds,
    RetryConfig,
    RuntimeConfig,
)
from alpha_engine.config.loader import load_config, merge_config_with_env
from alpha_engine.config.log_setup import configure_logging

__all__ = [
    "DecisionConfig",
    "EngineConfig",
    "GateConfig",
    "GradeThresholds",
    "RetryConfig",
    "RuntimeConfig",
    "load_config",
    "merge_config_with_env",
    "configure_logging",
]
