"""
Configuration Loader Module

Loads EngineConfig from YAML and applies environment variable overrides.

Examples:
    ALPHA_ENGINE_MAX_WORKERS=16
    ALPHA_ENGINE_CACHE_TTL=20
    ALPHA_ENGINE_TOP_N=5
    ALPHA_ENGINE_LOG_LEVEL=DEBUG
    ALPHA_ENGINE_RETRY_TIMEOUT=5
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from loguru import logger

from alpha_engine.config.engine_config import EngineConfig


DEFAULT_CONFIG_PATH = Path("config/engine.yaml")

# env var → (section, key, type)
ENV_MAPPING = {
    "ALPHA_ENGINE_MAX_WORKERS": ("runtime", "max_workers", int),
    "ALPHA_ENGINE_CACHE_TTL": ("runtime", "cache_ttl", float),
    "ALPHA_ENGINE_LOG_LEVEL": ("runtime", "log_level", str),
    "ALPHA_ENGINE_LOG_FILE": ("runtime", "log_file", str),
    "ALPHA_ENGINE_TOP_N": ("decisions", "top_n", int),
    "ALPHA_ENGINE_RETRY_ATTEMPTS": ("retry", "max_attempts", int),
    "ALPHA_ENGINE_RETRY_BASE_DELAY": ("retry", "base_delay", float),
    "ALPHA_ENGINE_RETRY_TIMEOUT": ("retry", "attempt_timeout", float),
}


def merge_config_with_env(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge configuration with environment variables.

    Environment variables override config file settings.

    Args:
        config_data: Configuration data from file

    Returns:
        Merged configuration with env vars applied

    Raises:
        ValueError: If an override cannot be converted to its type
    """
    merged = {section: dict(values or {}) for section, values in config_data.items()}

    for env_var, (section, key, cast) in ENV_MAPPING.items():
        raw = os.getenv(env_var)
        if raw is None or raw == "":
            continue
        try:
            value = cast(raw)
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_var}: {raw!r}") from e
        merged.setdefault(section, {})[key] = value
        logger.debug(f"Config override from {env_var}: {section}.{key}={value}")

    return merged


def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Load engine configuration.

    Args:
        path: YAML file (default: config/engine.yaml)

    Returns:
        Validated EngineConfig

    Raises:
        ValueError: If config is invalid
    """
    config_file = Path(path) if path else DEFAULT_CONFIG_PATH

    if config_file.exists():
        with open(config_file, "r") as f:
            config_data = yaml.safe_load(f) or {}
        logger.info(f"Loaded config from {config_file}")
    else:
        logger.warning(f"Config file not found: {config_file}, using defaults")
        config_data = {}

    config = EngineConfig.from_dict(merge_config_with_env(config_data))

    errors = config.validate()
    if errors:
        raise ValueError("Invalid engine config: " + "; ".join(errors))

    return config
