"""Shared pytest fixtures for alpha engine tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Import all fixtures for global availability
from tests.fixtures.chain_fixtures import *
from tests.fixtures.evidence_fixtures import *

from alpha_engine.config.engine_config import EngineConfig, RetryConfig


@pytest.fixture
def fast_config():
    """
    Default engine config without retry delays.

    Returns:
        EngineConfig: Defaults with retry.base_delay = 0
    """
    return EngineConfig(retry=RetryConfig(max_attempts=3, base_delay=0.0))
