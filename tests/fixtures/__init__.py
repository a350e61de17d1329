"""Test fixtures for the alpha engine.

This package provides reusable test fixtures for:
- Option chains with hand-checkable analytics
- Complete evidence records and upstream payloads
- An in-memory data source

Fixtures are auto-discovered by pytest through conftest.py.
"""

from tests.fixtures.chain_fixtures import (
    run_date,
    near_chain,
    multi_expiry_chain,
    provider_record,
)
from tests.fixtures.evidence_fixtures import (
    macro_payload,
    full_evidence,
    static_source,
)

__all__ = [
    # Chain fixtures
    "run_date",
    "near_chain",
    "multi_expiry_chain",
    "provider_record",
    # Evidence fixtures
    "macro_payload",
    "full_evidence",
    "static_source",
]
