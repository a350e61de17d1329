"""
Options chain normalization.

Turns the raw chain payload into OptionsEvidence:
- each record validated by RawOptionContract; malformed records are skipped
  and counted, never failing the whole chain
- status PENDING when the chain is empty or could not be fetched, or when
  at least 20% of records lack open interest
- a payload that is not a list of records (or an envelope holding one) is
  treated like an empty chain
- status NO_OPTIONS when the payload says the underlying has no listed options
"""

from typing import Any

from loguru import logger

from alpha_engine.analytics.models import ChainStatus
from alpha_engine.errors import MalformedContract
from alpha_engine.evidence.models import OptionsEvidence
from alpha_engine.evidence.schemas import RawOptionContract


MISSING_OI_PENDING_RATIO = 0.20


def _records(raw: Any) -> list[Any]:
    if isinstance(raw, dict):
        raw = raw.get("results") or raw.get("contracts") or []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    logger.warning(f"Unexpected chain payload ({type(raw).__name__}); treating chain as pending")
    return []


def _declares_no_options(raw: Any) -> bool:
    if not isinstance(raw, dict):
        return False
    return bool(raw.get("noOptions") or raw.get("no_options")) or raw.get("status") == "NO_OPTIONS"


def normalize_chain(raw: Any) -> OptionsEvidence:
    """
    Validate a raw chain payload.

    Args:
        raw: List of contract records, ``{"results": [...]}``, a
            ``{"status": "NO_OPTIONS"}`` marker, or None when the fetch failed

    Returns:
        OptionsEvidence with valid contracts and counters
    """
    if raw is None:
        return OptionsEvidence(status=ChainStatus.PENDING)

    if _declares_no_options(raw):
        return OptionsEvidence(status=ChainStatus.NO_OPTIONS)

    records = _records(raw)
    if not records:
        return OptionsEvidence(status=ChainStatus.PENDING)

    contracts = []
    malformed = 0
    missing_oi = 0

    for index, record in enumerate(records):
        try:
            parsed = RawOptionContract.model_validate(record)
            if parsed.open_interest is None:
                missing_oi += 1
            contracts.append(parsed.to_contract(index=index))
        except (ValueError, MalformedContract) as e:
            malformed += 1
            logger.debug(f"Skipping malformed contract #{index}: {e}")

    if malformed:
        logger.warning(f"Skipped {malformed}/{len(records)} malformed contracts")

    status = ChainStatus.OK
    if not contracts or missing_oi / len(records) >= MISSING_OI_PENDING_RATIO:
        status = ChainStatus.PENDING

    return OptionsEvidence(
        status=status,
        contracts=tuple(contracts),
        total_records=len(records),
        malformed=malformed,
        missing_oi=missing_oi,
    )
