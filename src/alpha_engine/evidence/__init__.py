"""
Evidence Assembler

Normalizes upstream price, options, flow, short interest, macro and
catalyst payloads into one typed Evidence record per ticker.
"""

from alpha_engine.evidence.assembler import EvidenceAssembler
from alpha_engine.evidence.models import (
    CatalystEvidence,
    Evidence,
    FlowEvidence,
    MacroEvidence,
    OptionsEvidence,
    PriceEvidence,
    ShortInterestEvidence,
    Signal,
)
from alpha_engine.evidence.normalize import normalize_chain
from alpha_engine.evidence.schemas import Sentiment
from alpha_engine.evidence.sources import DataSource, StaticDataSource

__all__ = [
    "EvidenceAssembler",
    "CatalystEvidence",
    "Evidence",
    "FlowEvidence",
    "MacroEvidence",
    "OptionsEvidence",
    "PriceEvidence",
    "ShortInterestEvidence",
    "Signal",
    "normalize_chain",
    "Sentiment",
    "DataSource",
    "StaticDataSource",
]
