"""Five-pillar alpha scoring."""

from alpha_engine.scoring.models import PILLAR_MAX, Factor, PillarName, PillarScore
from alpha_engine.scoring.pillars import PillarScorer

__all__ = ["PILLAR_MAX", "Factor", "PillarName", "PillarScore", "PillarScorer"]
