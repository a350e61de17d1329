"""
Alpha Decision Engine

Turns raw options-chain, price, flow and macro snapshots into:
- options-market analytics (GEX, gamma flip, max pain, squeeze risk, OPI)
- a 0-100 alpha score built from five pillars
- post-hoc risk gates that cap or penalize the score
- a continuity-stabilized action (ENTER / MAINTAIN / CAUTION / EXIT / REPLACE)

Usage:
    from alpha_engine.pipeline import AlphaEngine
    from alpha_engine.evidence import StaticDataSource

    engine = AlphaEngine(StaticDataSource(payloads, macro=macro))
    report = await engine.score_batch(["NVDA", "AAPL"], previous=records)
"""

from alpha_engine.version import ENGINE_VERSION

__version__ = ENGINE_VERSION

__all__ = ["ENGINE_VERSION", "__version__"]
