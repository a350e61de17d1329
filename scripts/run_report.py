#!/usr/bin/env python
"""
Batch Report Entry Point

Scores a universe from a recorded upstream snapshot and prints the batch
report as JSON.

Snapshot layout:
    {
        "tickers": {"NVDA": {"options": ..., "quote": ..., "flow": ...,
                             "shortInterest": ..., "events": ...}},
        "macro": {...},
        "previous": [{"ticker": "AAPL", "rank": 1, "score": 68, "action": "MAINTAIN"}]
    }

Usage:
    python scripts/run_report.py snapshot.json --config config/engine.yaml
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from loguru import logger

from alpha_engine import ENGINE_VERSION
from alpha_engine.config.loader import load_config
from alpha_engine.config.log_setup import configure_logging
from alpha_engine.decisions.models import ContinuityRecord
from alpha_engine.evidence.sources import StaticDataSource
from alpha_engine.pipeline.engine import AlphaEngine


async def main() -> int:
    """
    Run one batch from a snapshot file.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = argparse.ArgumentParser(description="Score a ticker universe from a snapshot")
    parser.add_argument("snapshot", type=Path, help="JSON snapshot of upstream payloads")
    parser.add_argument("--config", type=Path, default=None,
                        help="Engine config YAML (default: config/engine.yaml)")
    parser.add_argument("--tickers", nargs="*", default=None,
                        help="Subset of tickers to score (default: all in snapshot)")
    parser.add_argument("--analytics", action="store_true",
                        help="Include per-ticker analytics in the output")
    parser.add_argument("--continuity-out", type=Path, default=None,
                        help="Write next-run continuity records to this file")

    args = parser.parse_args()

    try:
        config = load_config(args.config)
        configure_logging(config.runtime.log_level, config.runtime.log_file)
        logger.info(f"Alpha Decision Engine v{ENGINE_VERSION}")

        snapshot = json.loads(args.snapshot.read_text())
        payloads = snapshot.get("tickers") or {}
        previous = [ContinuityRecord.from_dict(r) for r in snapshot.get("previous") or []]
        tickers = args.tickers or list(payloads)

        engine = AlphaEngine(StaticDataSource(payloads, macro=snapshot.get("macro")), config=config)
        report = await engine.score_batch(tickers, previous=previous)

        print(json.dumps(report.to_dict(include_analytics=args.analytics), indent=2, ensure_ascii=False))

        if args.continuity_out:
            args.continuity_out.write_text(
                json.dumps([r.to_dict() for r in report.continuity], indent=2)
            )
            logger.info(f"Continuity written to {args.continuity_out}")

        return 0

    except Exception as e:
        logger.error(f"Batch report failed: {e}")
        return 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
