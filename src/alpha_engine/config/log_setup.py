"""
Logging setup.

The package logs through loguru's global ``logger``. Applications call
``configure_logging`` once at startup to choose sinks and level.
"""

import sys
from typing import Optional

from loguru import logger


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Replace loguru's default sink.

    Args:
        level: Minimum level for every sink
        log_file: Optional path for a rotating file sink
        rotation: Size/time rotation for the file sink
        retention: How long rotated files are kept
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)

    if log_file:
        logger.add(
            log_file,
            level=level.upper(),
            rotation=rotation,
            retention=retention,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        )
        logger.info(f"Logging to {log_file}")
