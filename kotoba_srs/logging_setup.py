"""
Loguru configuration for applications embedding the engine.

The library only emits through ``loguru.logger``; hosts call
``configure_logging`` once at startup if they want the project format.
"""

from __future__ import annotations

import sys

from loguru import logger

from kotoba_srs.config import get_settings

LOG_FORMAT = (
    "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - {message}"
)


def configure_logging(level: str | None = None, sink=sys.stderr) -> int:
    """
    Replace loguru's default handler with the project sink.

    Args:
        level: Minimum level (defaults to settings.log_level)
        sink: Where to write (defaults to stderr)

    Returns:
        Handler id, usable with ``logger.remove``
    """
    logger.remove()
    return logger.add(sink, level=level or get_settings().log_level, format=LOG_FORMAT)
