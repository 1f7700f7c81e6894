"""
Console logging via loguru.

configure_logging() swaps loguru's default sink for one with our format and level.
Modules just do `from loguru import logger` and log.
"""

import sys
from typing import Optional

from loguru import logger

from . import config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    global _configured
    if _configured:
        return

    logger.remove()
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=level or config.LOG_LEVEL,
        colorize=True,
        backtrace=config.APP_ENV == "local",
        diagnose=False,  # locals may include secrets
    )
    _configured = True
    logger.debug("Logging configured (level={})", level or config.LOG_LEVEL)
