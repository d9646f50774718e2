"""Console logging for the gateway, based on loguru.

Usage:
    from .logger import logger

    logger.info("Trying model: {}", model)
"""

import sys

from loguru import logger

from .config import LOG_LEVEL

logger.remove()
logger.add(
    sys.stderr,
    level=LOG_LEVEL,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{line} - {message}",
    backtrace=False,
    diagnose=False,
)

__all__ = ["logger"]
