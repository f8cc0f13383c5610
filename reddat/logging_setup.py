import os
import sys
from typing import Optional

from loguru import logger


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(log_level: Optional[str] = None) -> None:
    """Replace loguru's default handler with one stderr handler.

    The level comes from ``log_level`` or ``REDDAT_LOG_LEVEL`` (default INFO).
    """
    level = (log_level or os.getenv("REDDAT_LOG_LEVEL", "INFO")).upper()
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level, backtrace=False, diagnose=False)
