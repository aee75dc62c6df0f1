"""Logging setup."""

import sys

from loguru import logger


def setup_logging(debug: bool = False) -> None:
    """Setup logging configuration."""
    logger.remove()

    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )

    level = "DEBUG" if debug else "INFO"
    logger.add(sys.stderr, format=log_format, level=level, colorize=True)
