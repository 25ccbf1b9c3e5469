"""Logging configuration for the Resume Review app."""

import logging
import sys
from typing import Optional

from config import LOG_LEVEL


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)
        if level is None:
            level = logging.getLevelName(LOG_LEVEL.upper())
            if not isinstance(level, int):
                level = logging.INFO
    if level is not None:
        logger.setLevel(level)
    return logger
