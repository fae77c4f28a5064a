"""Logging configuration for procstat."""

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Configure the package logger with a single stream handler.

    Args:
        level: Logging level, as a number or a name such as "DEBUG".
        stream: Where to write records (default: stdout).

    Returns:
        The configured "procstat" logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError("unknown log level")

    logger = logging.getLogger("procstat")
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    logger.propagate = False
    return logger
