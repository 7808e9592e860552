"""Logging setup for the service."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stdout handler to the ``voicebrief`` logger.

    Safe to call more than once; later calls only update the level.
    """
    logger = logging.getLogger("voicebrief")
    logger.setLevel(getattr(logging, level.strip().upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
