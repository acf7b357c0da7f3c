"""
Utilities to configure and retrieve simulation loggers.

All loggers live under the ``lane_race`` namespace so a single call to
:func:`configure_logging` controls the whole engine.
"""
from __future__ import annotations

import logging
import sys
from typing import Any

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
LOG_NAMESPACE = "lane_race"


def _coerce_level(value: Any) -> int:
    """
    Return a valid logging level from either a string or an integer.
    Defaults to logging.WARNING when the input is not recognised.
    """
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        level = getattr(logging, value.upper(), None)
        if isinstance(level, int):
            return level
    return logging.WARNING


def configure_logging(level: str | int = "WARNING") -> None:
    """Send namespaced log records to stderr at the given level."""
    effective_level = _coerce_level(level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(effective_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(LOG_NAMESPACE)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(effective_level)
    logger.propagate = False


def get_logger(component: str) -> logging.Logger:
    """
    Return a namespaced logger for the given component.
    """
    component = component.strip(".")
    name = f"{LOG_NAMESPACE}.{component}" if component else LOG_NAMESPACE
    return logging.getLogger(name)
