"""Logging configuration for mdvault.

Modules log through ``logging.getLogger(__name__)``; everything lives under
the ``mdvault`` logger.  :func:`configure_logging` installs a single stderr
handler and is a no-op on later calls, :func:`set_level` applies the
``log_level`` client option.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "mdvault"

LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 1,
}


def level_from_name(name: str | int) -> int:
    """Translate a config ``log_level`` value into a :mod:`logging` level."""
    if isinstance(name, int):
        return name
    try:
        return LEVELS[name.lower()]
    except KeyError:
        raise ValueError(f"unknown log level {name!r}") from None


def configure_logging(level: str | int = "info") -> logging.Logger:
    """Attach a stderr handler to the package logger (once)."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    set_level(level)
    return logger


def set_level(level: str | int) -> None:
    logging.getLogger(LOGGER_NAME).setLevel(level_from_name(level))
