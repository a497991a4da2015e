"""Centralized logging configuration for easyprof.

The library only creates loggers under the "easyprof" namespace. Handlers are
installed by configure_logging(), which applications invoke explicitly.
Nothing is configured at import time.
"""

from __future__ import annotations

import logging
import sys
from typing import Final

ROOT_LOGGER: Final = "easyprof"
DEFAULT_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVELS: Final = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_logging_configured = False


def configure_logging(level: str | None = None, format_str: str | None = None) -> None:
    """Configure the easyprof root logger.

    Idempotent: only the first call installs a handler.

    Args:
        level: Level name ('debug', 'info', ...). None = 'info'.
        format_str: Log format string. None = DEFAULT_FORMAT.
    """
    global _logging_configured

    if _logging_configured:
        return

    log_level = logging.INFO if level is None else _get_level_from_string(level)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(format_str or DEFAULT_FORMAT))
    logger.addHandler(handler)

    # Prevent propagation to the root logger to avoid double logging
    logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the easyprof namespace.

    Args:
        name: Logger name, usually __name__.

    Returns:
        Logger named "easyprof.<name>" unless already prefixed.
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def update_log_level(level: str) -> None:
    """Update the level of the easyprof logger and its handlers."""
    log_level = _get_level_from_string(level)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    for handler in logger.handlers:
        handler.setLevel(log_level)


def _get_level_from_string(level: str) -> int:
    """Convert level name to logging constant. Unknown names map to INFO."""
    return _LEVELS.get(level.lower(), logging.INFO)
