"""
Package loggers.

Every module logs through ``get_logger(<module>)``, a child of the
``recipe_filter_engine`` logger. Nothing is printed until the application
calls ``setup_logging`` or configures the standard ``logging`` tree itself.
Validation command output is logged at DEBUG under
``recipe_filter_engine.validation``.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

PACKAGE_LOGGER = "recipe_filter_engine"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_root_logger = logging.getLogger(PACKAGE_LOGGER)
_saved_level: int | None = None


def _to_level(level: str | int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
    stream: TextIO | None = None,
    file: str | None = None,
) -> None:
    """
    Send filter logs to stderr (or ``stream``) and optionally a file.

    Replaces handlers installed by an earlier call.

    Example:
        setup_logging("DEBUG")  # includes each validation command's output
    """
    level = _to_level(level)
    _root_logger.setLevel(level)
    _root_logger.handlers.clear()

    formatter = logging.Formatter(format or DEFAULT_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if file:
        handlers.append(logging.FileHandler(file))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        _root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Logger for a package module, e.g. ``get_logger("runner")``."""
    if name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def set_level(level: str | int) -> None:
    _root_logger.setLevel(_to_level(level))


def disable() -> None:
    """Silence every package logger until ``enable()``."""
    global _saved_level
    if _saved_level is None:
        _saved_level = _root_logger.level
    # Children inherit the effective level.
    _root_logger.setLevel(logging.CRITICAL + 1)


def enable() -> None:
    global _saved_level
    if _saved_level is not None:
        _root_logger.setLevel(_saved_level)
        _saved_level = None
