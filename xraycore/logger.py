"""Logging helpers used throughout the package."""

from __future__ import annotations

import logging
from typing import Any, Callable

__all__ = ["LOGGER", "debug", "debug_deferred", "info", "warning", "error"]

LOGGER = logging.getLogger("xraycore")


class _Deferred:
    """Message whose text is computed only when a record is formatted."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[], str]) -> None:
        self._fn = fn

    def __str__(self) -> str:
        return self._fn()


def debug(message: Any, *args: Any) -> None:
    """Log at debug level; ``args`` fill ``%`` placeholders in ``message``."""
    LOGGER.debug(message, *args)


def debug_deferred(fn: Callable[[], str]) -> None:
    """Log the result of ``fn`` at debug level, calling it only if debug is enabled."""
    if LOGGER.isEnabledFor(logging.DEBUG):
        LOGGER.debug(_Deferred(fn))


def info(message: Any, *args: Any) -> None:
    """Log at info level."""
    LOGGER.info(message, *args)


def warning(message: Any, *args: Any) -> None:
    """Log at warning level."""
    LOGGER.warning(message, *args)


def error(message: Any, *args: Any) -> None:
    """Log at error level."""
    LOGGER.error(message, *args)