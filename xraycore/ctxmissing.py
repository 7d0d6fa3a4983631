"""What to do when a subsegment is created without a parent segment."""

from __future__ import annotations

import abc
from typing import Any

from . import logger

__all__ = [
    "RUNTIME_ERROR_STRATEGY",
    "LOG_ERROR_STRATEGY",
    "IGNORE_ERROR_STRATEGY",
    "ContextMissingError",
    "ContextMissingStrategy",
    "RuntimeErrorStrategy",
    "LogErrorStrategy",
    "IgnoreErrorStrategy",
]

# Values of the AWS_XRAY_CONTEXT_MISSING environment variable.
RUNTIME_ERROR_STRATEGY = "RUNTIME_ERROR"
LOG_ERROR_STRATEGY = "LOG_ERROR"
IGNORE_ERROR_STRATEGY = "IGNORE_ERROR"


class ContextMissingError(RuntimeError):
    """Raised by the runtime error strategy when the segment context is missing."""

    def __init__(self, value: Any) -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return str(self.value)


class ContextMissingStrategy(abc.ABC):
    """Reaction to a missing segment context."""

    @abc.abstractmethod
    def context_missing(self, value: Any) -> None:
        """Handle a missing context described by ``value``."""


class RuntimeErrorStrategy(ContextMissingStrategy):
    """Raise ContextMissingError."""

    def context_missing(self, value: Any) -> None:
        raise ContextMissingError(value)


class LogErrorStrategy(ContextMissingStrategy):
    """Log an error and carry on."""

    def context_missing(self, value: Any) -> None:
        logger.error("Suppressing AWS X-Ray context missing panic: %s", value)


class IgnoreErrorStrategy(ContextMissingStrategy):
    """Do nothing."""

    def context_missing(self, value: Any) -> None:
        return None