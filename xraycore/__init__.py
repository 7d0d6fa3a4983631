"""Trace headers, daemon endpoints, wildcard patterns, host metadata, context-missing strategies and error formatting."""

__version__ = "0.1.0"

__all__ = [
    "ctxmissing",
    "daemon_config",
    "exception",
    "header",
    "logger",
    "pattern",
    "plugins",
]