"""Shared utilities."""

from .logging import JSONFormatter, StructuredLogger, get_logger, setup_logging

__all__ = ["JSONFormatter", "StructuredLogger", "get_logger", "setup_logging"]
