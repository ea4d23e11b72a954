"""Observability module for logging."""

from url_handler.observability.logging import configure_logging, get_logger


__all__ = [
    "configure_logging",
    "get_logger",
]
