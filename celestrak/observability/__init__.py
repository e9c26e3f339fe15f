"""Structured logging for the client and CLI."""

from celestrak.observability.logging import configure_logging, get_logger


__all__ = ["configure_logging", "get_logger"]
