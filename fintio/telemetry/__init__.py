"""Structured logging package."""

from fintio.telemetry.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
