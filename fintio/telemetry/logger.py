"""
Structured Logging

DESIGN DECISION: Every cache decision, request and write is logged as a
structured event. This makes it possible to answer "why did this page
show stale data?" from the logs alone.

Library modules only call get_logger(); the structlog pipeline is
configured once, here.
"""

import logging
from typing import Optional

import structlog

from fintio.config import get_settings


_CONFIGURED = False


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure structlog and the stdlib root level.

    Args:
        level: Level name. Defaults to AppSettings.log_level.
    """
    global _CONFIGURED

    level_name = level or get_settings().app.log_level
    logging.basicConfig(format="%(message)s")
    logging.getLogger("fintio").setLevel(level_name.upper())

    if _CONFIGURED:
        return

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger under the fintio namespace."""
    if not _CONFIGURED:
        configure_logging()
    return structlog.get_logger(name)
