"""
Logger factory for the todo account service.

Example:
    >>> from shared.logging import get_logger
    >>> log = get_logger(__name__)
    >>> log.info("account_registered", account_id="123", method="email")
"""

from __future__ import annotations

from structlog import get_logger as _get_logger
from structlog.stdlib import BoundLogger

from shared.logging_config import configure_structlog, setup_logging


def get_logger(name: str) -> BoundLogger:
    """Return a structlog logger named after the calling module."""
    return _get_logger(name)


__all__ = [
    "get_logger",
    "configure_structlog",
    "setup_logging",
]
