"""Observability module for graphml.

Provides structured logging.
"""

from graphml.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
]
