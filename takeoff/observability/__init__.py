"""
Observability module.

Provides logging configuration and correlation ID tracking for the API
and the extraction workers.
"""

from takeoff.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from takeoff.observability.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
]
