"""
Utility helpers shared across unitorm packages.
"""

from .logging import (
    configure_logging,
    get_correlation_id,
    get_logger,
    resolve_slow_query_ms,
    set_correlation_id,
    time_call,
)

__all__ = [
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "resolve_slow_query_ms",
    "set_correlation_id",
    "time_call",
]
