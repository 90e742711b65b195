"""
Utilities package for lab request metrics.

Exports shared helpers for logging and profiling. Keep this package lightweight
and free of domain-specific logic.
"""

from lab_metrics.utils.logging import configure_logging, get_logger
from lab_metrics.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
