"""
Domain package for lab request metrics.

Exports the records, entries, buckets and results shared by the metrics engine,
record sources and reporters. Keep this package focused on data definitions.
"""

from lab_metrics.domain.models import (
    GRANULARITY_ORDER,
    AmountWarning,
    Bucket,
    DimensionRow,
    Granularity,
    MetricsConfig,
    MetricsResult,
    NormalizedEntry,
    RequestRecords,
)

__all__ = [
    "AmountWarning",
    "Bucket",
    "DimensionRow",
    "GRANULARITY_ORDER",
    "Granularity",
    "MetricsConfig",
    "MetricsResult",
    "NormalizedEntry",
    "RequestRecords",
]
