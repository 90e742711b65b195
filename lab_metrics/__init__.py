"""
Lab Request Metrics - time-bucketed dashboard metrics for lab requests.

This package turns solution and delivery request records into rolled-up counts,
amount totals and status breakdowns per day, ISO week, month, quarter, year and
all-time:

- Table-driven normalization of both record families
- UTC bucket keys with ISO-week and calendar-quarter boundaries
- Exact Decimal aggregation with optional gap-filling
- A pure facade returning immutable, JSON-serializable results

Record sources, a report runner, rich console reporting and a typer CLI sit on
top of the engine; storage, realtime updates and UI remain external.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from lab_metrics.config import Settings, get_settings
from lab_metrics.domain.models import (
    Bucket,
    Granularity,
    MetricsConfig,
    MetricsResult,
    NormalizedEntry,
    RequestRecords,
)
from lab_metrics.errors import (
    LabMetricsError,
    MetricsConfigError,
    RecordSourceError,
    UnknownRecordKindError,
)
from lab_metrics.metrics import aggregate, build_config, compute_metrics, normalize
from lab_metrics.runner import run_report
from lab_metrics.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Bucket",
    "Granularity",
    "MetricsConfig",
    "MetricsResult",
    "NormalizedEntry",
    "RequestRecords",
    # Errors
    "LabMetricsError",
    "MetricsConfigError",
    "RecordSourceError",
    "UnknownRecordKindError",
    # Metrics engine
    "aggregate",
    "build_config",
    "compute_metrics",
    "normalize",
    # Reports
    "run_report",
    # Logging
    "configure_logging",
    "get_logger",
]
