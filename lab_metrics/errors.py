"""Exception types raised by the metrics engine and its collaborators."""

from __future__ import annotations


class LabMetricsError(Exception):
    """Base class for errors raised by lab_metrics."""


class MetricsConfigError(LabMetricsError, ValueError):
    """Raised when the facade configuration is invalid (caller bug)."""


class UnknownRecordKindError(LabMetricsError, ValueError):
    """Raised when no record family is registered for the requested kind."""


class RecordSourceError(LabMetricsError):
    """Raised when a record source cannot produce a record collection."""


__all__ = [
    "LabMetricsError",
    "MetricsConfigError",
    "RecordSourceError",
    "UnknownRecordKindError",
]
