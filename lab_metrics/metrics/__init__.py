"""
Time-bucket metrics engine.

Re-exports the normalizer, bucket key resolver, aggregator and facade so callers
can import from `lab_metrics.metrics` directly.
"""

from lab_metrics.metrics.aggregator import aggregate
from lab_metrics.metrics.buckets import BucketKey, key_range, label, next_key, resolve_key
from lab_metrics.metrics.facade import build_config, compute_metrics
from lab_metrics.metrics.normalizer import (
    RECORD_FAMILIES,
    RecordFamily,
    collect_warnings,
    normalize,
)

__all__ = [
    # Normalizer
    "RECORD_FAMILIES",
    "RecordFamily",
    "collect_warnings",
    "normalize",
    # Bucket keys
    "BucketKey",
    "key_range",
    "label",
    "next_key",
    "resolve_key",
    # Aggregation
    "aggregate",
    "build_config",
    "compute_metrics",
]
