"""
Domain models for lab request metrics.

Defines the canonical entry shape the aggregator consumes, the bucket and
result contracts returned to dashboards, and the facade configuration. All
models are frozen: a `MetricsResult` is a value, never patched after return.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, Field, field_validator

RecordKind = Literal["solution", "delivery"]
AmountIssue = Literal["negative_amount", "non_numeric_amount"]


class Granularity(str, Enum):
    """Time resolution at which buckets are computed."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    ALL = "all"


# Canonical display/serialization order, finest first.
GRANULARITY_ORDER: tuple[Granularity, ...] = (
    Granularity.DAY,
    Granularity.WEEK,
    Granularity.MONTH,
    Granularity.QUARTER,
    Granularity.YEAR,
    Granularity.ALL,
)


class NormalizedEntry(BaseModel):
    """
    A request record mapped into the shape the aggregator operates on.

    `submitted_at` is None when the source timestamp was absent or unparsable;
    such entries are excluded from every bucket but still counted.
    """

    id: str = Field(..., description="Source identifier, carried through unchanged.")
    kind: str = Field(..., description="Record family the entry came from.")
    submitted_at: Optional[datetime] = Field(None, description="Submission instant in UTC.")
    status: str = Field("Unknown", description="Status in the family's own vocabulary.")
    amount: Decimal = Field(Decimal("0.00"), description="Primary monetary value, >= 0, 2dp.")
    amount_issue: Optional[AmountIssue] = Field(
        None, description="Why the source amount was replaced by 0, if it was."
    )
    expected_users: int = Field(0, ge=0)
    technology: str = "N/A"
    client: str = "N/A"
    lab_type: str = "N/A"
    agent: str = "Unassigned"

    model_config = {"frozen": True}

    @property
    def is_bucketable(self) -> bool:
        return self.submitted_at is not None


class AmountWarning(BaseModel):
    """Data-quality note for a record whose amount was clamped to 0."""

    id: str
    kind: str
    reason: AmountIssue

    model_config = {"frozen": True}


class DimensionRow(BaseModel):
    """Requests grouped by technology, client, lab type, status and agent."""

    technology: str
    client: str
    lab_type: str
    status: str
    agent: str
    expected_users: int = 0
    requests: int = 0

    model_config = {"frozen": True}


class Bucket(BaseModel):
    """
    One aggregation cell for a period at a given granularity.

    Invariants: `count == sum(status_counts.values())` and `total_amount >= 0`.
    """

    granularity: Granularity
    key: str = Field(..., description="Canonical, sortable key string (e.g. 2025-W11).")
    label: str = Field(..., description="Human-readable period label.")
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    count: int = 0
    total_amount: Decimal = Decimal("0.00")
    status_counts: Dict[str, int] = Field(default_factory=dict)
    kind_counts: Dict[str, int] = Field(default_factory=dict)
    total_expected_users: int = 0
    unique_clients: int = 0
    unique_agents: int = 0
    rows: List[DimensionRow] = Field(default_factory=list)

    model_config = {"frozen": True}


class RequestRecords(BaseModel):
    """
    Raw record collections as handed over by the storage collaborator.

    Rows are kept as plain mappings; the normalizer owns field selection.
    """

    solutions: List[Any] = Field(default_factory=list)
    deliveries: List[Any] = Field(default_factory=list)

    model_config = {"frozen": True}

    def by_kind(self) -> Dict[str, Sequence[Any]]:
        return {"solution": self.solutions, "delivery": self.deliveries}

    @property
    def total(self) -> int:
        return len(self.solutions) + len(self.deliveries)


class MetricsConfig(BaseModel):
    """
    Options recognized by `compute_metrics`.

    Semantic validation (empty granularities, inverted date range) happens in
    the facade so it can raise `MetricsConfigError` before any aggregation.
    """

    granularities: List[Granularity] = Field(
        default_factory=lambda: [Granularity.DAY, Granularity.WEEK, Granularity.MONTH]
    )
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    gap_fill: bool = False
    breakdown: bool = True

    model_config = {"frozen": True}

    @field_validator("granularities", mode="before")
    @classmethod
    def _split_granularities(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip().lower() for part in value.split(",") if part.strip()]
        return value


class MetricsResult(BaseModel):
    """
    Presentation-ready metrics for one facade invocation.

    Conservation holds per granularity:
    `sum(b.count for b in series[g]) + excluded_count + filtered_out_count == total_records`.
    """

    series: Dict[Granularity, List[Bucket]]
    overall: Bucket
    total_records: int
    excluded_count: int = 0
    filtered_out_count: int = 0
    excluded_ids: List[str] = Field(default_factory=list)
    warnings: List[AmountWarning] = Field(default_factory=list)
    date_from: Optional[datetime] = None
    date_to: datetime
    gap_fill: bool = False

    model_config = {"frozen": True}

    def buckets(self, granularity: Granularity | str) -> List[Bucket]:
        return self.series[Granularity(granularity)]

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready representation (Decimals rendered as strings)."""
        return self.model_dump(mode="json")


__all__ = [
    "AmountIssue",
    "AmountWarning",
    "Bucket",
    "DimensionRow",
    "GRANULARITY_ORDER",
    "Granularity",
    "MetricsConfig",
    "MetricsResult",
    "NormalizedEntry",
    "RecordKind",
    "RequestRecords",
]
