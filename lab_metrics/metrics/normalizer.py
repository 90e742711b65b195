"""
Record normalization for the metrics engine.

Solution and delivery requests arrive with different field names (and, depending
on the storage client, camelCase or snake_case keys). Each family is described by
one `RecordFamily` row in `RECORD_FAMILIES`; every accessor is a tuple of
candidate field names and the first present, non-empty value wins. Supporting a
new family means adding a row, not a branch.

Normalization is a 1:1, order-preserving map. Malformed records are never
dropped: a bad timestamp yields `submitted_at=None` and a bad amount yields
`amount=0` plus an `amount_issue`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from lab_metrics.domain.models import AmountIssue, AmountWarning, NormalizedEntry
from lab_metrics.errors import UnknownRecordKindError
from lab_metrics.metrics.buckets import to_utc

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Fields = Tuple[str, ...]


@dataclass(frozen=True)
class RecordFamily:
    """Field-accessor table for one record family."""

    kind: str
    id: Fields
    submitted_at: Fields
    status: Fields
    amount: Fields
    expected_users: Fields
    technology: Fields
    client: Fields
    lab_type: Fields
    agent: Fields


RECORD_FAMILIES: Dict[str, RecordFamily] = {
    "solution": RecordFamily(
        kind="solution",
        id=("id",),
        submitted_at=("createdAt", "created_at"),
        status=("status",),
        amount=("totalAmountForTraining", "total_amount_for_training"),
        expected_users=("userCount", "user_count"),
        technology=("labName", "lab_name"),
        client=("client",),
        lab_type=("tpLabType", "tp_lab_type", "cloudType", "cloud_type", "cloud"),
        agent=("agentName", "agent_name"),
    ),
    "delivery": RecordFamily(
        kind="delivery",
        id=("id",),
        submitted_at=("createdAt", "created_at"),
        status=("labStatus", "lab_status"),
        amount=("totalAmount", "total_amount"),
        expected_users=("numberOfUsers", "number_of_users"),
        technology=("trainingName", "training_name", "labName", "lab_name"),
        client=("client",),
        lab_type=(
            "labType",
            "lab_type",
            "tpLabType",
            "tp_lab_type",
            "cloudType",
            "cloud_type",
            "cloud",
        ),
        agent=("agentName", "agent_name"),
    ),
}


def get_family(kind: str) -> RecordFamily:
    try:
        return RECORD_FAMILIES[kind]
    except KeyError:
        raise UnknownRecordKindError(
            f"Unknown record kind '{kind}'. Available: {', '.join(RECORD_FAMILIES)}"
        ) from None


def _first(record: Mapping[str, Any], names: Fields) -> Any:
    for name in names:
        value = record.get(name)
        if value is not None and value != "":
            return value
    return None


def _text(record: Mapping[str, Any], names: Fields, default: str) -> str:
    value = _first(record, names)
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp into an aware UTC datetime.

    Accepts strings (with `Z`, an offset, or naive meaning UTC), date-only
    strings, `datetime` and `date` objects. Returns None for anything else.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    try:
        return to_utc(parsed)
    except (ValueError, OverflowError):
        return None


def parse_amount(value: Any) -> Tuple[Decimal, Optional[AmountIssue]]:
    """
    Convert a source monetary value into a non-negative, cent-quantized Decimal.

    Returns the amount and the reason it was replaced by 0, if it was.
    """
    if isinstance(value, bool) or value is None:
        return ZERO, "non_numeric_amount"
    if isinstance(value, float):
        if not math.isfinite(value):
            return ZERO, "non_numeric_amount"
        # repr keeps 0.1 as 0.1 instead of its binary expansion
        value = repr(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not amount.is_finite():
            return ZERO, "non_numeric_amount"
        if amount < 0:
            return ZERO, "negative_amount"
        # abs drops the sign of -0
        return abs(amount).quantize(CENT, rounding=ROUND_HALF_UP), None
    except (InvalidOperation, ValueError):
        return ZERO, "non_numeric_amount"


def parse_count(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    try:
        count = int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError, OverflowError):
        return 0
    return max(count, 0)


def normalize_record(record: Any, family: RecordFamily) -> NormalizedEntry:
    row: Mapping[str, Any] = record if isinstance(record, Mapping) else {}
    amount, issue = parse_amount(_first(row, family.amount))
    return NormalizedEntry(
        id=_text(row, family.id, ""),
        kind=family.kind,
        submitted_at=parse_timestamp(_first(row, family.submitted_at)),
        status=_text(row, family.status, "Unknown"),
        amount=amount,
        amount_issue=issue,
        expected_users=parse_count(_first(row, family.expected_users)),
        technology=_text(row, family.technology, "N/A"),
        client=_text(row, family.client, "N/A"),
        lab_type=_text(row, family.lab_type, "N/A"),
        agent=_text(row, family.agent, "Unassigned"),
    )


def normalize(records: Sequence[Any], kind: str) -> List[NormalizedEntry]:
    """Map a homogeneous collection of one record family to normalized entries."""
    family = get_family(kind)
    return [normalize_record(record, family) for record in records]


def collect_warnings(entries: Iterable[NormalizedEntry]) -> List[AmountWarning]:
    """Amount warnings for entries whose source amount was clamped to 0."""
    return [
        AmountWarning(id=entry.id, kind=entry.kind, reason=entry.amount_issue)
        for entry in entries
        if entry.amount_issue is not None
    ]


__all__ = [
    "RECORD_FAMILIES",
    "RecordFamily",
    "collect_warnings",
    "get_family",
    "normalize",
    "normalize_record",
    "parse_amount",
    "parse_count",
    "parse_timestamp",
]
