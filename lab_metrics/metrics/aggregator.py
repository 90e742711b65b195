"""
Time-bucket aggregation over normalized entries.

Entries are folded into per-key accumulators and emitted as frozen `Bucket`
models, sorted ascending by key as the last step. Amounts are cent-quantized
Decimals, so totals are exact regardless of input size.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Set, Tuple

from lab_metrics.domain.models import Bucket, DimensionRow, Granularity, NormalizedEntry
from lab_metrics.metrics.buckets import (
    ALL_TIME_KEY,
    BucketKey,
    key_range,
    label,
    period_bounds,
    resolve_key,
)

DimensionKey = Tuple[str, str, str, str, str]


@dataclass
class _RowTotals:
    expected_users: int = 0
    requests: int = 0


@dataclass
class BucketAccumulator:
    """Mutable running totals for one bucket; lives only inside `aggregate`."""

    key: BucketKey
    count: int = 0
    total_amount: Decimal = Decimal("0.00")
    status_counts: Counter = field(default_factory=Counter)
    kind_counts: Counter = field(default_factory=Counter)
    total_expected_users: int = 0
    clients: Set[str] = field(default_factory=set)
    agents: Set[str] = field(default_factory=set)
    rows: Dict[DimensionKey, _RowTotals] = field(default_factory=dict)

    def add(self, entry: NormalizedEntry, breakdown: bool = True) -> None:
        self.count += 1
        self.total_amount += entry.amount
        self.status_counts[entry.status] += 1
        self.kind_counts[entry.kind] += 1
        self.total_expected_users += entry.expected_users
        self.clients.add(entry.client)
        self.agents.add(entry.agent)
        if breakdown:
            dims = (entry.technology, entry.client, entry.lab_type, entry.status, entry.agent)
            totals = self.rows.setdefault(dims, _RowTotals())
            totals.expected_users += entry.expected_users
            totals.requests += 1

    def to_bucket(self) -> Bucket:
        rows = [
            DimensionRow(
                technology=dims[0],
                client=dims[1],
                lab_type=dims[2],
                status=dims[3],
                agent=dims[4],
                expected_users=totals.expected_users,
                requests=totals.requests,
            )
            for dims, totals in sorted(
                self.rows.items(),
                key=lambda item: (-item[1].requests, -item[1].expected_users, item[0]),
            )
        ]
        start, end = period_bounds(self.key)
        return Bucket(
            granularity=self.key.granularity,
            key=str(self.key),
            label=label(self.key),
            period_start=start,
            period_end=end,
            count=self.count,
            total_amount=self.total_amount,
            status_counts=_ordered_counts(self.status_counts),
            kind_counts=_ordered_counts(self.kind_counts),
            total_expected_users=self.total_expected_users,
            unique_clients=len(self.clients),
            unique_agents=len(self.agents),
            rows=rows,
        )


def _ordered_counts(counts: Counter) -> Dict[str, int]:
    """Most frequent first, ties broken by name, for reproducible output."""
    return {name: n for name, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))}


def aggregate(
    entries: Iterable[NormalizedEntry],
    granularity: Granularity | str,
    *,
    gap_fill: bool = False,
    breakdown: bool = True,
) -> List[Bucket]:
    """
    Fold entries into buckets at one granularity.

    Entries without a parsed `submitted_at` are skipped; the caller accounts for
    them. With `gap_fill`, every key between the first and last observed key is
    emitted, empty ones with zero totals. The `all` granularity always yields a
    single bucket, even for no entries.
    """
    g = Granularity(granularity)
    accumulators: Dict[BucketKey, BucketAccumulator] = {}

    for entry in entries:
        if not entry.is_bucketable:
            continue
        key = resolve_key(entry.submitted_at, g)
        acc = accumulators.get(key)
        if acc is None:
            acc = accumulators[key] = BucketAccumulator(key=key)
        acc.add(entry, breakdown=breakdown)

    if g is Granularity.ALL and not accumulators:
        accumulators[ALL_TIME_KEY] = BucketAccumulator(key=ALL_TIME_KEY)

    if gap_fill and accumulators and g is not Granularity.ALL:
        for key in key_range(min(accumulators), max(accumulators)):
            if key not in accumulators:
                accumulators[key] = BucketAccumulator(key=key)

    return [accumulators[key].to_bucket() for key in sorted(accumulators)]


__all__ = ["BucketAccumulator", "aggregate"]
