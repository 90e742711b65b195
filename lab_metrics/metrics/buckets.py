"""
Bucket key resolution for time-bucketed metrics.

Every timestamp is bucketed in UTC. Keys are small integer tuples so that, for a
fixed granularity, sorting keys is sorting periods chronologically:

    day      (year, day_of_year)      2025-03-10
    week     (iso_year, iso_week)     2025-W11
    month    (year, month)            2025-03
    quarter  (year, quarter)          2025-Q1
    year     (year,)                  2025
    all      ()                       all

Weeks follow ISO-8601 (Monday start) and are keyed by the ISO week-numbering
year, so 2024-12-31 belongs to 2025-W01.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Iterator, Optional, Tuple

from lab_metrics.domain.models import Granularity

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True, order=True)
class BucketKey:
    """Totally ordered bucket identifier; only compare keys of one granularity."""

    granularity: Granularity = field(compare=False)
    parts: Tuple[int, ...] = ()

    def __str__(self) -> str:
        g = self.granularity
        if g is Granularity.DAY:
            return period_start(self).isoformat()
        if g is Granularity.WEEK:
            return f"{self.parts[0]:04d}-W{self.parts[1]:02d}"
        if g is Granularity.MONTH:
            return f"{self.parts[0]:04d}-{self.parts[1]:02d}"
        if g is Granularity.QUARTER:
            return f"{self.parts[0]:04d}-Q{self.parts[1]}"
        if g is Granularity.YEAR:
            return f"{self.parts[0]:04d}"
        return "all"


ALL_TIME_KEY = BucketKey(Granularity.ALL, ())


def to_utc(timestamp: datetime) -> datetime:
    """Interpret naive timestamps as UTC and convert aware ones to UTC."""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(UTC)


def resolve_key(timestamp: datetime, granularity: Granularity | str) -> BucketKey:
    """Compute the bucket key containing `timestamp` at `granularity`."""
    g = Granularity(granularity)
    if g is Granularity.ALL:
        return ALL_TIME_KEY

    day = to_utc(timestamp).date()
    return _key_for_date(day, g)


def _key_for_date(day: date, g: Granularity) -> BucketKey:
    if g is Granularity.DAY:
        return BucketKey(g, (day.year, day.timetuple().tm_yday))
    if g is Granularity.WEEK:
        iso = day.isocalendar()
        return BucketKey(g, (iso.year, iso.week))
    if g is Granularity.MONTH:
        return BucketKey(g, (day.year, day.month))
    if g is Granularity.QUARTER:
        return BucketKey(g, (day.year, (day.month - 1) // 3 + 1))
    if g is Granularity.YEAR:
        return BucketKey(g, (day.year,))
    return ALL_TIME_KEY


def period_start(key: BucketKey) -> Optional[date]:
    """First calendar day covered by `key` (None for all-time)."""
    g = key.granularity
    if g is Granularity.DAY:
        year, yday = key.parts
        return date(year, 1, 1) + timedelta(days=yday - 1)
    if g is Granularity.WEEK:
        year, week = key.parts
        return date.fromisocalendar(year, week, 1)
    if g is Granularity.MONTH:
        year, month = key.parts
        return date(year, month, 1)
    if g is Granularity.QUARTER:
        year, quarter = key.parts
        return date(year, 3 * (quarter - 1) + 1, 1)
    if g is Granularity.YEAR:
        return date(key.parts[0], 1, 1)
    return None


def next_key(key: BucketKey) -> BucketKey:
    """The key immediately following `key` at the same granularity."""
    g = key.granularity
    if g is Granularity.DAY:
        return _key_for_date(period_start(key) + timedelta(days=1), g)
    if g is Granularity.WEEK:
        return _key_for_date(period_start(key) + timedelta(days=7), g)
    if g is Granularity.MONTH:
        year, month = key.parts
        return BucketKey(g, (year + 1, 1) if month == 12 else (year, month + 1))
    if g is Granularity.QUARTER:
        year, quarter = key.parts
        return BucketKey(g, (year + 1, 1) if quarter == 4 else (year, quarter + 1))
    if g is Granularity.YEAR:
        return BucketKey(g, (key.parts[0] + 1,))
    raise ValueError("The all-time bucket has no successor")


def period_end(key: BucketKey) -> Optional[date]:
    """Last calendar day covered by `key` (None for all-time)."""
    g = key.granularity
    start = period_start(key)
    if g is Granularity.DAY:
        return start
    if g is Granularity.WEEK:
        # the last ISO week of 9999 runs past date.max
        return start + timedelta(days=min(6, (date.max - start).days))
    if g is Granularity.MONTH:
        year, month = key.parts
        if month == 12:
            return date(year, 12, 31)
        return date(year, month + 1, 1) - timedelta(days=1)
    if g is Granularity.QUARTER:
        year, quarter = key.parts
        if quarter == 4:
            return date(year, 12, 31)
        return date(year, 3 * quarter + 1, 1) - timedelta(days=1)
    if g is Granularity.YEAR:
        return date(key.parts[0], 12, 31)
    return None


def period_bounds(key: BucketKey) -> Tuple[Optional[date], Optional[date]]:
    """Inclusive first and last calendar day of `key`."""
    return period_start(key), period_end(key)


def key_range(first: BucketKey, last: BucketKey) -> Iterator[BucketKey]:
    """Yield every key from `first` to `last` inclusive."""
    if first.granularity is not last.granularity:
        raise ValueError(
            f"Cannot span keys of different granularities: "
            f"{first.granularity.value} and {last.granularity.value}"
        )
    if first.granularity is Granularity.ALL:
        yield ALL_TIME_KEY
        return

    if first > last:
        return
    current = first
    while current < last:
        yield current
        current = next_key(current)
    yield last


def label(key: BucketKey, granularity: Granularity | str | None = None) -> str:
    """Human-readable label for a bucket key."""
    g = Granularity(granularity) if granularity is not None else key.granularity
    if g is not key.granularity:
        raise ValueError(f"Key {key} is not a {g.value} key")

    if g is Granularity.MONTH:
        year, month = key.parts
        return f"{MONTH_NAMES[month - 1]} {year}"
    if g is Granularity.QUARTER:
        year, quarter = key.parts
        return f"Q{quarter} {year}"
    if g is Granularity.ALL:
        return "All Time"
    return str(key)


__all__ = [
    "ALL_TIME_KEY",
    "BucketKey",
    "MONTH_NAMES",
    "key_range",
    "label",
    "next_key",
    "period_bounds",
    "period_end",
    "period_start",
    "resolve_key",
    "to_utc",
]
