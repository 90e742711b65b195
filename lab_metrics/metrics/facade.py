"""
Public entry point of the metrics engine.

`compute_metrics` is a pure function of the records and configuration it is
given: it normalizes every record family once, splits out entries with bad
timestamps (`excluded_count`) and entries outside the requested date range
(`filtered_out_count`), then aggregates the remaining shared sequence once per
granularity. The all-time rollup is always computed.

The only ambient input is the clock, read once when `date_to` is omitted.
Callers that need reproducible results pass `date_to` (or `now`) explicitly.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Iterable, List, Optional

from pydantic import ValidationError

from lab_metrics.config import get_settings
from lab_metrics.domain.models import (
    GRANULARITY_ORDER,
    Bucket,
    Granularity,
    MetricsConfig,
    MetricsResult,
    NormalizedEntry,
    RequestRecords,
)
from lab_metrics.errors import MetricsConfigError
from lab_metrics.metrics.aggregator import aggregate
from lab_metrics.metrics.buckets import to_utc
from lab_metrics.metrics.normalizer import collect_warnings, normalize
from lab_metrics.utils.logging import get_logger

log = get_logger(__name__)


def build_config(
    granularities: Optional[Iterable[str] | str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    gap_fill: Optional[bool] = None,
    breakdown: bool = True,
) -> MetricsConfig:
    """
    Build a `MetricsConfig`, falling back to settings for unspecified options.

    Raises MetricsConfigError for unknown granularity names.
    """
    settings = get_settings()
    if granularities is None:
        granularities = settings.granularity_names
    elif not isinstance(granularities, str):
        granularities = list(granularities)
    try:
        return MetricsConfig(
            granularities=granularities,
            date_from=date_from,
            date_to=date_to,
            gap_fill=settings.metrics_gap_fill if gap_fill is None else gap_fill,
            breakdown=breakdown,
        )
    except ValidationError as exc:
        valid = ", ".join(g.value for g in GRANULARITY_ORDER)
        raise MetricsConfigError(
            f"Invalid metrics configuration (granularities: {valid}): {exc}"
        ) from exc


def _requested(config: MetricsConfig) -> List[Granularity]:
    if not config.granularities:
        raise MetricsConfigError("At least one granularity must be requested")
    wanted = set(config.granularities)
    return [g for g in GRANULARITY_ORDER if g in wanted]


def _resolve_range(
    config: MetricsConfig, now: Optional[datetime]
) -> tuple[Optional[datetime], datetime]:
    date_from = to_utc(config.date_from) if config.date_from is not None else None
    if config.date_to is not None:
        date_to = to_utc(config.date_to)
    else:
        date_to = to_utc(now) if now is not None else datetime.now(UTC)
    if date_from is not None and date_from > date_to:
        raise MetricsConfigError(
            f"date_from ({date_from.isoformat()}) is after date_to ({date_to.isoformat()})"
        )
    return date_from, date_to


def _in_range(entry: NormalizedEntry, date_from: Optional[datetime], date_to: datetime) -> bool:
    if date_from is not None and entry.submitted_at < date_from:
        return False
    return entry.submitted_at <= date_to


def compute_metrics(
    records: RequestRecords,
    config: Optional[MetricsConfig] = None,
    *,
    now: Optional[datetime] = None,
) -> MetricsResult:
    """
    Compute time-bucketed metrics over solution and delivery records.

    Parameters
    ----------
    records : RequestRecords
        Fully materialized record collections, one per family.
    config : MetricsConfig | None
        Granularities, optional inclusive date range, gap-fill and breakdown
        options. Defaults come from settings.
    now : datetime | None
        Instant used when `config.date_to` is omitted. Defaults to the current
        UTC time, read once per call.

    Returns
    -------
    MetricsResult
        Ordered buckets per requested granularity, the all-time rollup and
        data-quality counters.

    Raises
    ------
    MetricsConfigError
        Empty granularities or `date_from` after `date_to`.
    UnknownRecordKindError
        A record family without a normalizer mapping.
    """
    config = config if config is not None else build_config()
    granularities = _requested(config)
    date_from, date_to = _resolve_range(config, now)

    entries: List[NormalizedEntry] = []
    for kind, rows in records.by_kind().items():
        entries.extend(normalize(rows, kind))

    excluded_ids: List[str] = []
    filtered_out = 0
    in_scope: List[NormalizedEntry] = []
    for entry in entries:
        if not entry.is_bucketable:
            excluded_ids.append(entry.id)
        elif _in_range(entry, date_from, date_to):
            in_scope.append(entry)
        else:
            filtered_out += 1

    series = {
        g: aggregate(in_scope, g, gap_fill=config.gap_fill, breakdown=config.breakdown)
        for g in granularities
        if g is not Granularity.ALL
    }
    overall: Bucket = aggregate(in_scope, Granularity.ALL, breakdown=config.breakdown)[0]
    if Granularity.ALL in granularities:
        series[Granularity.ALL] = [overall]

    warnings = collect_warnings(entries)
    result = MetricsResult(
        series=series,
        overall=overall,
        total_records=len(entries),
        excluded_count=len(excluded_ids),
        filtered_out_count=filtered_out,
        excluded_ids=excluded_ids,
        warnings=warnings,
        date_from=date_from,
        date_to=date_to,
        gap_fill=config.gap_fill,
    )

    log.info(
        "Metrics computed",
        extra={
            "records": result.total_records,
            "bucketed": overall.count,
            "excluded": result.excluded_count,
            "filtered_out": result.filtered_out_count,
            "granularities": [g.value for g in series],
        },
    )
    if result.excluded_count:
        log.warning(
            f"{result.excluded_count} record(s) excluded for missing or invalid timestamps",
            extra={"excluded_ids": excluded_ids[:20]},
        )
    if warnings:
        log.warning(
            f"{len(warnings)} record(s) had negative or non-numeric amounts counted as 0",
            extra={"amount_warnings": len(warnings)},
        )
    return result


__all__ = ["build_config", "compute_metrics"]
