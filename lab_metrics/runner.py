"""
Report runner: fetch records, compute metrics, profile and persist the result.

Usage (example from CLI):
    from lab_metrics.runner import run_report
    from lab_metrics.sources import JsonFileSource

    payload = run_report(JsonFileSource("exports/requests.json"))
    print(payload["result"]["overall"])

Outputs are saved to `results/` by default:
- `results/latest.json` (last report)
- `results/report-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, Optional

from lab_metrics.domain.models import MetricsConfig, MetricsResult
from lab_metrics.metrics.facade import build_config, compute_metrics
from lab_metrics.sources.abstract import RecordSource
from lab_metrics.utils.logging import get_logger
from lab_metrics.utils.profiler import profile_block

log = get_logger(__name__)


def _persist_payload(payload: dict, results_dir: Path) -> Path:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"report-{timestamp}.json"

    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Report persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})
    return latest_path


def build_payload(
    result: MetricsResult, source: RecordSource, profile: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """JSON-ready report envelope around a metrics result."""
    return {
        "timestamp": datetime.now(UTC).isoformat(),
        "source": {"name": source.name, "description": source.description},
        "profile": profile or {},
        "result": result.to_payload(),
    }


def run_report(
    source: RecordSource,
    config: Optional[MetricsConfig] = None,
    results_dir: Path | str = "results",
    persist: bool = True,
    now: Optional[datetime] = None,
) -> tuple[MetricsResult, Dict[str, Any]]:
    """
    Fetch records from `source`, compute metrics and optionally persist them.

    Parameters
    ----------
    source : RecordSource
        Where the complete record collections come from.
    config : MetricsConfig | None
        Facade configuration. Defaults come from settings.
    results_dir : Path | str
        Directory to store JSON artifacts.
    persist : bool
        Whether to write the report to disk.
    now : datetime | None
        Passed through to `compute_metrics` for the `date_to` default.

    Returns
    -------
    tuple[MetricsResult, dict]
        The metrics result and the JSON-ready report payload.
    """
    config = config if config is not None else build_config()

    log.info(f"[REPORT START] source={source.name}", extra={"source": source.name})
    records = source.fetch()

    with profile_block("compute_metrics") as stats:
        result = compute_metrics(records, config, now=now)

    payload = build_payload(result, source, profile=stats.as_dict())
    if persist:
        _persist_payload(payload, Path(results_dir))

    log.info(
        f"[REPORT COMPLETE] source={source.name}",
        extra={
            "source": source.name,
            "records": result.total_records,
            "excluded": result.excluded_count,
            "filtered_out": result.filtered_out_count,
            "duration_seconds": payload["profile"].get("duration_seconds"),
        },
    )
    return result, payload


__all__ = ["build_payload", "run_report"]
