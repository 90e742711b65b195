from __future__ import annotations

import json
import sys
from datetime import date, datetime, time
from pathlib import Path
from typing import List, Optional

import typer

from lab_metrics.config import get_settings
from lab_metrics.errors import LabMetricsError, MetricsConfigError
from lab_metrics.metrics.facade import build_config
from lab_metrics.metrics.normalizer import parse_timestamp
from lab_metrics.reporter import print_metrics
from lab_metrics.runner import run_report
from lab_metrics.sources import available_sources, resolve_source
from lab_metrics.sources.abstract import RecordSource
from lab_metrics.utils.logging import configure_logging

app = typer.Typer(help="Lab request metrics CLI.")


def _is_date_only(value: str) -> bool:
    try:
        date.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def _parse_bound(
    value: Optional[str], option: str, end_of_day: bool = False
) -> Optional[datetime]:
    """
    Parse a --from/--to bound. With `end_of_day`, a date-only value covers the
    whole UTC day instead of stopping at its midnight.
    """
    if value is None:
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        raise typer.BadParameter(f"'{value}' is not an ISO 8601 timestamp", param_hint=option)
    if end_of_day and _is_date_only(value):
        return datetime.combine(parsed.date(), time.max, tzinfo=parsed.tzinfo)
    return parsed


def _build_source(
    name: Optional[str], input_path: Optional[Path], sample: Optional[int]
) -> RecordSource:
    settings = get_settings()
    if input_path is not None and sample is not None:
        raise typer.BadParameter("Use either --input or --sample, not both.")
    if name is None:
        name = "json" if input_path is not None else "sample"

    options: dict = {}
    if name == "json":
        if input_path is None:
            raise typer.BadParameter("The json source needs --input.", param_hint="--source")
        options = {"path": input_path}
    elif name == "sample":
        options = {
            "rows": sample if sample is not None else settings.sample_rows,
            "seed": settings.sample_seed,
        }
    try:
        return resolve_source(name, **options)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--source") from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"env={settings.app_env} | log_level={settings.log_level} "
        f"json_logs={settings.log_json} | "
        f"granularities={','.join(settings.granularity_names)} "
        f"gap_fill={settings.metrics_gap_fill} | "
        f"results_dir={settings.results_dir} sample_rows={settings.sample_rows} "
        f"sample_seed={settings.sample_seed}"
    )


@app.command()
def report(
    source_name: Optional[str] = typer.Option(
        None,
        "--source",
        "-s",
        help="Record source (json, sample, or 'list'). Inferred from --input/--sample.",
    ),
    input_path: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        help="JSON file with 'solutions' and 'deliveries' arrays.",
    ),
    sample: Optional[int] = typer.Option(
        None,
        "--sample",
        help="Number of seeded synthetic records for the sample source (default from settings).",
    ),
    granularity: Optional[List[str]] = typer.Option(
        None,
        "--granularity",
        "-g",
        help="Granularity to compute (day, week, month, quarter, year, all). Repeatable.",
    ),
    date_from: Optional[str] = typer.Option(
        None, "--from", help="Inclusive lower bound on submission time (ISO 8601)."
    ),
    date_to: Optional[str] = typer.Option(
        None,
        "--to",
        help="Inclusive upper bound (ISO 8601, default now); a bare date covers that whole day.",
    ),
    gap_fill: Optional[bool] = typer.Option(
        None,
        "--gap-fill/--no-gap-fill",
        help="Emit zero-activity buckets between the first and last observed period.",
    ),
    no_breakdown: bool = typer.Option(
        False, "--no-breakdown", help="Skip per-technology/client/agent dimension rows."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report payload as JSON."),
    persist: bool = typer.Option(
        True, "--persist/--no-persist", help="Write results/latest.json and an archive copy."
    ),
) -> None:
    """
    Compute time-bucketed request metrics and render or persist them.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    if source_name == "list":
        typer.echo("Available sources: " + ", ".join(available_sources()))
        raise typer.Exit()
    source = _build_source(source_name, input_path, sample)

    try:
        config = build_config(
            granularities=granularity or None,
            date_from=_parse_bound(date_from, "--from"),
            date_to=_parse_bound(date_to, "--to", end_of_day=True),
            gap_fill=gap_fill,
            breakdown=not no_breakdown,
        )
        result, payload = run_report(
            source, config=config, results_dir=settings.results_dir, persist=persist
        )
    except MetricsConfigError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except LabMetricsError as exc:
        typer.echo(f"Report failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(json.dumps(payload, indent=2))
    else:
        print_metrics(result)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
