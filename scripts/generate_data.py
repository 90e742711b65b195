"""
Synthetic record generation script for lab request metrics.

Writes a deterministic JSON export of solution and delivery requests that
`lab-metrics report --input` (and the JSON record source) can read.
"""

from __future__ import annotations

import json
import sys
import time
from datetime import date, datetime
from pathlib import Path

import typer

from lab_metrics.sources.synthetic import generate_records

app = typer.Typer(help="Generate synthetic solution and delivery records as JSON.")


def _write_records(json_path: Path, rows: int, seed: int, start: date, days: int) -> dict:
    document = generate_records(rows, seed=seed, start=start, days=days)
    json_path.parent.mkdir(parents=True, exist_ok=True)
    with json_path.open("w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
    return document


@app.command()
def main(
    rows: int = typer.Option(
        1_000,
        "--rows",
        "-r",
        help="Number of records to generate (split between both families).",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    start: datetime = typer.Option(
        "2025-01-01",
        "--start",
        formats=["%Y-%m-%d"],
        help="First day submissions may fall on.",
    ),
    days: int = typer.Option(
        180,
        "--days",
        help="Number of days the submissions are spread over.",
    ),
    output: Path = typer.Option(
        Path("data/requests.json"),
        "--output",
        "-o",
        help="JSON output path.",
    ),
) -> None:
    """
    Generate synthetic request records and write them to a JSON file.
    """
    begin = time.perf_counter()
    typer.echo(f"Generating {rows:,} records -> {output} (seed={seed}, start={start:%Y-%m-%d})")
    document = _write_records(output, rows=rows, seed=seed, start=start.date(), days=days)
    duration = time.perf_counter() - begin
    typer.echo(
        f"Wrote {len(document['solutions']):,} solutions and "
        f"{len(document['deliveries']):,} deliveries in {duration:.2f}s"
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
