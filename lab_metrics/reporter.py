from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from lab_metrics.domain.models import Bucket, Granularity, MetricsResult

TOP_ROWS = 10


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


def _status_summary(bucket: Bucket) -> str:
    return ", ".join(f"{status}: {count}" for status, count in bucket.status_counts.items())


def build_series_table(buckets: List[Bucket], granularity: Granularity) -> Table:
    """Render one granularity's buckets, oldest first."""
    table = Table(
        title=f"{granularity.value.capitalize()} Metrics",
        box=box.ROUNDED,
        caption="Ascending by period",
    )
    table.add_column("Period", style="cyan", no_wrap=True)
    table.add_column("Requests", justify="right", style="magenta")
    table.add_column("Total Amount", justify="right", style="bold green")
    table.add_column("Expected Users", justify="right", style="yellow")
    table.add_column("Clients", justify="right", style="blue")
    table.add_column("Agents", justify="right", style="blue")
    table.add_column("Status Breakdown", style="dim")

    for bucket in buckets:
        table.add_row(
            bucket.label,
            f"{bucket.count:,}",
            _money(bucket.total_amount),
            f"{bucket.total_expected_users:,}",
            str(bucket.unique_clients),
            str(bucket.unique_agents),
            _status_summary(bucket) or "-",
        )
    return table


def build_breakdown_table(bucket: Bucket, limit: int = TOP_ROWS) -> Table:
    """Top dimension rows for one bucket, most requested first."""
    table = Table(title=f"Top Requests: {bucket.label}", box=box.SIMPLE_HEAVY)
    table.add_column("Technology Name", style="cyan")
    table.add_column("Client")
    table.add_column("Expected Users", justify="right", style="yellow")
    table.add_column("Lab Type")
    table.add_column("Status")
    table.add_column("Agent")
    table.add_column("Requests", justify="right", style="magenta")

    for row in bucket.rows[:limit]:
        table.add_row(
            row.technology,
            row.client,
            f"{row.expected_users:,}",
            row.lab_type,
            row.status,
            row.agent,
            str(row.requests),
        )
    return table


def print_metrics(
    result: MetricsResult,
    granularities: Optional[Iterable[Granularity | str]] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Render a metrics result as rich tables.

    Prints one table per granularity (all computed ones by default), the overall
    rollup with its top dimension rows, and a data-quality line when records were
    excluded or had their amounts clamped.
    """
    console = console or Console()

    if granularities is None:
        wanted = list(result.series)
    else:
        wanted = [Granularity(g) for g in granularities]
    for granularity in wanted:
        if granularity is Granularity.ALL:
            continue
        buckets = result.series.get(granularity)
        if buckets is None:
            console.print(f"[yellow]{granularity.value} metrics were not computed.[/yellow]")
            continue
        if not buckets:
            console.print(
                f"[yellow]No records available in the {granularity.value} view.[/yellow]"
            )
            continue
        console.print(build_series_table(buckets, granularity))

    overall = result.overall
    console.print(
        f"[bold]{overall.label}[/bold]: {overall.count:,} requests | "
        f"amount {_money(overall.total_amount)} | "
        f"expected users {overall.total_expected_users:,} | "
        f"unique clients {overall.unique_clients} | unique agents {overall.unique_agents}"
    )
    if overall.rows:
        console.print(build_breakdown_table(overall))

    if result.excluded_count or result.filtered_out_count or result.warnings:
        console.print(
            f"[yellow]Data quality:[/yellow] {result.excluded_count} excluded (bad timestamp), "
            f"{result.filtered_out_count} outside date range, "
            f"{len(result.warnings)} amount warning(s) of {result.total_records:,} records."
        )


__all__ = ["build_breakdown_table", "build_series_table", "print_metrics"]
