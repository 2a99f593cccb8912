"""Console rendering of decoded reports using rich."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

from datastreams.reports.decode import DecodedReport

if TYPE_CHECKING:
    from datastreams.jobs.latest import FeedResult


def format_price(value: float | None) -> str:
    if value is None:
        return "-"
    return f"${value:,.2f}"


def _bound(value: float | None) -> str:
    return "*" if value is None else f"{value:g}"


def _or_dash(value: object) -> str:
    return "-" if value is None else str(value)


def raw_report_summary(report: DecodedReport) -> dict[str, Any]:
    """Compact JSON-friendly view used for audit output."""
    return {
        "feedID": report.feed_id,
        "timestamp": report.observations_timestamp,
        "fullReport": report.raw_report,
    }


def render_report(console: Console, symbol: str, report: DecodedReport) -> None:
    table = Table(title=f"{symbol} Report")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Feed ID", _or_dash(report.feed_id))
    table.add_row("Benchmark Price", format_price(report.benchmark_price))
    table.add_row("Bid", format_price(report.bid))
    table.add_row("Ask", format_price(report.ask))
    table.add_row("Valid From", _or_dash(report.valid_from_timestamp))
    table.add_row("Timestamp", _or_dash(report.observations_timestamp))
    table.add_row("Mode", report.mode.value)
    console.print(table)


def render_comparison(console: Console, results: list[FeedResult]) -> None:
    table = Table(title="Results Comparison")
    table.add_column("Symbol", style="cyan")
    table.add_column("Price", style="green")
    table.add_column("Bid", style="green")
    table.add_column("Ask", style="green")
    table.add_column("Timestamp", style="white")
    table.add_column("Status", style="magenta")
    for result in results:
        report = result.report
        if report is None:
            table.add_row(result.feed.symbol, "-", "-", "-", "-", f"[red]{result.error}[/red]")
            continue
        table.add_row(
            result.feed.symbol,
            format_price(report.benchmark_price),
            format_price(report.bid),
            format_price(report.ask),
            _or_dash(report.observations_timestamp),
            "ok",
        )
    console.print(table)


def render_range_analysis(console: Console, results: list[FeedResult]) -> None:
    console.print("[bold]Price Range Analysis[/bold]")
    for result in results:
        if result.report is None:
            continue
        feed = result.feed
        in_range = feed.in_expected_range(result.report.benchmark_price)
        if in_range is None:
            console.print(f"  {feed.symbol}: no expected range configured")
            continue
        bounds = f"{_bound(feed.expected_min)}-{_bound(feed.expected_max)}"
        style = "green" if in_range else "red"
        console.print(f"  {feed.symbol} price in expected range ({bounds}): [{style}]{in_range}[/{style}]")


def render_raw_reports(console: Console, results: list[FeedResult]) -> None:
    for result in results:
        if result.report is None:
            continue
        console.print(f"\n{result.feed.symbol} Raw Report:")
        console.print_json(json.dumps(raw_report_summary(result.report)))
