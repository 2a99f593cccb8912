"""CLI entry point using Typer."""

import json
import sys
from datetime import UTC, datetime
from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.table import Table

from datastreams.auth.signer import mask_secret, sign_request
from datastreams.config import settings
from datastreams.errors import ConfigurationError, DecodeError
from datastreams.feeds import load_feed_catalog, select_feeds
from datastreams.jobs.latest import build_client, run_latest_reports
from datastreams.render import (
    render_comparison,
    render_range_analysis,
    render_raw_reports,
    render_report,
)
from datastreams.reports.decode import DecodeMode, decode_report

app = typer.Typer(
    name="datastreams",
    help="Data Streams - fetch and decode signed price reports.",
)
console = Console()

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(sys.stderr),
)


def _resolve_mode(mode: DecodeMode | None) -> DecodeMode:
    if mode is not None:
        return mode
    try:
        return DecodeMode(settings.streams_decode_mode)
    except ValueError:
        console.print(f"[bold red]Error:[/bold red] Unknown decode mode {settings.streams_decode_mode!r}")
        raise typer.Exit(1)


@app.command()
def latest(
    symbols: list[str] | None = typer.Option(None, "--symbol", "-s", help="Feed symbol, repeatable"),
    mode: DecodeMode | None = typer.Option(None, "--mode", help="Decode mode"),
    feeds_path: str | None = typer.Option(None, "--feeds", help="Path to feeds YAML file"),
    as_json: bool = typer.Option(False, "--json", help="Print decoded reports as JSON"),
) -> None:
    """Fetch and decode the latest report for each feed."""
    decode_mode = _resolve_mode(mode)

    try:
        catalog = load_feed_catalog(feeds_path or settings.streams_feeds_path)
        selected = select_feeds(catalog, symbols)
    except (KeyError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    try:
        client = build_client(settings)
    except ConfigurationError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not as_json:
        console.print(f"Timestamp: {datetime.now(UTC).isoformat()}")
        console.print(f"Base URL: {client.base_url}")

    results = run_latest_reports(selected, client=client, mode=decode_mode)

    if as_json:
        payload = [
            {
                "symbol": result.feed.symbol,
                "report": result.report.to_dict() if result.report else None,
                "error": result.error,
            }
            for result in results
        ]
        typer.echo(json.dumps(payload, indent=2))
    else:
        for result in results:
            if result.report is not None:
                render_report(console, result.feed.symbol, result.report)
        render_comparison(console, results)
        render_range_analysis(console, results)
        render_raw_reports(console, results)

    if not all(result.ok for result in results):
        console.print("[bold red]Failed to fetch one or more reports[/bold red]")
        raise typer.Exit(1)


@app.command()
def decode(
    raw_report: str | None = typer.Argument(None, help="0x-prefixed hex report"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Read the hex report from a file"),
    mode: DecodeMode | None = typer.Option(None, "--mode", help="Decode mode"),
    as_json: bool = typer.Option(False, "--json", help="Print the decoded report as JSON"),
) -> None:
    """Decode a raw report without contacting the API."""
    if file is not None:
        try:
            raw_report = file.read_text().strip()
        except OSError as e:
            console.print(f"[bold red]Error:[/bold red] Cannot read {file}: {e}")
            raise typer.Exit(1)
    if not raw_report:
        console.print("[bold red]Error:[/bold red] Provide a raw report or --file")
        raise typer.Exit(1)

    try:
        report = decode_report(raw_report, _resolve_mode(mode))
    except DecodeError as e:
        console.print(f"[bold red]Decode error:[/bold red] {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        render_report(console, "Decoded", report)


@app.command()
def sign(
    path: str = typer.Argument(..., help="Request path, e.g. /api/v1/reports/latest?feedID=0x..."),
    method: str = typer.Option("GET", "--method", help="HTTP method"),
) -> None:
    """Print signed authentication headers for a request path."""
    try:
        api_key, api_secret = settings.credentials()
        signed = sign_request(method.upper(), path, api_key, api_secret)
    except (ConfigurationError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    headers = signed.headers()
    headers["Authorization"] = mask_secret(headers["Authorization"])

    typer.echo(f"{signed.method} {signed.path}")
    for name, value in headers.items():
        typer.echo(f"{name}: {value}")


@app.command()
def feeds(
    feeds_path: str | None = typer.Option(None, "--feeds", help="Path to feeds YAML file"),
) -> None:
    """List the configured feed catalog."""
    try:
        catalog = load_feed_catalog(feeds_path or settings.streams_feeds_path)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title="Feeds")
    table.add_column("Symbol", style="cyan")
    table.add_column("Feed ID", style="white")
    table.add_column("Expected Range", style="green")
    for feed in catalog:
        if feed.expected_min is None and feed.expected_max is None:
            expected = "-"
        else:
            low = "*" if feed.expected_min is None else feed.expected_min
            high = "*" if feed.expected_max is None else feed.expected_max
            expected = f"{low} - {high}"
        table.add_row(feed.symbol, feed.feed_id, expected)
    console.print(table)


if __name__ == "__main__":
    app()
