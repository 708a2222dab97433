"""CLI for the event extraction pipeline."""

import asyncio
import json
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from event_pipeline.errors import EventPipelineError
from event_pipeline.pipeline import extract_event, extract_events_batch
from event_pipeline.strategies import STRATEGY_TABLE, GenericStrategy

# Load environment variables (override=True to beat shell env vars)
load_dotenv(override=True)

app = typer.Typer(
    name="event-pipeline",
    help="Extract normalized event records from event pages",
    add_completion=False,
)
console = Console()


def read_urls(path: Path) -> list[str]:
    """One URL per line; blank lines and # comments are skipped."""
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip() and not line.strip().startswith("#")]


@app.command()
def extract(
    url: str = typer.Argument(..., help="Event page URL"),
    as_json: bool = typer.Option(False, "--json", help="Print the record as JSON"),
):
    """Extract a single event page."""
    try:
        event = asyncio.run(extract_event(url))
    except EventPipelineError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if as_json:
        print(json.dumps(event.to_record(), indent=2, ensure_ascii=False))
        return

    console.print(f"\n[bold green]Extracted:[/bold green]")
    console.print(f"  Title: {event.title}")
    console.print(f"  Date: {event.event_date.isoformat()}{' (estimated)' if event.event_date_estimated else ''}")
    console.print(f"  Location: {event.location}")
    console.print(f"  Organizer: {event.organizer or 'N/A'}")
    console.print(f"  Category: {event.category.value}")
    console.print(f"  Platform: {event.platform_label}")
    console.print(f"  Tags: {', '.join(event.tags) or '-'}")
    console.print(f"  Description: {event.description[:100] if event.description else 'N/A'}...")


@app.command()
def batch(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File with one URL per line"),
    workers: int = typer.Option(3, "--workers", "-w", help="Concurrent extractions"),
):
    """Extract every URL listed in a file."""
    urls = read_urls(file)
    if not urls:
        console.print("[yellow]No URLs to extract[/yellow]")
        raise typer.Exit(0)

    outcomes = asyncio.run(extract_events_batch(urls, max_concurrent=workers))

    table = Table(title=f"Extraction results ({len(outcomes)})")
    table.add_column("URL", style="cyan", max_width=40)
    table.add_column("Status")
    table.add_column("Title", max_width=40)
    table.add_column("Date", style="red")
    table.add_column("Location", style="green", max_width=20)

    for outcome in outcomes:
        if outcome.event:
            event = outcome.event
            date = event.event_date.date().isoformat() + ("*" if event.event_date_estimated else "")
            table.add_row(outcome.url, "[green]ok[/green]", event.title[:40], date, event.location[:20])
        else:
            table.add_row(outcome.url, "[red]error[/red]", (outcome.error or "")[:40], "-", "-")

    console.print(table)

    if any(o.status == "error" for o in outcomes):
        raise typer.Exit(1)


@app.command()
def platforms():
    """List supported platforms and the strategy used for each."""
    table = Table(title="Supported platforms")
    table.add_column("Host match", style="cyan")
    table.add_column("Strategy")
    table.add_column("Category", style="blue")

    for needle, strategy_class in STRATEGY_TABLE:
        table.add_row(needle, strategy_class.platform, strategy_class.category.value)
    table.add_row("(anything else)", GenericStrategy.platform, GenericStrategy.category.value)

    console.print(table)


if __name__ == "__main__":
    app()
