"""Main extraction pipeline orchestrator.

For one URL:
1. Pick the platform strategy from the hostname
2. Drive a browser session to render the page and collect raw fields
3. Normalize the raw fields into a CanonicalEvent

Returns the canonical record; persistence and notification are left to
the caller.
"""

import asyncio
import uuid
from typing import Literal, Optional

from pydantic import BaseModel, Field
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from event_pipeline.browser.session import SessionManager
from event_pipeline.config import PipelineSettings
from event_pipeline.errors import EventPipelineError, ExtractionError
from event_pipeline.models import CanonicalEvent
from event_pipeline.normalizers.event import normalize_event
from event_pipeline.strategies import select_strategy

console = Console()


class ExtractionOutcome(BaseModel):
    """Result of one URL in a batch, in the shape a request store keeps."""

    url: str
    status: Literal["pending", "error"]
    event: Optional[CanonicalEvent] = None
    error: Optional[str] = None
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))

    class Config:
        frozen = True


class EventExtractionPipeline:
    """URL in, CanonicalEvent out.

    The pipeline owns its SessionManager unless one is passed in, in which
    case the caller is responsible for shutting it down.
    """

    def __init__(
        self,
        manager: Optional[SessionManager] = None,
        settings: Optional[PipelineSettings] = None,
    ):
        self.settings = settings or (manager.settings if manager else PipelineSettings.from_env())
        self._owns_manager = manager is None
        self.manager = manager or SessionManager(self.settings)

    async def extract_event(self, url: str) -> CanonicalEvent:
        """Extract and normalize the event at url.

        Raises:
            NavigationError: the page could not be loaded
            ExtractionError: anything else failed, naming the platform
        """
        strategy = select_strategy(url, self.manager, self.settings)
        console.print(f"[cyan]Extracting {url}[/cyan] [dim]({strategy.platform})[/dim]")

        try:
            bag = await strategy.extract(url)
        except EventPipelineError:
            raise
        except Exception as e:
            raise ExtractionError(url, str(e), platform=strategy.platform) from e

        event = normalize_event(bag, url, category=strategy.category, settings=self.settings)
        estimated = " [yellow](date estimated)[/yellow]" if event.event_date_estimated else ""
        console.print(f"[green]Extracted:[/green] {event.title[:60]}{estimated}")
        return event

    async def close(self) -> None:
        if self._owns_manager:
            await self.manager.shutdown()

    async def __aenter__(self) -> "EventExtractionPipeline":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


async def extract_event(url: str, manager: Optional[SessionManager] = None) -> CanonicalEvent:
    """One-shot extraction. A temporary manager is shut down afterwards."""
    async with EventExtractionPipeline(manager=manager) as pipeline:
        return await pipeline.extract_event(url)


async def extract_events_batch(
    urls: list[str],
    max_concurrent: int = 3,
    manager: Optional[SessionManager] = None,
) -> list[ExtractionOutcome]:
    """Extract many URLs with bounded concurrency.

    Args:
        urls: Event page URLs
        max_concurrent: Maximum extractions in flight
        manager: Shared SessionManager; a temporary one is used if omitted

    Returns:
        One outcome per URL, in input order. Failures become "error"
        outcomes instead of raising.
    """
    semaphore = asyncio.Semaphore(max_concurrent)

    async with EventExtractionPipeline(manager=manager) as pipeline:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
        ) as progress:
            task = progress.add_task("Extracting events...", total=len(urls))

            async def process_url(url: str) -> ExtractionOutcome:
                async with semaphore:
                    try:
                        event = await pipeline.extract_event(url)
                        return ExtractionOutcome(url=url, status="pending", event=event)
                    except Exception as e:
                        console.print(f"[red]Error extracting {url}: {e}[/red]")
                        return ExtractionOutcome(url=url, status="error", error=str(e))
                    finally:
                        progress.advance(task)

            outcomes = await asyncio.gather(*(process_url(url) for url in urls))

    succeeded = sum(1 for o in outcomes if o.status == "pending")
    console.print(f"\n[green]Successfully extracted {succeeded}/{len(urls)} events[/green]")
    return list(outcomes)
