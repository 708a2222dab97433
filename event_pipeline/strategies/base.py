"""Base class for platform extraction strategies.

A strategy drives a browser session to load the page (`extract`) and maps
the rendered HTML onto raw fields (`parse`). Parsing is pure so every
platform can be tested against saved HTML.
"""

from typing import Optional, Sequence

from rich.console import Console

from event_pipeline.browser.session import Session, SessionManager
from event_pipeline.config import PipelineSettings
from event_pipeline.errors import ExtractionError, NavigationTimeout
from event_pipeline.extractors.evidence import PageEvidence, extract_rendered_html
from event_pipeline.models import EventCategory, RawFieldBag

console = Console()

UNKNOWN = "Unknown"
NO_DESCRIPTION = "No description available"


class EventStrategy:
    """Extraction recipe for one event platform."""

    name = "generic"
    platform = "Generic"
    category = EventCategory.TECH_TALK

    # Page loading
    wait_until = "domcontentloaded"
    wait_selectors: Sequence[str] = ("h1",)
    scroll_offsets: Sequence[int] = (300,)
    settle_ms: Optional[int] = None

    # Sentinels for fields the page did not yield
    default_location = UNKNOWN
    default_organizer: Optional[str] = None

    def __init__(self, manager: SessionManager, settings: Optional[PipelineSettings] = None):
        self.manager = manager
        self.settings = settings or manager.settings

    async def extract(self, url: str) -> RawFieldBag:
        """Load url in a fresh session and parse the rendered page."""
        async with self.manager.session() as session:
            await self.load(session, url)
            html = await extract_rendered_html(session)

        if not html:
            raise ExtractionError(url, "page rendered no content", platform=self.platform)
        return self.parse(html, url)

    async def load(self, session: Session, url: str) -> None:
        """Navigate, wait for rendering and trigger lazy sections.

        A navigation timeout is tolerated when the page already left
        about:blank; the extraction then works on partial content.
        """
        try:
            await session.navigate(url, wait_until=self.wait_until)
        except NavigationTimeout as e:
            if not session.is_usable():
                raise
            console.print(f"[yellow]{e}; continuing with partial content[/yellow]")

        await session.settle(self.settle_ms)
        await session.dismiss_cookie_banner()
        await session.scroll(self.scroll_offsets)

        if self.wait_selectors:
            found = await session.wait_for_any(self.wait_selectors)
            if found is None:
                console.print(f"[dim]No title element on {url}, using fallback selectors[/dim]")

    def parse(self, html: str, url: str) -> RawFieldBag:
        """Raw fields from rendered html, with sentinels for gaps."""
        page = PageEvidence.from_html(html, url)
        return self.finalize(self.extract_fields(page))

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        raise NotImplementedError

    def finalize(self, fields: RawFieldBag) -> RawFieldBag:
        """Fill unresolved fields with this platform's sentinels."""
        bag = {k: v for k, v in fields.items() if v is not None and v != "" and v != []}
        bag.setdefault("title", UNKNOWN)
        bag.setdefault("description", NO_DESCRIPTION)
        bag.setdefault("location", self.default_location)
        if self.default_organizer:
            bag.setdefault("organizer", self.default_organizer)
        bag.setdefault("category", self.category.value)
        return bag
