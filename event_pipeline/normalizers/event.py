"""Build a CanonicalEvent from a strategy's raw field bag."""

from datetime import datetime
from typing import Any, Optional
from urllib.parse import urljoin

from rich.console import Console

from event_pipeline.config import PipelineSettings
from event_pipeline.models import CanonicalEvent, EventCategory, RawFieldBag
from event_pipeline.normalizers.dates import find_date_in_text, parse_date_or_none, parse_event_date
from event_pipeline.normalizers.platform import platform_label
from event_pipeline.normalizers.text import extract_tech_tags, sanitize_string

console = Console()

TITLE_PLACEHOLDER = "Untitled Event"
LOCATION_PLACEHOLDER = "TBD"
# Values strategies use to mark a field they could not resolve
SENTINELS = {"unknown", "tbd", "n/a", "no description available"}


def _is_sentinel(value: str) -> bool:
    return value.strip().lower() in SENTINELS


def _clean_optional(value: Any, max_len: int = 1000) -> Optional[str]:
    text = sanitize_string(value, max_len)
    if not text or _is_sentinel(text):
        return None
    return text


def _parse_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    digits = "".join(ch for ch in str(value) if ch.isdigit())
    return int(digits) if digits else None


def _absolute_image(value: Any, url: str) -> Optional[str]:
    image = sanitize_string(value, 2000)
    if not image or image.startswith("data:"):
        return None
    return urljoin(url, image)


def _dedupe(values: Any) -> list[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    seen: list[str] = []
    for value in values:
        text = sanitize_string(value, 100)
        if text and text.lower() not in [s.lower() for s in seen]:
            seen.append(text)
    return seen


def resolve_event_date(
    bag: RawFieldBag,
    description: str,
    settings: PipelineSettings,
    now: Optional[datetime] = None,
) -> tuple[datetime, bool]:
    """Parse the start date, falling back to a date mentioned in the description."""
    tz = settings.tzinfo()
    parsed = parse_event_date(bag.get("start_date"), now=now, tz=tz)
    if not parsed.estimated:
        return parsed.value, False

    mentioned = find_date_in_text(description)
    if mentioned:
        value = parse_date_or_none(mentioned, tz=tz, now=now)
        if value:
            console.print(f"[dim]Using date found in description: {mentioned}[/dim]")
            return value, False

    console.print("[yellow]No parseable event date, falling back to current time[/yellow]")
    return parsed.value, True


def normalize_event(
    bag: RawFieldBag,
    url: str,
    category: EventCategory = EventCategory.TECH_TALK,
    settings: Optional[PipelineSettings] = None,
    now: Optional[datetime] = None,
) -> CanonicalEvent:
    """Map a raw field bag onto the canonical record.

    Applies the placeholder title/location, tags from title + description,
    the platform label from url and the date fallback chain.
    """
    settings = settings or PipelineSettings()

    title = sanitize_string(bag.get("title"))
    if not title or _is_sentinel(title):
        title = TITLE_PLACEHOLDER

    description = sanitize_string(bag.get("description"), settings.description_max_length)
    if _is_sentinel(description):
        description = ""

    location = sanitize_string(bag.get("location"), 500) or LOCATION_PLACEHOLDER

    event_date, estimated = resolve_event_date(bag, description, settings, now=now)
    end_date = parse_date_or_none(bag.get("end_date"), tz=settings.tzinfo(), now=now)
    if end_date and end_date < event_date:
        end_date = None

    source_urls = [url]
    canonical_url = sanitize_string(bag.get("canonical_url"), 2000)
    if canonical_url and canonical_url != url:
        source_urls.append(canonical_url)

    return CanonicalEvent(
        title=title,
        description=description,
        event_date=event_date,
        event_date_estimated=estimated,
        location=location,
        organizer=_clean_optional(bag.get("organizer"), 255),
        image_url=_absolute_image(bag.get("image_url"), url),
        category=EventCategory.coerce(bag.get("category"), category),
        tags=extract_tech_tags(f"{title} {description}"),
        platform_label=platform_label(url),
        source_urls=source_urls,
        end_date=end_date,
        full_address=_clean_optional(bag.get("full_address"), 500),
        price=_clean_optional(bag.get("price"), 100),
        prize=_clean_optional(bag.get("prize"), 255),
        attendee_count=_parse_int(bag.get("attendee_count")),
        registration_type=_clean_optional(bag.get("registration_type"), 100),
        agenda=_clean_optional(bag.get("agenda"), 2000),
        topics=_dedupe(bag.get("topics")),
    )
