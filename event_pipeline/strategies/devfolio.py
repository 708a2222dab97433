"""Devfolio hackathon pages."""

import re

from event_pipeline.extractors.dom import first_image, first_text, merge_fields, regex_first
from event_pipeline.extractors.evidence import PageEvidence
from event_pipeline.extractors.structured import event_fields_from_structured, fields_from_meta
from event_pipeline.models import EventCategory, RawFieldBag
from event_pipeline.strategies.base import EventStrategy

TITLE_SELECTORS = ["h1", '[data-testid="event-title"]', ".hackathon-title", ".event-title"]
OVERVIEW_SELECTORS = [
    ".event-description", ".hackathon-description", ".overview", "#overview",
    '[data-testid="event-description"]',
]
DATE_SELECTORS = [".event-date", ".hackathon-date", ".date-info", '[data-testid="event-date"]']
IMAGE_SELECTORS = [
    ".event-image img", ".event-banner img", ".hackathon-banner img",
    ".banner img", '[data-testid="event-image"] img',
]
HAPPENING = re.compile(r"Happening\s*\n?\s*([^\n]+)", re.I)


def split_date_range(text: str) -> tuple[str, str]:
    """Split "Oct 4 - 6, 2025" into full start and end dates."""
    parts = re.split(r"\s*[-–]\s*", text.strip(), maxsplit=1)
    start = parts[0].strip()
    end = parts[1].strip() if len(parts) > 1 else ""
    if not end:
        return start, ""

    year = regex_first(end, [r"(\d{4})"]) or regex_first(start, [r"(\d{4})"])
    if year and year not in start:
        start = f"{start}, {year}"

    # "6, 2025" or "6": the end shares the start's month
    bare_day = re.fullmatch(r"(\d{1,2})(?:,?\s*\d{4})?", end)
    month = regex_first(start, [r"([A-Za-z]{3,})"])
    if bare_day and month:
        end = f"{month} {bare_day.group(1)}, {year}" if year else f"{month} {bare_day.group(1)}"
    elif year and year not in end:
        end = f"{end}, {year}"
    return start, end


class DevfolioStrategy(EventStrategy):
    name = "devfolio"
    platform = "Devfolio"
    category = EventCategory.HACKATHON
    default_location = "Online"
    default_organizer = "Devfolio"
    wait_selectors = ("h1", ".hackathon-title")
    scroll_offsets = (500,)
    settle_ms = 3000

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        soup = page.soup

        title = first_text(soup, TITLE_SELECTORS)
        if not title:
            title = page.meta.get("title", "").replace(" - Devfolio", "").strip()

        # Prefer a substantial overview over a one-line teaser
        description = first_text(soup, OVERVIEW_SELECTORS, min_length=100) or first_text(soup, OVERVIEW_SELECTORS)

        start, end = split_date_range(first_text(soup, DATE_SELECTORS))

        dom: RawFieldBag = {
            "title": title,
            "description": description,
            "start_date": start,
            "end_date": end,
            "location": regex_first("\n".join(page.lines), [HAPPENING]),
            "image_url": first_image(soup, IMAGE_SELECTORS, page.url),
        }

        return merge_fields(
            dom,
            event_fields_from_structured(page.structured),
            fields_from_meta(page.meta),
        )
