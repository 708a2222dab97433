"""Bevy community pages (bevy.com and the snap.bevy.com variant)."""

import re

from bs4 import BeautifulSoup

from event_pipeline.extractors.dom import (
    first_attr,
    first_image,
    first_text,
    joined_text,
    largest_image,
    merge_fields,
    regex_first,
    text_after_label,
)
from event_pipeline.extractors.evidence import PageEvidence
from event_pipeline.extractors.structured import event_fields_from_structured, fields_from_meta
from event_pipeline.models import EventCategory, RawFieldBag
from event_pipeline.normalizers.dates import combine_date_and_time
from event_pipeline.strategies.base import EventStrategy

TITLE_SELECTORS = ["h1", ".event-title", ".event-name", ".event-heading", ".title", '[data-testid="event-title"]']
DESCRIPTION_SELECTORS = [
    ".event-description", ".description", '[data-testid="event-description"]',
    ".about-event", ".details", ".content",
]
MAIN_CONTENT_SELECTORS = ["main", '[role="main"]', ".event-content", ".content-area"]
DATE_SELECTORS = [
    ".event-date", ".date", ".time", ".event-time", '[data-testid="event-date"]',
    '[data-testid="event-time"]', "time", "[datetime]",
]
LOCATION_SELECTORS = [
    ".event-location", ".location", ".venue", ".event-venue",
    '[data-testid="event-location"]', '[data-testid="event-venue"]', "[data-location]", "[data-venue]",
]
ORGANIZER_SELECTORS = [
    ".event-organizer", ".organizer", ".host", ".event-host", '[data-testid="event-organizer"]',
    '[data-testid="event-host"]', "[data-organizer]", ".community-name", ".group-name",
]
IMAGE_SELECTORS = [
    ".event-image img", ".event-cover img", ".banner img",
    ".cover-photo img", ".event-banner img", ".event-header img",
]

SNAP_LABEL_TAGS = ("h3", "h4", "div", "p", "span")
SNAP_DATE = r"([A-Za-z]+,?\s+[A-Za-z]+\s+\d{1,2},?\s+\d{4})"
SNAP_TIME = r"(\d{1,2}:\d{2}\s*[AP]M)"


def date_attributes(soup: BeautifulSoup) -> tuple[str, str]:
    """Start and end from data-*-date attributes."""
    start = (
        first_attr(soup, ["[data-event-start-date]"], "data-event-start-date")
        or first_attr(soup, ["[data-start-date]"], "data-start-date")
    )
    end = (
        first_attr(soup, ["[data-event-end-date]"], "data-event-end-date")
        or first_attr(soup, ["[data-end-date]"], "data-end-date")
    )
    return start, end


def main_paragraphs(soup: BeautifulSoup) -> str:
    for selector in MAIN_CONTENT_SELECTORS:
        main = soup.select_one(selector)
        if main is None:
            continue
        paragraphs = [p.get_text(" ", strip=True) for p in main.find_all("p")]
        paragraphs = [p for p in paragraphs if len(p) > 20]
        if paragraphs:
            return "\n\n".join(paragraphs)
    return ""


def snap_fields(soup: BeautifulSoup) -> RawFieldBag:
    """When / Where / Host blocks of the snap.bevy.com layout."""
    fields: RawFieldBag = {}

    when = text_after_label(soup, ["When"], tags=SNAP_LABEL_TAGS)
    date = regex_first(when, [SNAP_DATE])
    if date:
        start_time = regex_first(when, [SNAP_TIME])
        fields["start_date"] = combine_date_and_time(date, start_time)
        end_time = regex_first(when, [rf"[–-]\s*{SNAP_TIME}"])
        if end_time:
            fields["end_date"] = combine_date_and_time(date, end_time)

    where = text_after_label(soup, ["Where"], tags=SNAP_LABEL_TAGS)
    if where:
        fields["location"] = where

    host = text_after_label(soup, ["Host"], tags=SNAP_LABEL_TAGS)
    if host:
        fields["organizer"] = re.split(r"\s{2,}|\n", host)[0].strip()

    return fields


class BevyStrategy(EventStrategy):
    """Snap labels over DOM selectors over JSON-LD."""

    name = "bevy"
    platform = "Bevy"
    category = EventCategory.MEETUP
    wait_selectors = ("h1", ".event-title", ".event-name")
    scroll_offsets = (500, 500)
    settle_ms = 3000

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        soup = page.soup

        start, end = date_attributes(soup)
        if not start:
            start = first_attr(soup, DATE_SELECTORS, "datetime") or first_text(soup, DATE_SELECTORS)

        dom: RawFieldBag = {
            "title": first_text(soup, TITLE_SELECTORS),
            "description": joined_text(soup, DESCRIPTION_SELECTORS) or main_paragraphs(soup),
            "start_date": start,
            "end_date": end,
            "location": first_text(soup, LOCATION_SELECTORS),
            "organizer": first_text(soup, ORGANIZER_SELECTORS),
            "image_url": (
                first_image(soup, IMAGE_SELECTORS, page.url)
                or largest_image(soup, page.url, min_width=200, exclude=())
            ),
        }

        return merge_fields(
            snap_fields(soup),
            dom,
            event_fields_from_structured(page.structured),
            fields_from_meta(page.meta),
        )
