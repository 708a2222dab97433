"""Fallback strategy for sites without a dedicated recipe."""

from event_pipeline.extractors.dom import (
    first_attr,
    first_image,
    first_text,
    is_online_text,
    merge_fields,
    regex_first,
)
from event_pipeline.extractors.evidence import PageEvidence
from event_pipeline.extractors.structured import event_fields_from_structured, fields_from_meta
from event_pipeline.models import RawFieldBag
from event_pipeline.strategies.base import EventStrategy

TITLE_SELECTORS = [
    "h1", ".title", ".event-title", ".event-name", '[itemprop="name"]',
    ".heading", ".header-title",
]
DESCRIPTION_SELECTORS = [
    ".description", ".event-description", '[itemprop="description"]',
    ".about", ".details", ".event-details", ".content",
]
DATE_SELECTORS = [
    "time", '[itemprop="startDate"]', ".date", ".event-date",
    ".datetime", ".event-time", ".schedule",
]
END_DATE_SELECTORS = ['[itemprop="endDate"]', ".end-date"]
LOCATION_SELECTORS = [
    '[itemprop="location"]', ".location", ".venue", ".place",
    ".event-location", ".address",
]
ORGANIZER_SELECTORS = [
    '[itemprop="organizer"]', ".organizer", ".host",
    ".event-organizer", ".publisher", ".author",
]
IMAGE_SELECTORS = [
    '[itemprop="image"]', ".event-image", ".cover-image",
    ".banner", ".featured-image", ".hero-image",
]
PRICE_SELECTORS = ['[itemprop="price"]', ".price", ".ticket-price", ".event-price", ".cost", ".fee"]
ATTENDEE_SELECTORS = [".attendees", ".rsvp-count", ".participants", ".going", ".registered"]


def date_from_selectors(page: PageEvidence, selectors: list[str]) -> str:
    """Machine-readable date attribute first, then the element text."""
    return (
        first_attr(page.soup, selectors, "datetime")
        or first_attr(page.soup, selectors, "content")
        or first_text(page.soup, selectors)
    )


class GenericStrategy(EventStrategy):
    """Broad selectors, then structured data, then metadata."""

    name = "generic"
    platform = "Generic"
    default_location = "TBD"
    wait_selectors = ("h1", '[itemprop="name"]', ".event-title")

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        soup = page.soup

        dom: RawFieldBag = {
            "title": first_text(soup, TITLE_SELECTORS),
            "description": first_text(soup, DESCRIPTION_SELECTORS),
            "start_date": date_from_selectors(page, DATE_SELECTORS),
            "end_date": date_from_selectors(page, END_DATE_SELECTORS),
            "location": first_text(soup, LOCATION_SELECTORS),
            "organizer": first_text(soup, ORGANIZER_SELECTORS),
            "image_url": first_image(soup, IMAGE_SELECTORS, page.url),
            "price": first_text(soup, PRICE_SELECTORS),
            "attendee_count": regex_first(first_text(soup, ATTENDEE_SELECTORS), [r"(\d+)"]),
        }
        if is_online_text(dom["location"]):
            dom["location"] = "Online"

        return merge_fields(
            dom,
            event_fields_from_structured(page.structured),
            fields_from_meta(page.meta),
        )
