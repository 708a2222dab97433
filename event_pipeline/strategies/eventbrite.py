"""Eventbrite event pages.

Eventbrite ships a complete Schema.org Event, so JSON-LD wins and the DOM
only fills what it left out.
"""

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
from event_pipeline.models import EventCategory, RawFieldBag
from event_pipeline.strategies.base import EventStrategy

TITLE_SELECTORS = ['[data-testid="event-title"]', "h1.event-title", "h1"]
DESCRIPTION_SELECTORS = [
    '[data-testid="event-description"]', ".event-description",
    ".structured-content-rich-text", ".eds-text--left",
]
DATE_SELECTORS = ['[data-testid="date-info"]', ".date-info", ".event-details__data time"]
LOCATION_SELECTORS = ['[data-testid="location-info"]', ".location-info", ".event-details__data address"]
ORGANIZER_SELECTORS = [
    '[data-testid="organizer-name"]', ".organizer-name", ".descriptive-organizer-info__name",
]
PRICE_SELECTORS = ['[data-testid="price"]', ".conversion-bar__panel-info", ".ticket-price"]
IMAGE_SELECTORS = ['[data-testid="hero-img"]', ".event-hero img", "picture img"]


class EventbriteStrategy(EventStrategy):
    name = "eventbrite"
    platform = "Eventbrite"
    category = EventCategory.CONFERENCE
    wait_selectors = ('[data-testid="event-title"]', "h1")

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        soup = page.soup

        location = first_text(soup, LOCATION_SELECTORS)
        if is_online_text(location):
            location = "Online"

        dom: RawFieldBag = {
            "title": first_text(soup, TITLE_SELECTORS),
            "description": first_text(soup, DESCRIPTION_SELECTORS),
            "start_date": first_attr(soup, ["time[datetime]"], "datetime") or first_text(soup, DATE_SELECTORS),
            "location": location,
            "organizer": first_text(soup, ORGANIZER_SELECTORS).removeprefix("By ").strip(),
            "image_url": first_image(soup, IMAGE_SELECTORS, page.url),
            "price": first_text(soup, PRICE_SELECTORS),
            "attendee_count": regex_first(page.text, [r"(\d[\d,]*)\s+(?:going|attending)"]),
        }

        return merge_fields(
            event_fields_from_structured(page.structured),
            dom,
            fields_from_meta(page.meta),
        )
