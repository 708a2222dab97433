"""Meetup event pages."""

import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from event_pipeline.extractors.dom import (
    element_text,
    find_label,
    first_attr,
    first_image,
    first_text,
    is_online_text,
    joined_text,
    labelled_line,
    landmark_lines,
    largest_image,
    map_link_location,
    merge_fields,
    regex_first,
)
from event_pipeline.extractors.evidence import PageEvidence
from event_pipeline.extractors.structured import event_fields_from_structured, fields_from_meta
from event_pipeline.models import EventCategory, RawFieldBag
from event_pipeline.normalizers.dates import MONTH_PATTERN, WEEKDAY_PATTERN
from event_pipeline.strategies.base import EventStrategy

TITLE_SELECTORS = [
    '[data-testid="event-title"]',
    "h1.text-display2",
    ".pageHeading",
    "h1",
    ".event-title",
    '[data-swarm-text="display2"]',
    '[data-swarm-text="display3"]',
]
DESCRIPTION_SELECTORS = [
    ".event-description",
    '[data-testid="event-description"]',
    '[class*="eventDescription"]',
    '[id*="event-description"]',
    ".description",
    ".event-info-section p",
    '[data-testid="event-details"]',
    '[data-testid="event-info-details"]',
    '[class*="DescriptionArea"]',
    '[data-swarm-text="body"]',
    '[data-swarm-text="body1"]',
    '[data-swarm-text="body2"]',
]
MAIN_CONTENT_SELECTORS = [
    "main", '[role="main"]', ".event-home-wrapper", ".eventHome",
    ".event-description-container", "article",
]
TIME_SELECTORS = [
    "time",
    "[datetime]",
    ".eventTimeDisplay time",
    '[data-testid="event-when-display"]',
    '[class*="eventDateTime"]',
    '[data-testid="event-when"]',
]
LOCATION_SELECTORS = [
    '[data-testid="event-where-display"]',
    '[class*="venueDisplay"]',
    '[class*="eventAddress"]',
    '[data-testid="event-where"]',
    '[data-testid="venue-name"]',
]
ADDRESS_SELECTORS = [
    '[data-testid="venue-address"]',
    "address",
    'div[itemprop="address"]',
    'div[itemprop="location"]',
]
ORGANIZER_SELECTORS = [
    '[data-testid="host-name"]',
    ".organizerName",
    '[class*="groupName"]',
    '[data-testid="group-name"]',
    'a[href*="/groups/"]',
]
IMAGE_SELECTORS = [
    ".event-featured-image img",
    '[data-testid="event-cover-photo"] img',
    ".eventCoverPhoto img",
    '[class*="coverPhoto"] img',
    'img[alt*="event"]',
    'img[alt*="meetup"]',
    'img[loading="eager"]',
    ".banner-image img",
    ".event-image img",
]
PRICE_SELECTORS = [
    ".ticketBox-price",
    '[data-testid="ticket-price"]',
    ".price",
    '[data-testid="price"]',
    ".attendance-price",
    ".event-price",
]
ATTENDEE_SELECTORS = [
    ".attendeeCount",
    '[data-testid="attendee-count"]',
    ".attendee-count",
    ".going",
    ".rsvp-count",
]

FREE_PHRASES = ("free event", "free entry", "free admission", "free to attend")
DESCRIPTION_HINTS = ("Agenda", "IMPORTANT:", "What to expect:", "Join us")
WAITLIST_PATTERNS = [
    r"(\d+)\s*on\s*waitlist",
    r"waitlist\D{0,40}?(\d+)",
]
ATTENDEES_HEADER = r"Attendees\s*\((\d+)\)"
AGENDA_PATTERN = re.compile(r"Agenda:?\s*(.+?)(?:-{5,}|\n\n|$)", re.I | re.S)
WEEKDAY_MONTH = re.compile(rf"\b{WEEKDAY_PATTERN}\b.*\b{MONTH_PATTERN}\b", re.I)
LOCATION_LABELS = ("Location", "Where", "Venue")


def main_content_description(soup: BeautifulSoup) -> str:
    """Paragraphs (or short text blocks) of the page's main area."""
    for selector in MAIN_CONTENT_SELECTORS:
        main = soup.select_one(selector)
        if main is None:
            continue
        paragraphs = [element_text(p) for p in main.find_all("p")]
        paragraphs = [p for p in paragraphs if len(p) > 20]
        if paragraphs:
            return "\n\n".join(paragraphs)

        blocks = [
            element_text(div) for div in main.find_all("div")
            if len(div.find_all(True, recursive=False)) < 5 and len(element_text(div)) > 50
        ]
        if blocks:
            return "\n\n".join(dict.fromkeys(blocks))
    return ""


def hinted_description(soup: BeautifulSoup) -> str:
    """Innermost long blocks mentioning an agenda or a call to join."""
    found = []
    for div in soup.find_all("div"):
        text = element_text(div)
        if len(text) <= 100:
            continue
        has_hint = any(h in text for h in DESCRIPTION_HINTS) or ("AM" in text and "PM" in text)
        if not has_hint:
            continue
        # Keep the innermost container only
        if any(len(element_text(child)) > 100 for child in div.find_all("div")):
            continue
        found.append(text)
    return "\n\n".join(found)


def date_text_scan(soup: BeautifulSoup) -> str:
    """First short text block naming both a weekday and a month."""
    for element in soup.find_all(["span", "p", "li", "div"]):
        text = element_text(element)
        if not text or len(text) > 120:
            continue
        if WEEKDAY_MONTH.search(text):
            return text
        lowered = text.lower()
        if any(label in lowered for label in ("date:", "when:", "time:")):
            return re.sub(r"^(?:date|when|time):\s*", "", text, flags=re.I)
    return ""


def group_slug_organizer(url: str) -> str:
    """Group name from the "/<group-slug>/events/" path segment, title-cased."""
    match = re.search(r"/([^/]+)/events/", urlparse(url).path)
    if not match:
        return ""
    return match.group(1).replace("-", " ").title()


def attendee_count(page: PageEvidence) -> str:
    count = regex_first(first_text(page.soup, ATTENDEE_SELECTORS), [r"(\d+)"])
    if count:
        return count

    count = regex_first(page.text, WAITLIST_PATTERNS) or regex_first(page.text, [ATTENDEES_HEADER])
    if count:
        return count

    # Meetup renders the overflow of attendee avatars as "+138"
    for element in page.soup.find_all(["span", "div", "p"]):
        text = element_text(element)
        if re.fullmatch(r"\+\d+", text):
            return text[1:]
    return ""


class MeetupStrategy(EventStrategy):
    """DOM first, then JSON-LD, then metadata."""

    name = "meetup"
    platform = "Meetup"
    category = EventCategory.MEETUP
    wait_selectors = ('[data-testid="event-title"]', "h1.text-display2", "h1")
    scroll_offsets = (300,)

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        soup = page.soup
        title = first_text(soup, TITLE_SELECTORS)

        description = (
            joined_text(soup, DESCRIPTION_SELECTORS)
            or main_content_description(soup)
        )
        if len(description) < 100:
            description = hinted_description(soup) or description

        agenda = ""
        agenda_match = AGENDA_PATTERN.search(description)
        if agenda_match:
            agenda = agenda_match.group(1).strip()

        location = first_text(soup, LOCATION_SELECTORS)
        if not location:
            label = find_label(soup, "Google map", exact=False)
            previous = label.find_previous_sibling() if label is not None else None
            location = element_text(previous) if previous is not None else ""
        if not location:
            location = labelled_line(page.lines, LOCATION_LABELS)
        if not location:
            location = map_link_location(soup)
        if is_online_text(location):
            location = "Online"

        full_address = first_text(soup, ADDRESS_SELECTORS)
        if not full_address or full_address == title:
            lines = landmark_lines(page.lines, exclude=[title])
            full_address = ", ".join(lines[:2])
        if full_address and title and full_address.endswith(title):
            full_address = full_address[: -len(title)].strip(" ,")
        full_address = re.sub(r"\s*·\s*", ", ", full_address)

        price = first_text(soup, PRICE_SELECTORS)
        if not price and any(phrase in page.text.lower() for phrase in FREE_PHRASES):
            price = "Free"
        if price and "free" in price.lower():
            price = "Free"

        rsvp = any("RSVP" in element_text(el) for el in soup.find_all(["button", "a"]))

        dom: RawFieldBag = {
            "title": title,
            "description": description,
            "agenda": agenda,
            "start_date": (
                first_attr(soup, TIME_SELECTORS, "datetime")
                or first_text(soup, TIME_SELECTORS)
                or date_text_scan(soup)
            ),
            "location": location,
            "full_address": full_address,
            "organizer": first_text(soup, ORGANIZER_SELECTORS),
            "image_url": (
                first_image(soup, IMAGE_SELECTORS, page.url)
                or largest_image(soup, page.url, min_width=200, min_height=100)
            ),
            "price": price,
            "attendee_count": attendee_count(page),
            "registration_type": "RSVP Required" if rsvp else "",
        }

        merged = merge_fields(
            dom,
            event_fields_from_structured(page.structured),
            fields_from_meta(page.meta),
        )
        # Group slug only when no channel named an organizer
        if not merged.get("organizer"):
            merged["organizer"] = group_slug_organizer(page.url)
        return merged
