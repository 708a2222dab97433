"""Devpost hackathon pages.

Devpost shows a submission deadline rather than a start date, so the
deadline is reported as the event date.
"""

import re

from bs4 import BeautifulSoup

from event_pipeline.extractors.dom import (
    element_text,
    find_label,
    first_text,
    joined_text,
    largest_image,
    merge_fields,
    regex_first,
    section_after_heading,
    value_after_label,
)
from event_pipeline.extractors.evidence import PageEvidence
from event_pipeline.extractors.structured import event_fields_from_structured, fields_from_meta
from event_pipeline.models import EventCategory, RawFieldBag
from event_pipeline.strategies.base import EventStrategy

TITLE_SELECTORS = ["h1", ".hackathon-title", ".challenge-title"]
OVERVIEW_SELECTORS = [
    ".challenge-description",
    ".hackathon-description",
    ".overview",
    "#overview",
    "section p",
    "main p",
    "article p",
    ".content p",
]
SECTION_HEADERS = ["Welcome to", "Requirements", "What to Build"]

SHORT_DATE = r"[A-Z][a-z]{2}\s+\d{1,2},?\s+\d{4}"
DEADLINE_PATTERNS = [
    re.compile(r"([A-Z][a-z]{2}\s+\d{1,2},\s+\d{4}\s+@\s+[\d:]+\s*(?:am|pm)\s+GMT[+-]\d+(?::\d+)?)", re.I),
    re.compile(r"([A-Z][a-z]+\s+\d{1,2},\s+\d{4})"),
    re.compile(r"(\d{1,2}\s+[A-Z][a-z]+\s+\d{4})"),
]
PRIZE_PATTERNS = [
    re.compile(r"\$([\d,]+)\s+in\s+(?:cash|prizes)", re.I),
    re.compile(r"\$([\d,]+)\s+cash", re.I),
    re.compile(r"([\d,]+)\s+in\s+cash", re.I),
]
PARTICIPANT_PATTERNS = [
    re.compile(r"(\d[\d,]*)\s+participants", re.I),
    re.compile(r"participants\s+\((\d+)\)", re.I),
]
VIRTUAL_HINTS = ("Virtual", "virtual event", "remotely")
THEME_TAGS = [
    "AI", "Machine Learning", "Open Ended", "Beginner Friendly",
    "Web", "Mobile", "Game", "Data", "API", "IoT", "AR/VR",
    "Blockchain", "Social Good", "Education", "Health",
]


def overview_description(soup: BeautifulSoup) -> str:
    """Overview text, preferring one longer than 100 characters."""
    fallback = ""
    for selector in OVERVIEW_SELECTORS:
        if selector.endswith(" p"):
            text = joined_text(soup, [selector], min_length=21)
        else:
            text = first_text(soup, [selector])
        if len(text) > 100:
            return text
        fallback = fallback or text

    for header in SECTION_HEADERS:
        text = section_after_heading(soup, header, exact=False, separator="\n\n")
        if len(text) > 100:
            return text
    return fallback


def deadline_text(page: PageEvidence) -> str:
    deadline = value_after_label(find_label(page.soup, "Deadline", exact=False))
    if regex_first(deadline, [r"(\d{4})"]):
        return deadline

    schedule = find_label(page.soup, "View schedule", exact=False)
    if schedule is not None:
        container = schedule.find_parent(["div", "section"])
        if container is not None:
            for element in container.find_all(True):
                text = element_text(element)
                if re.search(SHORT_DATE, text) or re.search(r"\d{1,2}\s+[A-Z][a-z]{2},?\s+\d{4}", text):
                    return text

    return regex_first(page.text, DEADLINE_PATTERNS)


def venue_fields(page: PageEvidence) -> RawFieldBag:
    """Online marker, or the text nodes under "Venue details"."""
    if any(line == "Online" or line.startswith("Online ") for line in page.lines if len(line) < 40):
        return {"location": "Online", "full_address": "Virtual Event"}

    venue = find_label(page.soup, "Venue details", exact=False)
    container = venue.find_parent(["div", "section"]) if venue is not None else None
    if container is not None:
        leaves = [
            element_text(el) for el in container.find_all(True)
            if el is not venue and not el.find(True) and element_text(el)
        ]
        if leaves:
            return {"location": leaves[0], "full_address": ", ".join(leaves)}

    if any(hint in page.text for hint in VIRTUAL_HINTS):
        return {"location": "Online", "full_address": "Virtual Event"}
    return {}


def prize_text(page: PageEvidence) -> str:
    amount = regex_first(page.text, PRIZE_PATTERNS)
    if not amount:
        prizes = find_label(page.soup, "Prizes", exact=False)
        container = prizes.find_parent(["div", "section"]) if prizes is not None else None
        amount = regex_first(element_text(container), [r"\$([\d,]+)"]) if container is not None else ""
    return f"${amount.replace(',', '')}" if amount else ""


def organizer_text(page: PageEvidence) -> str:
    managed = find_label(page.soup, "Managed by", exact=False)
    if managed is not None:
        container = managed.find_parent(["div", "section", "p"]) or managed
        text = element_text(container).replace("Managed by", "", 1).strip(" :")
        if text:
            return text
    return regex_first(page.text, [r"sponsored\s+by\s+([^,.]+)"])


class DevpostStrategy(EventStrategy):
    name = "devpost"
    platform = "Devpost"
    category = EventCategory.HACKATHON
    default_location = "Online"
    default_organizer = "Devpost"
    wait_selectors = ("h1", ".hackathon-title", ".challenge-title")
    scroll_offsets = (500, 1000, 1500)
    settle_ms = 3000

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        soup = page.soup

        title = first_text(soup, TITLE_SELECTORS)
        if not title:
            title = page.meta.get("title", "").replace(" - Devpost", "").strip()

        dom: RawFieldBag = {
            "title": title,
            "description": overview_description(soup),
            "start_date": deadline_text(page),
            "organizer": organizer_text(page),
            "image_url": largest_image(soup, page.url, min_width=200, min_height=101, exclude=("logo",)),
            "prize": prize_text(page),
            "attendee_count": regex_first(page.text, PARTICIPANT_PATTERNS),
            "topics": [tag.lower() for tag in THEME_TAGS if tag in page.text],
        }
        dom.update(venue_fields(page))

        return merge_fields(
            dom,
            event_fields_from_structured(page.structured),
            fields_from_meta(page.meta),
        )
