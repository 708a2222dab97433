"""IBM event and seminar pages."""

import re
from datetime import timedelta

from bs4 import BeautifulSoup

from event_pipeline.extractors.dom import (
    element_text,
    find_label,
    first_text,
    joined_text,
    largest_image,
    merge_fields,
    regex_first,
)
from event_pipeline.extractors.evidence import PageEvidence
from event_pipeline.extractors.structured import event_fields_from_structured, fields_from_meta
from event_pipeline.models import EventCategory, RawFieldBag
from event_pipeline.normalizers.dates import combine_date_and_time, parse_date_or_none, split_time_range
from event_pipeline.strategies.base import EventStrategy

TITLE_SELECTORS = ["h1", ".event-title", ".seminar-title", ".headline", ".header-title"]
DESCRIPTION_SELECTORS = [
    ".event-description", ".description", ".overview", "#overview",
    "section p", "article p", ".content p", "h2 + p",
]
BODY_DATES = [
    re.compile(r"([A-Z][a-z]+\s+\d{1,2},\s+\d{4})"),
    re.compile(r"(\d{1,2}\s+[A-Z][a-z]+\s+\d{4})"),
]
VENUE_LABELS = ["Venue details", "Location", "Address", "Where"]
SPONSOR_LABELS = ["Sponsored by", "Presented by", "Organized by"]
AGENDA_LABELS = ["Agenda", "Schedule", "Program"]
SLOT_TIME = re.compile(r"\d{1,2}:\d{2}\s*(?:AM|PM)", re.I)


def description_text(soup: BeautifulSoup) -> str:
    fallback = ""
    for selector in DESCRIPTION_SELECTORS:
        if selector.endswith("p"):
            text = joined_text(soup, [selector], min_length=21)
        else:
            text = first_text(soup, [selector])
        if len(text) > 100:
            return text
        fallback = fallback or text

    label = find_label(soup, "Description")
    if label is not None and label.parent is not None:
        paragraphs = [element_text(p) for p in label.parent.find_all("p")]
        text = "\n\n".join(p for p in paragraphs if len(p) > 30)
        if text:
            return text
    return fallback


def venue_fields(soup: BeautifulSoup) -> RawFieldBag:
    for label_text in VENUE_LABELS:
        label = find_label(soup, label_text, exact=False)
        container = label.find_parent(["div", "section"]) if label is not None else None
        if container is None:
            continue

        paragraphs = [element_text(p) for p in container.find_all("p")]
        lines = [p for p in paragraphs if p and label_text not in p]
        if not lines:
            remainder = element_text(container).replace(label_text, "", 1)
            lines = [part.strip() for part in remainder.split(",") if part.strip()]
        if lines:
            return {"location": lines[0], "full_address": ", ".join(lines)}
    return {}


def sponsor_text(page: PageEvidence) -> str:
    for label in SPONSOR_LABELS:
        value = regex_first(page.text, [rf"{label}\s+([^,\n.]+)"])
        if value:
            return value
    return ""


def agenda_text(soup: BeautifulSoup) -> str:
    for label_text in AGENDA_LABELS:
        label = find_label(soup, label_text)
        container = label.find_parent(["div", "section"]) if label is not None else None
        if container is None:
            continue
        slots = [
            element_text(el) for el in container.find_all(True)
            if not el.find(True) and SLOT_TIME.search(element_text(el))
        ]
        if slots:
            return "\n".join(slots)
        remainder = element_text(container).replace(label_text, "", 1).strip()
        if remainder:
            return remainder
    return ""


class IBMStrategy(EventStrategy):
    name = "ibm"
    platform = "IBM"
    category = EventCategory.TECH_TALK
    default_organizer = "IBM"
    wait_selectors = ("h1", ".event-title", ".seminar-title")
    scroll_offsets = (500, 1000)
    settle_ms = 3000

    def event_window(self, page: PageEvidence) -> tuple[str, str]:
        """Body date merged with a "10:00 AM – 1:00 PM" time range.

        An end time earlier than the start rolls over to the next day.
        """
        date = regex_first(page.text, BODY_DATES)
        if not date:
            return "", ""
        start_time, end_time = split_time_range(page.text)
        start = combine_date_and_time(date, start_time)
        if not end_time:
            return start, ""

        tz = self.settings.tzinfo()
        start_dt = parse_date_or_none(start, tz=tz)
        end_dt = parse_date_or_none(combine_date_and_time(date, end_time), tz=tz)
        if start_dt is None or end_dt is None:
            return start, ""
        if end_dt < start_dt:
            end_dt += timedelta(days=1)
        return start, end_dt.isoformat()

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        soup = page.soup

        title = first_text(soup, TITLE_SELECTORS)
        if not title:
            title = page.meta.get("title", "").replace(" - IBM", "").strip()

        start, end = self.event_window(page)

        venue = venue_fields(soup)
        lowered = page.text.lower()
        if "online event" in lowered or "virtual event" in lowered:
            venue = {"location": "Online", "full_address": "Virtual Event"}

        free = "free event" in lowered or "free to attend" in lowered

        dom: RawFieldBag = {
            "title": title,
            "description": description_text(soup),
            "start_date": start,
            "end_date": end,
            "organizer": sponsor_text(page),
            "agenda": agenda_text(soup),
            "image_url": largest_image(soup, page.url, min_width=300, min_height=101, exclude=("logo",)),
            "registration_type": "Registration Required",
            "price": "Free" if free else "",
        }
        dom.update(venue)

        merged = merge_fields(
            dom,
            event_fields_from_structured(page.structured),
            fields_from_meta(page.meta),
        )
        # Only when no channel resolved a price
        if not merged.get("price"):
            merged["price"] = "Paid"
        return merged
