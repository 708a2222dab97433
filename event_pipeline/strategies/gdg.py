"""Google Developer Group pages on gdg.community.dev."""

import re

from bs4 import BeautifulSoup

from event_pipeline.extractors.dom import (
    element_text,
    find_label,
    first_image,
    first_text,
    list_items_after_label,
    merge_fields,
    regex_first,
    text_after_label,
    value_after_label,
)
from event_pipeline.extractors.evidence import PageEvidence
from event_pipeline.extractors.structured import event_fields_from_structured, fields_from_meta
from event_pipeline.models import EventCategory, RawFieldBag
from event_pipeline.normalizers.dates import combine_date_and_time
from event_pipeline.strategies.base import EventStrategy

LONG_DATE = r"([A-Za-z]+, [A-Za-z]+ \d{1,2}, \d{4})"
CLOCK_TIME = r"(\d{1,2}:\d{2} [AP]M)"
DATE_TIME_RANGE = re.compile(rf"{LONG_DATE}\s+{CLOCK_TIME}\s+[–-]\s+{CLOCK_TIME}")
PAID_PATTERN = re.compile(r"\$\d+|€\d+|£\d+|\d+\s+USD")
RSVP_COUNT = re.compile(r"(\d+)\s+RSVP['’]d")
REGISTRATION_WORDS = ("RSVP", "Get tickets", "Register")
IMAGE_SELECTORS = ['img[alt*="event"]', 'img[src*="events"]']


def when_section_dates(soup: BeautifulSoup) -> tuple[str, str]:
    """Start and end from the "When" block: a long date plus a time range."""
    when_text = text_after_label(soup, ["When"])
    if not when_text:
        return "", ""

    date = regex_first(when_text, [LONG_DATE])
    if not date:
        return "", ""
    start_time = regex_first(when_text, [CLOCK_TIME])
    if not start_time:
        return date, ""
    end_time = regex_first(when_text, [rf"[–-]\s*{CLOCK_TIME}"])
    end = combine_date_and_time(date, end_time) if end_time else ""
    return combine_date_and_time(date, start_time), end


def chapter_organizer(url: str) -> str:
    """Chapter name from a "gdg-<city>" URL segment."""
    match = re.search(r"gdg-([a-z-]+)", url)
    if match:
        return f"GDG {match.group(1).replace('-', ' ').upper()}"
    return "Google Developer Group"


def key_themes(soup: BeautifulSoup) -> list[str]:
    label = find_label(soup, "Key Themes")
    if label is None:
        return []
    container = label.find_next_sibling() or (label.parent.find_next_sibling() if label.parent else None)
    if container is None:
        return []
    themes = [element_text(el).lower() for el in container.find_all(["span", "li"])]
    return list(dict.fromkeys(t for t in themes if t))


def agenda_text(soup: BeautifulSoup) -> str:
    """Agenda rows rendered as "time: title - speaker"."""
    label = find_label(soup, "Agenda")
    if label is None or label.parent is None:
        return ""

    rows = []
    for item in label.parent.select('div[role="listitem"]'):
        time = item.find("span")
        title = item.find(["h3", "h4"])
        if time is None or title is None:
            continue
        row = f"{element_text(time)}: {element_text(title)}"
        speaker = item.find("p")
        if speaker is not None and element_text(speaker):
            row += f" - {element_text(speaker)}"
        rows.append(row)
    return "\n".join(rows)


class GDGStrategy(EventStrategy):
    """Labelled sections; JSON-LD overrides everything except the title."""

    name = "gdg"
    platform = "GDG"
    category = EventCategory.TECH_TALK
    wait_selectors = ("h1",)

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        soup = page.soup

        start, end = when_section_dates(soup)
        if not start:
            match = DATE_TIME_RANGE.search(page.text)
            if match:
                start = combine_date_and_time(match.group(1), match.group(2))
                end = combine_date_and_time(match.group(1), match.group(3))

        description = first_text(soup, ["h1 + div", "h1 + p"])
        about = value_after_label(find_label(soup, "About this event"))
        description = about or description

        where = text_after_label(soup, ["Where"])

        organizers = [texts[0] for texts in list_items_after_label(soup, "Organizer")]
        organizer = ", ".join(organizers) or chapter_organizer(page.url)

        buttons = [element_text(el) for el in soup.find_all(["button", "a"])]
        registration = (
            "RSVP Required"
            if any(word in text for text in buttons for word in REGISTRATION_WORDS)
            else "Registration Required"
        )

        dom: RawFieldBag = {
            "title": first_text(soup, ["h1"]),
            "description": description,
            "start_date": start,
            "end_date": end,
            "location": where,
            "full_address": where,
            "organizer": organizer,
            "image_url": first_image(soup, IMAGE_SELECTORS, page.url),
            "price": "Paid" if PAID_PATTERN.search(page.text) else "Free",
            "attendee_count": regex_first(page.text, [RSVP_COUNT]),
            "registration_type": registration,
            "topics": key_themes(soup),
            "agenda": agenda_text(soup),
        }

        structured = event_fields_from_structured(page.structured)
        merged = merge_fields(structured, dom, fields_from_meta(page.meta))
        if dom["title"]:
            merged["title"] = dom["title"]
        return merged
