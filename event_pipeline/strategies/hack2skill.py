"""Hack2Skill hackathon pages."""

import re

from event_pipeline.extractors.dom import (
    HEADING_TAGS,
    element_text,
    find_label,
    first_text,
    merge_fields,
    regex_first,
    text_after_label,
    value_after_label,
)
from event_pipeline.extractors.evidence import PageEvidence
from event_pipeline.extractors.structured import event_fields_from_structured, fields_from_meta
from event_pipeline.models import EventCategory, RawFieldBag
from event_pipeline.strategies.base import EventStrategy

TITLE_SELECTORS = ["h1", ".event-title", ".hackathon-title", ".page-title"]
TIMELINE_DATE = re.compile(r"([A-Za-z]+\s+\d{1,2},?\s+\d{4})")
REGISTRATION_FEE = re.compile(r"registration fee:?\s*([₹$€£]\s*\d+[\d,.]*)", re.I)
PRIZE_AMOUNT = re.compile(r"([₹$€£]\s*\d+[\d,.]*\s*(?:lakhs?|crores?)?)", re.I)
PRIZE_PATTERNS = [
    re.compile(r"total\s*cash\s*prize\s*worth\s*([₹$€£]\s*\d+[\d,.]*\s*(?:lakhs?|crores?)?)", re.I),
    re.compile(r"cash\s*prize\s*worth\s*([₹$€£]\s*\d+[\d,.]*\s*(?:lakhs?|crores?)?)", re.I),
    re.compile(r"prizes?\s*worth\s*([₹$€£]\s*\d+[\d,.]*\s*(?:lakhs?|crores?)?)", re.I),
    re.compile(r"([₹$€£]\s*\d+[\d,.]*\s*lakhs?)", re.I),
]


def timeline_dates(page: PageEvidence) -> tuple[str, str]:
    """First two dates under a Timeline, else the first and last on the page."""
    if "Timeline" in page.text:
        found = [m.group(1) for line in page.lines if (m := TIMELINE_DATE.search(line))]
        if len(found) >= 2:
            return found[0], found[1]
        if found:
            return found[0], ""

    found = TIMELINE_DATE.findall(page.text)
    if len(found) >= 2:
        return found[0], found[-1]
    return "", ""


def prize_text(page: PageEvidence) -> str:
    for element in page.soup.find_all(["h1", "h2", "h3", "p", "li"]):
        text = element_text(element)
        if "prize" in text.lower():
            amount = regex_first(text, [PRIZE_AMOUNT])
            if amount:
                return amount
    return regex_first(page.text, PRIZE_PATTERNS)


class Hack2SkillStrategy(EventStrategy):
    name = "hack2skill"
    platform = "Hack2Skill"
    category = EventCategory.HACKATHON
    default_location = "Online"
    default_organizer = "Hack2Skill"
    wait_selectors = ("h1", ".event-title", ".hackathon-title")

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        soup = page.soup

        description = value_after_label(find_label(soup, "Overview"))
        if not description:
            description = next(
                (text for p in soup.find_all("p") if len(text := element_text(p)) > 100),
                "",
            )

        start, end = timeline_dates(page)

        price = "Free" if re.search(r"\bfree\b", page.text, re.I) else ""
        fee = regex_first(page.text, [REGISTRATION_FEE])
        if fee:
            price = fee

        register = any(
            "register" in element_text(el).lower()
            for el in soup.select('a[href*="register"], button')
        )

        dom: RawFieldBag = {
            "title": first_text(soup, TITLE_SELECTORS) or page.meta.get("title", ""),
            "description": description,
            "start_date": start,
            "end_date": end,
            "location": text_after_label(soup, ["Venue"]),
            "organizer": text_after_label(soup, ["Host", "Hosted by"], tags=HEADING_TAGS),
            "image_url": page.meta.get("og:image", ""),
            "price": price,
            "prize": prize_text(page),
            "registration_type": "Registration Required" if register else "",
        }

        return merge_fields(
            dom,
            event_fields_from_structured(page.structured),
            fields_from_meta(page.meta),
        )
