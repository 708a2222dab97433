"""Unstop competition and hackathon pages."""

import re

from bs4 import BeautifulSoup

from event_pipeline.extractors.dom import (
    element_text,
    find_label,
    first_text,
    labelled_line,
    largest_image,
    merge_fields,
    regex_first,
    value_after_label,
)
from event_pipeline.extractors.evidence import PageEvidence
from event_pipeline.extractors.structured import event_fields_from_structured, fields_from_meta
from event_pipeline.models import EventCategory, RawFieldBag
from event_pipeline.normalizers.platform import url_hostname
from event_pipeline.strategies.base import EventStrategy

# "04 Oct 25" or "04 Oct 2025", optionally followed by ", 10:00 AM IST"
UNSTOP_DATE = re.compile(r"\d{1,2}\s+[A-Za-z]{3}\s+(?:\d{4}|\d{2})(?!\d)(?:,\s+\d{1,2}:\d{2}\s+[AP]M\s+[A-Z]{3})?")
DESCRIPTION_LABELS = ["About this event", "Everything you need to know", "Details"]
DATE_LABELS = ("Start:", "End:", "Dates & Deadlines")
LOCATION_LABELS = ("Location", "Venue", "Where")
ORGANIZER_LABELS = ["Organizer", "Organiser", "Hosted by"]
EVENT_TYPES = ["Hackathon", "Coding Challenge", "Workshop", "Conference", "Webinar", "Competition"]
FEE_PATTERN = re.compile(r"(?:Registration Fee|Fee)[:\s]*([₹$€£]\s*[\d,]+)", re.I)
PRIZE_PATTERNS = [
    re.compile(r"prizes?\s+worth\s+([₹$€£]\s*[\d,]+(?:\s*lakhs?)?)", re.I),
    re.compile(r"total\s+prize\s+([₹$€£]\s*[\d,]+(?:\s*lakhs?)?)", re.I),
    re.compile(r"prize\s+pool\s+of\s+([₹$€£]\s*[\d,]+(?:\s*lakhs?)?)", re.I),
    re.compile(r"cash\s+prizes?:\s*([₹$€£]\s*[\d,]+(?:\s*lakhs?)?)", re.I),
]
TAG_LABELS = ["Tags:", "Categories:", "Topics:", "Key Themes:"]
COMMON_TAGS = [
    "tech", "coding", "hackathon", "innovation", "competition", "challenge", "ai",
    "machine learning", "data science", "web", "mobile", "blockchain", "cloud", "iot",
]


def long_description(soup: BeautifulSoup) -> str:
    """Text after an "about" label, else the first long paragraph."""
    for label in DESCRIPTION_LABELS:
        element = find_label(soup, label, exact=False)
        if element is None:
            continue
        text = value_after_label(element)
        if len(text) > 100:
            return text
        container = element.find_parent(["section", "div"])
        if container is not None:
            for block in container.select("p, div.description"):
                text = element_text(block)
                if len(text) > 100:
                    return text

    for block in soup.select("p, div.description"):
        text = element_text(block)
        if len(text) > 150:
            return text
    return ""


def unstop_dates(page: PageEvidence) -> tuple[str, str]:
    """First and last "DD Mon YY" or "DD Mon YYYY" dates, label lines first."""
    labelled = [line for line in page.lines if any(label in line for label in DATE_LABELS)]
    found = [m for line in labelled for m in UNSTOP_DATE.findall(line)]
    body = UNSTOP_DATE.findall(page.text)

    start = found[0] if found else (body[0] if body else "")
    end = found[-1] if len(found) > 1 else (body[-1] if len(body) > 1 else "")
    return start, end


def organizer_text(page: PageEvidence) -> str:
    for label in ORGANIZER_LABELS:
        element = find_label(page.soup, label, exact=False)
        if element is None:
            continue
        own_text = element_text(element)
        if ":" in own_text and own_text.split(":", 1)[1].strip():
            return own_text.split(":", 1)[1].strip()
        value = value_after_label(element)
        if value:
            return value

    host = page.soup.select_one(".organizer, .host")
    if host is not None:
        image = host if host.name == "img" else host.find("img")
        if image is not None and len(image.get("alt", "")) > 1:
            return image["alt"]
        if element_text(host):
            return element_text(host)

    if page.meta.get("og:site_name"):
        return page.meta["og:site_name"]

    hostname = url_hostname(page.url).replace("www.", "")
    name = hostname.split(".")[0] if hostname else ""
    return name[:1].upper() + name[1:]


def price_text(page: PageEvidence) -> str:
    fee = regex_first(page.text, [FEE_PATTERN])
    if fee:
        return fee
    if any(line.strip().lower() == "free" or (len(line) < 10 and "Free" in line) for line in page.lines):
        return "Free"
    return ""


def prize_text(page: PageEvidence) -> str:
    for line in page.lines:
        if "prize" not in line.lower():
            continue
        amount = regex_first(line, [r"([₹$€£]\s*[\d,]+(?:\s*lakhs?)?)"])
        if amount:
            return amount
    return regex_first(page.text, PRIZE_PATTERNS)


def tag_list(page: PageEvidence, title: str, description: str, event_type: str) -> list[str]:
    for label in TAG_LABELS:
        element = find_label(page.soup, label.rstrip(":"), exact=True)
        if element is None:
            continue
        parent = element.parent
        chips = parent.select("span.tag, a.tag, .badge, .chip") if parent is not None else []
        tags = [element_text(chip).lower() for chip in chips if len(element_text(chip)) > 1]
        if not tags:
            value = value_after_label(element)
            tags = [t.strip().lower() for t in re.split(r"[,;|]", value) if len(t.strip()) > 1]
        if tags:
            return tags

    text = f"{title} {description}".lower()
    tags = [tag for tag in COMMON_TAGS if tag in text]
    if event_type:
        tags.append(event_type.lower())
    return tags


class UnstopStrategy(EventStrategy):
    name = "unstop"
    platform = "Unstop"
    category = EventCategory.HACKATHON
    default_location = "Online"
    wait_selectors = ("h1",)

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        soup = page.soup

        title = first_text(soup, ["h1"]) or page.meta_value("og:title", "title")
        description = long_description(soup)
        start, end = unstop_dates(page)

        location = labelled_line(page.lines, LOCATION_LABELS)
        if len(location) <= 3:
            location = first_text(soup, ["address"])

        event_type = next((t for t in EVENT_TYPES if t in page.text), "")

        dom: RawFieldBag = {
            "title": title,
            "description": description,
            "start_date": start,
            "end_date": end,
            "location": location,
            "full_address": location,
            "organizer": organizer_text(page),
            "image_url": (
                page.meta.get("og:image")
                or largest_image(soup, page.url, min_width=200, min_height=151, exclude=("logo",))
            ),
            "price": price_text(page),
            "prize": prize_text(page),
            "registration_type": "Registration Required",
            "topics": tag_list(page, title, description, event_type),
        }

        return merge_fields(
            dom,
            event_fields_from_structured(page.structured),
            fields_from_meta(page.meta),
        )
