"""Cascading DOM lookups shared by the platform strategies.

Every helper takes an ordered list of candidates and returns the first one
that yields content, or an empty value. None of them raise on missing
markup.
"""

import re
from typing import Iterable, Optional, Sequence
from urllib.parse import parse_qs, unquote_plus, urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from event_pipeline.models import RawFieldBag

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
LABEL_TAGS = HEADING_TAGS + ("strong", "b", "dt", "label", "span", "p", "div", "button")

ONLINE_PATTERN = re.compile(r"\b(online|virtual|remote|zoom|livestream)\b", re.I)
COORDINATES = re.compile(r"^\s*-?\d+(?:\.\d+)?\s*,\s*-?\d+(?:\.\d+)?\s*$")

MAP_LINK_SELECTORS = [
    'a[href*="maps.google"]',
    'a[href*="google.com/maps"]',
    'a[href*="goo.gl/maps"]',
    'a[href*="maps.app.goo.gl"]',
]

# Words that mark a line of text as part of a street address
ADDRESS_LANDMARKS = [
    "road", "rd", "street", "st", "avenue", "ave", "boulevard", "blvd", "lane",
    "marg", "nagar", "sector", "floor", "tower", "building", "campus", "park",
    "plaza", "hall", "hotel", "centre", "center", "suite",
]
POSTAL_CODE = re.compile(r"\b\d{5,6}\b")

# Image hints that point at chrome rather than event artwork
NON_EVENT_IMAGE_HINTS = ("logo", "avatar", "icon", "sprite", "badge")


def element_text(element: Optional[Tag]) -> str:
    """Visible text of an element with whitespace collapsed."""
    if element is None:
        return ""
    return re.sub(r"\s+", " ", element.get_text(" ", strip=True)).strip()


def first_text(soup: BeautifulSoup, selectors: Sequence[str], min_length: int = 1) -> str:
    """Text of the first selector that matches with non-empty content."""
    for selector in selectors:
        for element in soup.select(selector):
            text = element_text(element)
            if len(text) >= min_length:
                return text
    return ""


def joined_text(
    soup: BeautifulSoup,
    selectors: Sequence[str],
    separator: str = "\n\n",
    min_length: int = 1,
) -> str:
    """All matches of the first productive selector, joined."""
    for selector in selectors:
        texts = [element_text(el) for el in soup.select(selector)]
        texts = [t for t in texts if len(t) >= min_length]
        if texts:
            return separator.join(dict.fromkeys(texts))
    return ""


def first_attr(soup: BeautifulSoup, selectors: Sequence[str], attr: str) -> str:
    """Value of attr on the first matching element that carries it."""
    for selector in selectors:
        for element in soup.select(selector):
            value = element.get(attr)
            if isinstance(value, list):
                value = " ".join(value)
            if value and value.strip():
                return value.strip()
    return ""


def _label_matches(text: str, label: str, exact: bool) -> bool:
    text = text.strip().lower()
    label = label.strip().lower()
    if exact:
        return text.rstrip(":").strip() == label
    return label in text


def find_label(
    soup: BeautifulSoup,
    label: str,
    tags: Sequence[str] = LABEL_TAGS,
    exact: bool = True,
) -> Optional[Tag]:
    """Innermost element whose own text is (or contains) label."""
    for string in soup.find_all(string=True):
        parent = string.parent
        if parent is None or parent.name not in tags:
            continue
        if _label_matches(str(string), label, exact):
            return parent
    return None


def _next_tag(element: Tag) -> Optional[Tag]:
    sibling = element.find_next_sibling()
    while sibling is not None and not element_text(sibling):
        sibling = sibling.find_next_sibling()
    return sibling


def value_after_label(label_element: Optional[Tag]) -> str:
    """Value rendered next to a label.

    Tries the label's next sibling, then its parent's next sibling, then
    the remaining text of the enclosing container.
    """
    if label_element is None:
        return ""

    sibling = _next_tag(label_element)
    if sibling is not None:
        return element_text(sibling)

    parent = label_element.parent
    if parent is not None:
        parent_sibling = _next_tag(parent)
        if parent_sibling is not None:
            return element_text(parent_sibling)

        label_text = element_text(label_element)
        container_text = element_text(parent)
        remainder = container_text.replace(label_text, "", 1).strip(" :")
        if remainder:
            return remainder
    return ""


def text_after_label(
    soup: BeautifulSoup,
    labels: Iterable[str],
    exact: bool = True,
    tags: Sequence[str] = LABEL_TAGS,
) -> str:
    """Value next to the first label found."""
    for label in labels:
        value = value_after_label(find_label(soup, label, tags=tags, exact=exact))
        if value:
            return value
    return ""


def section_after_heading(
    soup: BeautifulSoup,
    heading: str,
    tags: Sequence[str] = HEADING_TAGS,
    exact: bool = True,
    separator: str = "\n",
) -> str:
    """Text of the blocks following a heading, up to the next heading."""
    label = find_label(soup, heading, tags=tags, exact=exact)
    if label is None:
        return ""

    # Headings wrapped in their own container: walk the wrapper's siblings
    anchor = label
    if label.find_next_sibling() is None and label.parent is not None:
        anchor = label.parent

    parts = []
    for sibling in anchor.find_next_siblings():
        if sibling.name in HEADING_TAGS or sibling.find(list(HEADING_TAGS), recursive=False):
            break
        text = element_text(sibling)
        if text:
            parts.append(text)
    return separator.join(parts)


def list_items_after_label(
    soup: BeautifulSoup,
    label: str,
    item_selector: str = 'div[role="listitem"]',
    item_text_selectors: Sequence[str] = ("h3", "h4"),
) -> list[list[str]]:
    """Items of the list rendered after a label, one list of texts per item.

    For each item the texts of item_text_selectors are collected, falling
    back to the item's whole text.
    """
    label_element = find_label(soup, label)
    if label_element is None:
        return []

    container = None
    for candidate in (label_element, label_element.parent):
        if candidate is None:
            continue
        sibling = _next_tag(candidate)
        if sibling is not None and sibling.select(item_selector):
            container = sibling
            break
    if container is None and label_element.parent is not None:
        container = label_element.parent

    items = []
    for item in container.select(item_selector):
        texts = [element_text(el) for sel in item_text_selectors for el in item.select(sel)]
        texts = [t for t in texts if t] or [element_text(item)]
        items.append(texts)
    return items


def regex_first(text: str, patterns: Sequence, group: int = 1, flags: int = re.I) -> str:
    """First capture of the first pattern that matches."""
    if not text:
        return ""
    for pattern in patterns:
        match = re.search(pattern, text, flags) if isinstance(pattern, str) else pattern.search(text)
        if match:
            value = match.group(group) if match.groups() else match.group(0)
            if value and value.strip():
                return value.strip()
    return ""


def is_online_text(text: str) -> bool:
    """True when a location string describes a virtual event."""
    return bool(text and ONLINE_PATTERN.search(text))


def _dimension(image: Tag, name: str) -> int:
    for attr in (f"data-rendered-{name}", name):
        raw = image.get(attr)
        if raw:
            digits = re.match(r"\s*(\d+)", str(raw))
            if digits:
                return int(digits.group(1))
    return 0


def image_src(image: Tag) -> str:
    """Source of an <img>, including common lazy-load attributes."""
    for attr in ("src", "data-src", "data-lazy-src"):
        value = image.get(attr)
        if value and not value.startswith("data:"):
            return value
    return ""


def first_image(
    soup: BeautifulSoup,
    selectors: Sequence[str],
    base_url: str = "",
    skip: Sequence[str] = ("placeholder", "default"),
) -> str:
    """Source of the first matching <img>, or of an <img> inside a match."""
    for selector in selectors:
        for element in soup.select(selector):
            image = element if element.name == "img" else element.find("img")
            if image is None:
                continue
            src = image_src(image)
            if src and not any(word in src.lower() for word in skip):
                return urljoin(base_url, src)
    return ""


def largest_image(
    soup: BeautifulSoup,
    base_url: str = "",
    min_width: int = 200,
    min_height: int = 0,
    exclude: Sequence[str] = NON_EVENT_IMAGE_HINTS,
) -> str:
    """Absolute URL of the biggest image by pixel area.

    Images whose src or alt mention one of exclude are skipped, as are
    images not wider than min_width or shorter than min_height.
    """
    best_src = ""
    best_area = 0
    for image in soup.find_all("img"):
        src = image_src(image)
        if not src:
            continue
        hint = f"{src} {image.get('alt', '')}".lower()
        if any(word in hint for word in exclude):
            continue
        width = _dimension(image, "width")
        height = _dimension(image, "height")
        if width <= min_width or height < min_height:
            continue
        if width * height > best_area:
            best_area = width * height
            best_src = src
    return urljoin(base_url, best_src) if best_src else ""


def map_link_location(soup: BeautifulSoup) -> str:
    """Place name from a maps link's query, ignoring bare coordinates."""
    for selector in MAP_LINK_SELECTORS:
        for link in soup.select(selector):
            try:
                query = parse_qs(urlparse(link.get("href", "")).query)
            except ValueError:
                continue
            for key in ("q", "query", "center", "destination"):
                for value in query.get(key, []):
                    value = unquote_plus(value).strip()
                    if value and not COORDINATES.match(value):
                        return value
    return ""


def labelled_line(lines: Sequence[str], labels: Sequence[str], max_length: int = 150) -> str:
    """Value of the first "Label: value" line for any of labels."""
    pattern = re.compile(r"^(?:" + "|".join(re.escape(label) for label in labels) + r")\s*:\s*(.+)$", re.I)
    for line in lines:
        match = pattern.match(line.strip())
        if match and len(match.group(1)) <= max_length:
            return match.group(1).strip()
    return ""


def landmark_lines(
    lines: Sequence[str],
    keywords: Sequence[str] = ADDRESS_LANDMARKS,
    exclude: Sequence[str] = (),
    max_length: int = 150,
) -> list[str]:
    """Short text lines that look like part of an address."""
    keyword_pattern = re.compile(r"\b(" + "|".join(re.escape(k) for k in keywords) + r")\b\.?", re.I)
    excluded = {e.strip().lower() for e in exclude if e}
    found = []
    for line in lines:
        line = line.strip()
        if not line or len(line) > max_length or line.lower() in excluded:
            continue
        if keyword_pattern.search(line) and ("," in line or POSTAL_CODE.search(line)):
            found.append(line)
    return found


def is_empty(value) -> bool:
    return value is None or value == "" or value == [] or value == {}


def merge_fields(primary: RawFieldBag, *fallbacks: RawFieldBag) -> RawFieldBag:
    """Fill fields empty in primary from the fallbacks, in order."""
    merged = dict(primary)
    for fallback in fallbacks:
        for key, value in (fallback or {}).items():
            if is_empty(merged.get(key)) and not is_empty(value):
                merged[key] = value
    return merged
