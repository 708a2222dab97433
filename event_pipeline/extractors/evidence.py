"""Evidence channels read from a rendered page.

Each extractor returns an empty result instead of raising, so one broken
channel never takes down an extraction.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Union

from bs4 import BeautifulSoup
from rich.console import Console

console = Console()

# Elements whose text never belongs to the visible page
NON_VISIBLE_TAGS = ["script", "style", "noscript", "template", "svg"]

HtmlSource = Union[str, BeautifulSoup]


def _soup(html: HtmlSource) -> BeautifulSoup:
    if isinstance(html, BeautifulSoup):
        return html
    return BeautifulSoup(html or "", "lxml")


def extract_meta_tags(html: HtmlSource) -> dict[str, str]:
    """Map every <meta> property/name to its content, plus the page title."""
    soup = _soup(html)
    meta: dict[str, str] = {}

    for tag in soup.find_all("meta"):
        key = tag.get("property") or tag.get("name")
        content = tag.get("content")
        if key and content is not None:
            meta[key] = content.strip()

    title_tag = soup.find("title")
    if title_tag:
        meta["title"] = title_tag.get_text().strip()

    return meta


def extract_structured_data(html: HtmlSource) -> list[dict]:
    """Extract all JSON-LD blocks, flattening top-level arrays.

    A block with invalid JSON is skipped; the others are kept.
    """
    soup = _soup(html)
    blocks: list[dict] = []

    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or "")
        except (json.JSONDecodeError, TypeError):
            console.print("[dim]Skipping malformed JSON-LD block[/dim]")
            continue
        if isinstance(data, list):
            blocks.extend(item for item in data if isinstance(item, dict))
        elif isinstance(data, dict):
            blocks.append(data)

    return blocks


def extract_next_data(html: HtmlSource) -> dict:
    """Parse the Next.js __NEXT_DATA__ payload, or {} when absent."""
    soup = _soup(html)
    script = soup.find("script", id="__NEXT_DATA__")
    if not script:
        return {}
    try:
        data = json.loads(script.string or "")
    except (json.JSONDecodeError, TypeError):
        return {}
    return data if isinstance(data, dict) else {}


async def extract_rendered_html(session) -> str:
    """Serialized DOM after scripts ran, or "" when the page cannot be read."""
    try:
        return await session.content()
    except Exception as e:
        console.print(f"[yellow]Could not read page content: {e}[/yellow]")
        return ""


@dataclass
class PageEvidence:
    """Everything a strategy reads from one rendered page."""

    url: str
    html: str
    soup: BeautifulSoup
    text: str = ""
    lines: list[str] = field(default_factory=list)
    meta: dict[str, str] = field(default_factory=dict)
    structured: list[dict] = field(default_factory=list)
    next_data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_html(cls, html: str, url: str) -> "PageEvidence":
        """Parse html once and collect every channel."""
        soup = BeautifulSoup(html or "", "lxml")
        meta = extract_meta_tags(soup)
        structured = extract_structured_data(soup)
        next_data = extract_next_data(soup)

        # Scripts are read above; drop them before computing visible text
        for tag in soup.find_all(NON_VISIBLE_TAGS):
            tag.decompose()

        body = soup.body or soup
        text = re.sub(r"\s+", " ", body.get_text(" ", strip=True))
        lines = [line.strip() for line in body.get_text("\n").splitlines() if line.strip()]

        return cls(
            url=url,
            html=html or "",
            soup=soup,
            text=text,
            lines=lines,
            meta=meta,
            structured=structured,
            next_data=next_data,
        )

    def meta_value(self, *keys: str) -> str:
        """First non-empty meta content among keys."""
        for key in keys:
            value = self.meta.get(key)
            if value:
                return value
        return ""
