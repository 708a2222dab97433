"""Luma (lu.ma) event pages.

Luma renders from Next.js; the page payload carries the event even when
JSON-LD is missing.
"""

from typing import Any, Optional

from event_pipeline.extractors.dom import first_text, is_online_text, merge_fields
from event_pipeline.extractors.evidence import PageEvidence
from event_pipeline.extractors.structured import event_fields_from_structured, fields_from_meta
from event_pipeline.models import EventCategory, RawFieldBag
from event_pipeline.strategies.base import EventStrategy

LOCATION_SELECTORS = [".event-location", '[class*="location"]']
MAX_DEPTH = 12


def find_event_payload(data: Any, depth: int = 0) -> Optional[dict]:
    """First dict in the Next.js data that looks like an event."""
    if depth > MAX_DEPTH:
        return None
    if isinstance(data, dict):
        if "start_at" in data and "name" in data:
            return data
        children = data.values()
    elif isinstance(data, list):
        children = data
    else:
        return None

    for child in children:
        found = find_event_payload(child, depth + 1)
        if found is not None:
            return found
    return None


def fields_from_next_data(next_data: dict) -> RawFieldBag:
    event = find_event_payload(next_data)
    if not event:
        return {}

    geo = event.get("geo_address_info") or {}
    hosts = event.get("hosts") or []
    fields: RawFieldBag = {
        "title": event.get("name") or "",
        "description": event.get("description") or event.get("description_short") or "",
        "start_date": event.get("start_at") or "",
        "end_date": event.get("end_at") or "",
        "location": geo.get("city_state") or geo.get("city") or geo.get("address") or "",
        "full_address": geo.get("full_address") or "",
        "image_url": event.get("cover_url") or "",
        "organizer": ", ".join(h["name"] for h in hosts if isinstance(h, dict) and h.get("name")),
    }
    if not fields["location"] and event.get("location_type") == "online":
        fields["location"] = "Online"
    return {k: v for k, v in fields.items() if v}


class LumaStrategy(EventStrategy):
    name = "luma"
    platform = "Lu.ma"
    category = EventCategory.WORKSHOP
    wait_selectors = ("h1",)

    def extract_fields(self, page: PageEvidence) -> RawFieldBag:
        location = first_text(page.soup, LOCATION_SELECTORS)
        if is_online_text(location):
            location = "Online"

        dom: RawFieldBag = {
            "title": first_text(page.soup, ["h1"]),
            "location": location,
        }

        return merge_fields(
            event_fields_from_structured(page.structured),
            fields_from_meta(page.meta),
            fields_from_next_data(page.next_data),
            dom,
        )
