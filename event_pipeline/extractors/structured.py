"""Event fields from Schema.org JSON-LD and OpenGraph metadata."""

from typing import Any, Optional

from event_pipeline.models import RawFieldBag

# Event types we care about
EVENT_TYPES = {
    "Event",
    "EducationEvent",
    "BusinessEvent",
    "SocialEvent",
    "Festival",
    "Hackathon",
    "ExhibitionEvent",
    "CourseInstance",
}


def is_event_type(block_type: Any) -> bool:
    """True for an event @type, including list-valued types."""
    if isinstance(block_type, list):
        return any(t in EVENT_TYPES for t in block_type)
    return block_type in EVENT_TYPES


def find_event_object(blocks: list[dict]) -> Optional[dict]:
    """First Event object, looking inside @graph containers too."""
    for block in blocks:
        if not isinstance(block, dict):
            continue
        if is_event_type(block.get("@type", "")):
            return block
        graph = block.get("@graph")
        if isinstance(graph, list):
            for item in graph:
                if isinstance(item, dict) and is_event_type(item.get("@type", "")):
                    return item
    return None


def format_address(address: Any) -> str:
    """Render a PostalAddress (or plain string) as one line."""
    if isinstance(address, str):
        return address.strip()
    if not isinstance(address, dict):
        return ""

    country = address.get("addressCountry")
    if isinstance(country, dict):
        country = country.get("name")

    parts = [
        address.get("streetAddress"),
        address.get("addressLocality"),
        address.get("addressRegion"),
        address.get("postalCode"),
        country,
    ]
    return ", ".join(str(p).strip() for p in parts if p and str(p).strip())


def image_from(value: Any) -> str:
    """Image URL from a string, list or ImageObject."""
    if isinstance(value, str):
        return value
    if isinstance(value, list) and value:
        return image_from(value[0])
    if isinstance(value, dict):
        return value.get("url") or value.get("contentUrl") or ""
    return ""


def name_from(value: Any) -> str:
    """Name from a string, Person/Organization or a list of them."""
    if isinstance(value, str):
        return value
    if isinstance(value, list) and value:
        return name_from(value[0])
    if isinstance(value, dict):
        return value.get("name") or ""
    return ""


def price_from_offers(offers: Any) -> str:
    """Price label: "Free" for a zero price, "<price> <currency>" otherwise."""
    if isinstance(offers, list):
        offers = offers[0] if offers else None
    if not isinstance(offers, dict):
        return ""

    price = offers.get("price", offers.get("lowPrice"))
    if price is None or price == "":
        return ""
    try:
        if float(price) == 0:
            return "Free"
    except (TypeError, ValueError):
        return str(price)
    currency = offers.get("priceCurrency", "")
    return f"{price} {currency}".strip()


def location_fields(location: Any, attendance_mode: str = "") -> RawFieldBag:
    """Location name and full address from a Schema.org location."""
    fields: RawFieldBag = {}
    if isinstance(location, list):
        location = next((loc for loc in location if isinstance(loc, dict)), location[0] if location else None)

    if isinstance(location, dict):
        if location.get("@type") == "VirtualLocation":
            fields["location"] = "Online"
        else:
            address = format_address(location.get("address"))
            fields["location"] = location.get("name") or address
            if address:
                fields["full_address"] = address
    elif isinstance(location, str) and location.strip():
        fields["location"] = location.strip()

    if not fields.get("location") and "Online" in (attendance_mode or ""):
        fields["location"] = "Online"
    return fields


def event_fields_from_structured(blocks: list[dict]) -> RawFieldBag:
    """Map the page's Schema.org Event onto raw fields. {} when there is none."""
    event = find_event_object(blocks)
    if not event:
        return {}

    fields: RawFieldBag = {
        "title": event.get("name") or "",
        "description": event.get("description") or "",
        "start_date": event.get("startDate") or "",
        "end_date": event.get("endDate") or "",
        "image_url": image_from(event.get("image")),
        "organizer": name_from(event.get("organizer")),
        "price": price_from_offers(event.get("offers")),
        "canonical_url": event.get("url") or "",
    }
    fields.update(location_fields(event.get("location"), str(event.get("eventAttendanceMode", ""))))

    keywords = event.get("keywords", [])
    if isinstance(keywords, str):
        keywords = [k.strip() for k in keywords.split(",")]
    if isinstance(keywords, list):
        fields["topics"] = [str(k) for k in keywords if k][:10]

    return {k: v for k, v in fields.items() if v}


def fields_from_meta(meta: dict[str, str]) -> RawFieldBag:
    """OpenGraph / Twitter / standard meta tags as raw fields."""
    fields: RawFieldBag = {
        "title": meta.get("og:title") or meta.get("twitter:title") or meta.get("title") or "",
        "description": (
            meta.get("og:description")
            or meta.get("twitter:description")
            or meta.get("description")
            or ""
        ),
        "image_url": meta.get("og:image") or meta.get("twitter:image") or "",
        # Facebook-style event properties
        "start_date": meta.get("event:start_time") or meta.get("og:event:start_time") or "",
        "end_date": meta.get("event:end_time") or meta.get("og:event:end_time") or "",
        "canonical_url": meta.get("og:url") or "",
    }

    keywords = meta.get("keywords")
    if keywords:
        fields["topics"] = [k.strip() for k in keywords.split(",") if k.strip()][:10]

    return {k: v for k, v in fields.items() if v}
