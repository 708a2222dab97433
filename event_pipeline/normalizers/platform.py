"""Platform label inference from the submitted URL."""

from urllib.parse import urlparse

UNKNOWN_PLATFORM = "Unknown"

# Checked in order against the lowercased hostname
KNOWN_PLATFORMS = [
    ("meetup", "Meetup"),
    ("eventbrite", "Eventbrite"),
    ("lu.ma", "Lu.ma"),
    ("luma", "Lu.ma"),
]


def url_hostname(url: str) -> str:
    """Lowercased hostname, or "" when the URL cannot be parsed."""
    if not isinstance(url, str) or not url:
        return ""
    try:
        return (urlparse(url.strip()).hostname or "").lower()
    except ValueError:
        return ""


def platform_label(url: str) -> str:
    """Human label for the hosting platform.

    Known hosts map to their brand name; anything else uses the
    capitalized second-level domain ("gdg.community.dev" -> "Community").
    """
    hostname = url_hostname(url)
    if not hostname:
        return UNKNOWN_PLATFORM

    for needle, label in KNOWN_PLATFORMS:
        if needle in hostname:
            return label

    parts = hostname.split(".")
    if len(parts) > 1 and parts[-2]:
        second_level = parts[-2]
        return second_level[:1].upper() + second_level[1:]

    return UNKNOWN_PLATFORM
