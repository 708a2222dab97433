"""Normalization of raw extraction output."""

from event_pipeline.normalizers.dates import (
    ParsedDate,
    find_date_in_text,
    parse_date_or_none,
    parse_event_date,
)
from event_pipeline.normalizers.event import normalize_event
from event_pipeline.normalizers.platform import platform_label
from event_pipeline.normalizers.text import TECH_KEYWORDS, extract_tech_tags, sanitize_string

__all__ = [
    "ParsedDate",
    "TECH_KEYWORDS",
    "extract_tech_tags",
    "find_date_in_text",
    "normalize_event",
    "parse_date_or_none",
    "parse_event_date",
    "platform_label",
    "sanitize_string",
]
