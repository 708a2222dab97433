"""Date parsing for the many formats event platforms render.

Resolution order: ISO-8601, then a list of strptime formats (with and
without a year), then loose natural-language token extraction. When all
of that fails the caller gets "now" flagged as estimated.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

MONTH_PATTERN = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
WEEKDAY_PATTERN = r"(?:mon|tues?|wed(?:nes)?|thu(?:rs)?|fri|sat(?:ur)?|sun)(?:day)?"

# Offsets in minutes for abbreviations seen on event pages
TIMEZONE_OFFSETS = {
    "UTC": 0, "GMT": 0, "Z": 0,
    "IST": 330,
    "PST": -480, "PDT": -420,
    "MST": -420, "MDT": -360,
    "CST": -360, "CDT": -300,
    "EST": -300, "EDT": -240,
    "BST": 60, "CET": 60, "CEST": 120,
    "EET": 120, "EEST": 180,
    "SGT": 480, "JST": 540,
    "AEST": 600, "AEDT": 660,
}

DATE_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %I:%M %p",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",          # 01/15/2026
    "%d/%m/%Y",          # 15/01/2026
    "%d-%m-%Y %H:%M",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%A, %B %d, %Y %I:%M %p",   # Saturday, October 4, 2025 10:00 AM
    "%A, %B %d, %Y, %I:%M %p",
    "%A, %B %d, %Y %H:%M",
    "%A, %B %d, %Y",
    "%A %B %d, %Y",
    "%A, %d %B %Y %I:%M %p",
    "%A, %d %B %Y",
    "%a, %b %d, %Y %I:%M %p",   # Sat, Oct 4, 2025 10:00 AM
    "%a, %b %d, %Y, %I:%M %p",
    "%a, %b %d, %Y",
    "%a, %d %b %Y %I:%M %p",
    "%a, %d %b %Y",
    "%B %d, %Y %I:%M %p",
    "%B %d, %Y, %I:%M %p",
    "%B %d, %Y %H:%M",
    "%B %d, %Y",         # January 15, 2026
    "%B %d %Y",
    "%b %d, %Y %I:%M %p",
    "%b %d, %Y, %I:%M %p",
    "%b %d, %Y %H:%M",
    "%b %d, %Y",         # Jan 15, 2026
    "%b %d %Y",
    "%d %B %Y %I:%M %p",
    "%d %B %Y, %I:%M %p",
    "%d %B %Y %H:%M",
    "%d %B %Y",          # 15 January 2026
    "%d %B, %Y",
    "%d %b %Y %I:%M %p",
    "%d %b %Y, %I:%M %p",
    "%d %b %Y %H:%M",
    "%d %b %Y",          # 15 Jan 2026
    "%d %b, %Y",
    "%d %b %y, %I:%M %p",  # 04 Oct 25, 10:00 AM
    "%d %b %y %I:%M %p",
    "%d %b %y",
    "%b %d, %Y %I %p",
    "%B %d, %Y %I %p",
]

# Completed with the current year before parsing
YEARLESS_FORMATS = [
    "%A, %B %d %I:%M %p",
    "%A, %B %d, %I:%M %p",
    "%A, %B %d",
    "%a, %b %d %I:%M %p",
    "%a, %b %d, %I:%M %p",
    "%a, %b %d",
    "%B %d %I:%M %p",
    "%B %d, %I:%M %p",
    "%B %d",
    "%b %d %I:%M %p",
    "%b %d, %I:%M %p",
    "%b %d",
    "%d %B",
    "%d %b",
]

ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
ORDINAL = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)\b", re.I)
MERIDIEM = re.compile(r"(\d)\s*([ap])\.?m\.?(?![a-z])", re.I)
AT_SEPARATOR = re.compile(r"\s+(?:@|at)\s+(?=\d)", re.I)
TIME_RANGE = re.compile(
    r"(\d{1,2}(?::\d{2})?\s*[AP]M)\s*(?:-|–|—|to)\s*(\d{1,2}(?::\d{2})?\s*[AP]M)",
    re.I,
)
GMT_OFFSET = re.compile(r"\s*\(?(?:GMT|UTC)\s*([+-])\s*(\d{1,2})(?::?(\d{2}))?\)?$", re.I)
TZ_SUFFIX = re.compile(r"\s+\(?([A-Z]{1,5})\)?$")
FOUR_DIGIT_YEAR = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)")

TEXT_DATE_PATTERNS = [
    # 4 Oct 2025, 4th October 2025
    re.compile(rf"\b\d{{1,2}}(?:st|nd|rd|th)?\s+{MONTH_PATTERN}\.?,?\s+\d{{4}}\b", re.I),
    # Oct 4, 2025 / October 4th 2025
    re.compile(rf"\b{MONTH_PATTERN}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}}\b", re.I),
]


@dataclass(frozen=True)
class ParsedDate:
    """Outcome of date parsing."""

    value: datetime
    estimated: bool = False
    method: str = "iso"


def _utc() -> tzinfo:
    return timezone.utc


def _offset_zone(minutes: int) -> Optional[tzinfo]:
    """Fixed-offset zone, or None for offsets of a day or more."""
    if abs(minutes) >= 24 * 60:
        return None
    return timezone(timedelta(minutes=minutes))


def split_time_range(text: str) -> tuple[Optional[str], Optional[str]]:
    """Split "10:00 AM – 1:00 PM" into its start and end times."""
    if not text:
        return None, None
    match = TIME_RANGE.search(text)
    if not match:
        return None, None
    return match.group(1).strip(), match.group(2).strip()


def combine_date_and_time(date_text: Optional[str], time_text: Optional[str]) -> str:
    """Join a date and a time rendered in separate elements."""
    date_text = (date_text or "").strip().rstrip(",")
    time_text = (time_text or "").strip()
    if date_text and time_text:
        return f"{date_text} {time_text}"
    return date_text or time_text


def _prepare(text: str) -> tuple[str, Optional[tzinfo]]:
    """Clean up a date string and peel off a trailing timezone."""
    cleaned = re.sub(r"\s+", " ", text).strip()
    cleaned = ORDINAL.sub(r"\1", cleaned)
    cleaned = MERIDIEM.sub(lambda m: f"{m.group(1)} {m.group(2).upper()}M", cleaned)
    cleaned = AT_SEPARATOR.sub(" ", cleaned)

    # Keep only the start of a time range, and whatever follows it
    range_match = TIME_RANGE.search(cleaned)
    if range_match:
        cleaned = cleaned[:range_match.start()] + range_match.group(1) + cleaned[range_match.end():]

    zone: Optional[tzinfo] = None
    offset_match = GMT_OFFSET.search(cleaned)
    if offset_match:
        sign = -1 if offset_match.group(1) == "-" else 1
        minutes = int(offset_match.group(2)) * 60 + int(offset_match.group(3) or 0)
        zone = _offset_zone(sign * minutes)
        cleaned = cleaned[:offset_match.start()]
    else:
        suffix_match = TZ_SUFFIX.search(cleaned)
        if suffix_match and suffix_match.group(1) in TIMEZONE_OFFSETS:
            zone = _offset_zone(TIMEZONE_OFFSETS[suffix_match.group(1)])
            cleaned = cleaned[:suffix_match.start()]

    return cleaned.strip().rstrip(",").strip(), zone


def _attach_zone(value: datetime, zone: Optional[tzinfo], default_tz: tzinfo) -> datetime:
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=zone or default_tz)


def parse_iso(text: str, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse ISO-8601 (trailing "Z" accepted)."""
    text = (text or "").strip()
    if not ISO_PREFIX.match(text):
        return None
    try:
        value = datetime.fromisoformat(text.replace("Z", "+00:00") if text.endswith("Z") else text)
    except ValueError:
        return None
    return _attach_zone(value, None, tz or _utc())


def parse_with_formats(
    text: str,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """Try the known strptime formats, then the yearless ones."""
    cleaned, zone = _prepare(text)
    if not cleaned:
        return None
    default_tz = tz or _utc()

    for fmt in DATE_FORMATS:
        try:
            return _attach_zone(datetime.strptime(cleaned, fmt), zone, default_tz)
        except ValueError:
            continue

    if FOUR_DIGIT_YEAR.search(cleaned):
        return None

    year = (now or datetime.now(default_tz)).year
    for fmt in YEARLESS_FORMATS:
        try:
            value = datetime.strptime(f"{cleaned} {year}", f"{fmt} %Y")
        except ValueError:
            continue
        return _attach_zone(value, zone, default_tz)

    return None


def parse_natural_language(
    text: str,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """Pull month, day, year and time tokens out of loose text.

    Needs at least a month name. "Saturday, October" without a day
    resolves to the first of the month.
    """
    cleaned, zone = _prepare(text)
    default_tz = tz or _utc()
    now = now or datetime.now(default_tz)

    month_match = re.search(rf"\b{MONTH_PATTERN}\b", cleaned, re.I)
    if not month_match:
        return None
    month = MONTHS[month_match.group(0).lower()]

    day = None
    for match in re.finditer(r"(?<![\d:])(\d{1,2})(?![\d:])(?!\s*[AP]M\b)", cleaned, re.I):
        candidate = int(match.group(1))
        if 1 <= candidate <= 31:
            day = candidate
            break
    if day is None:
        if not re.search(rf"\b{WEEKDAY_PATTERN}\b", cleaned, re.I):
            return None
        day = 1

    year_match = FOUR_DIGIT_YEAR.search(cleaned)
    year = int(year_match.group(0)) if year_match else now.year

    # Midday keeps the calendar day stable across offsets
    hour, minute = 12, 0
    time_match = re.search(r"(?<!\d)(\d{1,2}):(\d{2})(?:\s*([AP]M))?", cleaned, re.I)
    if time_match:
        hour, minute = int(time_match.group(1)), int(time_match.group(2))
        meridiem = (time_match.group(3) or "").upper()
    else:
        time_match = re.search(r"(?<!\d)(\d{1,2})\s*([AP]M)\b", cleaned, re.I)
        meridiem = time_match.group(2).upper() if time_match else ""
        if time_match:
            hour = int(time_match.group(1))
    if meridiem == "PM" and hour < 12:
        hour += 12
    elif meridiem == "AM" and hour == 12:
        hour = 0

    try:
        value = datetime(year, month, day, hour, minute)
    except ValueError:
        return None
    return _attach_zone(value, zone, default_tz)


def parse_date_or_none(
    text: Optional[str],
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """Run the full parse chain without the "now" fallback."""
    if not text or not str(text).strip():
        return None
    text = str(text)
    return (
        parse_iso(text, tz)
        or parse_with_formats(text, tz, now)
        or parse_natural_language(text, tz, now)
    )


def parse_event_date(
    text: Optional[str],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> ParsedDate:
    """Parse an event date. Never raises.

    Naive results take tz (UTC by default). Unparseable input returns
    now with estimated=True.
    """
    tz = tz or _utc()
    now = now or datetime.now(tz)

    if text and str(text).strip():
        text = str(text)
        value = parse_iso(text, tz)
        if value:
            return ParsedDate(value, method="iso")
        value = parse_with_formats(text, tz, now)
        if value:
            return ParsedDate(value, method="format")
        value = parse_natural_language(text, tz, now)
        if value:
            return ParsedDate(value, method="natural")

    return ParsedDate(now if now.tzinfo else now.replace(tzinfo=tz), estimated=True, method="fallback")


def find_date_in_text(text: Optional[str]) -> Optional[str]:
    """Return the earliest "D Mon YYYY" or "Mon D, YYYY" span in free text."""
    if not text:
        return None
    matches = [m for pattern in TEXT_DATE_PATTERNS for m in [pattern.search(text)] if m]
    if not matches:
        return None
    return min(matches, key=lambda m: m.start()).group(0)
