"""Event models for the extraction pipeline."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

# Intermediate strategy output, keyed by field name. Values are strings,
# lists of strings or ints. Never leaves the pipeline.
RawFieldBag = dict[str, Any]


class EventCategory(str, Enum):
    """Event categories shown to reviewers."""

    TECH_TALK = "Tech Talk"
    WORKSHOP = "Workshop"
    CONFERENCE = "Conference"
    MEETUP = "Meetup"
    HACKATHON = "Hackathon"

    @classmethod
    def coerce(cls, value: Any, default: "EventCategory") -> "EventCategory":
        """Map a loose label ("hackathon", "Tech Talk", enum) onto a category."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for category in cls:
                if category.value.lower() == wanted or category.name.lower() == wanted:
                    return category
        return default


class CanonicalEvent(BaseModel):
    """Normalized event record produced by one extraction."""

    title: str
    description: str = ""
    event_date: datetime
    event_date_estimated: bool = False  # True when event_date is the "now" fallback
    location: str = "Unknown"
    organizer: Optional[str] = None
    image_url: Optional[str] = None
    category: EventCategory = EventCategory.TECH_TALK
    tags: list[str] = Field(default_factory=list)
    platform_label: str = "Unknown"
    source_urls: list[str] = Field(default_factory=list)

    # Supplementary details, present when a strategy recovers them
    end_date: Optional[datetime] = None
    full_address: Optional[str] = None
    price: Optional[str] = None
    prize: Optional[str] = None
    attendee_count: Optional[int] = None
    registration_type: Optional[str] = None
    agenda: Optional[str] = None
    topics: list[str] = Field(default_factory=list)  # Platform-declared themes

    class Config:
        frozen = True

    def to_record(self) -> dict:
        """Convert to the camelCase dict stored by the submission handler."""
        record = {
            "title": self.title,
            "description": self.description,
            "eventDate": self.event_date.isoformat(),
            "eventDateEstimated": self.event_date_estimated,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "location": self.location,
            "fullAddress": self.full_address,
            "organizer": self.organizer,
            "imageUrl": self.image_url,
            "category": self.category.value,
            "tags": self.tags,
            "topics": self.topics,
            "platformLabel": self.platform_label,
            "sourceUrls": self.source_urls,
            "price": self.price,
            "prize": self.prize,
            "attendeeCount": self.attendee_count,
            "registrationType": self.registration_type,
            "agenda": self.agenda,
        }
        # Filter out None/empty values
        return {k: v for k, v in record.items() if v is not None and v != [] and v != ""}
