"""Data models for the event pipeline."""

from event_pipeline.models.event import CanonicalEvent, EventCategory, RawFieldBag

__all__ = [
    "CanonicalEvent",
    "EventCategory",
    "RawFieldBag",
]
