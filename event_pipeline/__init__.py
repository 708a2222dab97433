"""Event page extraction pipeline: URL in, normalized event record out."""

from event_pipeline.errors import EventPipelineError, ExtractionError, NavigationError, NavigationTimeout
from event_pipeline.models import CanonicalEvent, EventCategory
from event_pipeline.pipeline import (
    EventExtractionPipeline,
    ExtractionOutcome,
    extract_event,
    extract_events_batch,
)

__all__ = [
    "CanonicalEvent",
    "EventCategory",
    "EventExtractionPipeline",
    "EventPipelineError",
    "ExtractionError",
    "ExtractionOutcome",
    "NavigationError",
    "NavigationTimeout",
    "extract_event",
    "extract_events_batch",
]
