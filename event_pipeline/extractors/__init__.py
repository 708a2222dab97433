"""Evidence extraction from rendered pages."""

from event_pipeline.extractors.evidence import (
    PageEvidence,
    extract_meta_tags,
    extract_rendered_html,
    extract_structured_data,
)
from event_pipeline.extractors.structured import event_fields_from_structured, find_event_object

__all__ = [
    "PageEvidence",
    "event_fields_from_structured",
    "extract_meta_tags",
    "extract_rendered_html",
    "extract_structured_data",
    "find_event_object",
]
