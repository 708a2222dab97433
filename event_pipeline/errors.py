"""Exceptions raised by the extraction pipeline."""

from typing import Optional


class EventPipelineError(Exception):
    """Base class for pipeline errors."""


class ExtractionError(EventPipelineError):
    """Extraction of a URL failed. Always names the URL."""

    def __init__(self, url: str, message: str, platform: Optional[str] = None):
        self.url = url
        self.platform = platform
        prefix = f"Failed to extract {platform} event" if platform else "Failed to extract event"
        super().__init__(f"{prefix} from {url}: {message}")


class NavigationError(ExtractionError):
    """The browser could not load the URL (DNS, network, HTTP layer)."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.platform = None
        EventPipelineError.__init__(self, f"Failed to navigate to {url}: {message}")


class NavigationTimeout(NavigationError):
    """Navigation exceeded the configured timeout."""
