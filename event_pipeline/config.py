"""Pipeline configuration read from the environment.

All settings have fixed defaults so the pipeline runs with no environment
at all. The CLI loads a `.env` file before building settings.
"""

import os
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field
from rich.console import Console

console = Console()

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag, falling back to default on unrecognised values."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    console.print(f"[yellow]Ignoring invalid {name}={raw!r}, using {default}[/yellow]")
    return default


def env_int(name: str, default: int) -> int:
    """Read a positive integer, falling back to default when unset or invalid."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        console.print(f"[yellow]Ignoring invalid {name}={raw!r}, using {default}[/yellow]")
        return default
    return value if value > 0 else default


class PipelineSettings(BaseModel):
    """Runtime knobs for the browser and the normalizer."""

    navigation_timeout_ms: int = 30000
    selector_timeout_ms: int = 10000
    settle_ms: int = 2000
    rotate_user_agents: bool = False
    headless: bool = True
    timezone: str = "UTC"
    description_max_length: int = 5000
    viewport: dict[str, int] = Field(default_factory=lambda: {"width": 1920, "height": 1080})

    class Config:
        extra = "ignore"

    @classmethod
    def from_env(cls) -> "PipelineSettings":
        """Build settings from environment variables."""
        return cls(
            navigation_timeout_ms=env_int("NAVIGATION_TIMEOUT", 30000),
            selector_timeout_ms=env_int("SELECTOR_TIMEOUT", 10000),
            settle_ms=env_int("SETTLE_DELAY", 2000),
            rotate_user_agents=env_bool("ROTATE_USER_AGENTS", False),
            headless=env_bool("HEADLESS", True),
            timezone=os.environ.get("EVENT_TIMEZONE", "UTC") or "UTC",
            description_max_length=env_int("DESCRIPTION_MAX_LENGTH", 5000),
        )

    def tzinfo(self) -> ZoneInfo:
        """Timezone applied to naive parsed dates."""
        return resolve_timezone(self.timezone)


def resolve_timezone(name: Optional[str]) -> ZoneInfo:
    """Resolve an IANA zone name, defaulting to UTC."""
    if not name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        console.print(f"[yellow]Unknown timezone {name!r}, using UTC[/yellow]")
        return ZoneInfo("UTC")
