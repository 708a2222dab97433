"""Platform extraction strategies.

Each supported platform has a strategy class that knows how to:
1. Load the page (wait selectors, scrolling, settle time)
2. Read fields from the DOM, JSON-LD and metadata in its own priority order
3. Fill gaps with the platform's sentinels

Strategies are chosen by hostname; unknown hosts get GenericStrategy.
"""

from typing import Optional

from event_pipeline.browser.session import SessionManager
from event_pipeline.config import PipelineSettings
from event_pipeline.normalizers.platform import url_hostname
from event_pipeline.strategies.base import EventStrategy
from event_pipeline.strategies.bevy import BevyStrategy
from event_pipeline.strategies.devfolio import DevfolioStrategy
from event_pipeline.strategies.devpost import DevpostStrategy
from event_pipeline.strategies.eventbrite import EventbriteStrategy
from event_pipeline.strategies.gdg import GDGStrategy
from event_pipeline.strategies.generic import GenericStrategy
from event_pipeline.strategies.hack2skill import Hack2SkillStrategy
from event_pipeline.strategies.ibm import IBMStrategy
from event_pipeline.strategies.luma import LumaStrategy
from event_pipeline.strategies.meetup import MeetupStrategy
from event_pipeline.strategies.unstop import UnstopStrategy

# Matched in order against the lowercased hostname.
# GDG chapters are served by Bevy, so gdg.community.dev comes first.
STRATEGY_TABLE: list[tuple[str, type[EventStrategy]]] = [
    ("meetup.com", MeetupStrategy),
    ("eventbrite.", EventbriteStrategy),
    ("lu.ma", LumaStrategy),
    ("luma.com", LumaStrategy),
    ("luma.so", LumaStrategy),
    ("gdg.community.dev", GDGStrategy),
    ("bevy.com", BevyStrategy),
    ("devfolio.co", DevfolioStrategy),
    ("devpost.com", DevpostStrategy),
    ("hack2skill.com", Hack2SkillStrategy),
    ("unstop.com", UnstopStrategy),
    ("ibm.com", IBMStrategy),
]


def strategy_class_for(url: str) -> type[EventStrategy]:
    """Strategy class for url. Never raises; unknown or malformed URLs get Generic."""
    hostname = url_hostname(url)
    for needle, strategy_class in STRATEGY_TABLE:
        if needle in hostname:
            return strategy_class
    return GenericStrategy


def select_strategy(
    url: str,
    manager: SessionManager,
    settings: Optional[PipelineSettings] = None,
) -> EventStrategy:
    """Instantiate the strategy for url bound to manager."""
    return strategy_class_for(url)(manager, settings)


__all__ = [
    "STRATEGY_TABLE",
    "BevyStrategy",
    "DevfolioStrategy",
    "DevpostStrategy",
    "EventStrategy",
    "EventbriteStrategy",
    "GDGStrategy",
    "GenericStrategy",
    "Hack2SkillStrategy",
    "IBMStrategy",
    "LumaStrategy",
    "MeetupStrategy",
    "UnstopStrategy",
    "select_strategy",
    "strategy_class_for",
]
