"""Tests for strategy selection and per-platform parsing of saved pages."""

from datetime import datetime, timedelta, timezone

import pytest

from event_pipeline.browser.session import SessionManager
from event_pipeline.models import EventCategory
from event_pipeline.normalizers.event import normalize_event
from event_pipeline.strategies import (
    BevyStrategy,
    DevfolioStrategy,
    DevpostStrategy,
    EventbriteStrategy,
    GDGStrategy,
    GenericStrategy,
    Hack2SkillStrategy,
    IBMStrategy,
    LumaStrategy,
    MeetupStrategy,
    UnstopStrategy,
    select_strategy,
    strategy_class_for,
)
from event_pipeline.strategies.devfolio import split_date_range
from event_pipeline.strategies.gdg import chapter_organizer
from event_pipeline.strategies.luma import find_event_payload
from event_pipeline.strategies.meetup import date_text_scan, group_slug_organizer

UTC = timezone.utc
IST = timezone(timedelta(hours=5, minutes=30))


@pytest.fixture
def manager(settings) -> SessionManager:
    """A manager that is never asked to launch anything."""

    async def factory(_settings):
        raise AssertionError("parse tests must not launch a browser")

    return SessionManager(settings=settings, browser_factory=factory)


def parse(strategy_class, manager, html: str, url: str) -> dict:
    return strategy_class(manager).parse(html, url)


class TestStrategySelection:
    """Tests for hostname to strategy mapping."""

    @pytest.mark.parametrize("url,expected", [
        ("https://www.meetup.com/python-pune/events/301234567/", MeetupStrategy),
        ("https://www.eventbrite.com/e/pycon-india-2025-tickets-1", EventbriteStrategy),
        ("https://www.eventbrite.co.uk/e/something-2", EventbriteStrategy),
        ("https://lu.ma/prompting", LumaStrategy),
        ("https://luma.com/prompting", LumaStrategy),
        ("https://gdg.community.dev/events/details/google-gdg-pune-presents-devfest/", GDGStrategy),
        ("https://www.bevy.com/events/details/cloud-native-night/", BevyStrategy),
        ("https://ethindia2025.devfolio.co/", DevfolioStrategy),
        ("https://ai-agents.devpost.com/", DevpostStrategy),
        ("https://hack2skill.com/event/genai-sprint", Hack2SkillStrategy),
        ("https://unstop.com/hackathons/codesprint-2025", UnstopStrategy),
        ("https://www.ibm.com/events/quantum-seminar", IBMStrategy),
        ("HTTPS://WWW.MEETUP.COM/Group/events/1/", MeetupStrategy),
    ])
    def test_known_platforms(self, url: str, expected: type):
        assert strategy_class_for(url) is expected

    @pytest.mark.parametrize("url", [
        "https://random-blog.example.com/posts/meetup-recap",
        "not a url",
        "",
        None,
        "http://[::1",
    ])
    def test_unknown_or_malformed_gets_generic(self, url):
        """Never raises; anything unrecognized falls back to Generic."""
        assert strategy_class_for(url) is GenericStrategy

    def test_select_strategy_binds_manager(self, manager, settings):
        strategy = select_strategy("https://gdg.community.dev/events/x/", manager)
        assert isinstance(strategy, GDGStrategy)
        assert strategy.manager is manager
        assert strategy.settings is settings


class TestGDG:
    """GDG pages prefer JSON-LD but keep the DOM title."""

    URL = "https://gdg.community.dev/events/details/google-gdg-pune-presents-devfest-pune-2025/"

    def test_structured_date_without_dom_date(self, manager, load_fixture):
        """JSON-LD startDate survives normalization as the exact instant."""
        bag = parse(GDGStrategy, manager, load_fixture("gdg_event.html"), self.URL)
        event = normalize_event(bag, self.URL, category=GDGStrategy.category)
        assert event.event_date == datetime(2025, 10, 4, 10, 0, tzinfo=IST)
        assert event.event_date_estimated is False

    def test_fields(self, manager, load_fixture):
        bag = parse(GDGStrategy, manager, load_fixture("gdg_event.html"), self.URL)
        assert bag["title"] == "DevFest Pune 2025"
        assert bag["organizer"] == "GDG Pune"
        assert bag["location"] == "Pune Tech Park"
        assert bag["full_address"] == "12 MG Road, Pune, IN"
        assert bag["attendee_count"] == "120"
        assert bag["registration_type"] == "RSVP Required"
        assert bag["price"] == "Free"
        assert bag["topics"] == ["android", "flutter", "cloud"]
        assert bag["image_url"].endswith("devfest-pune-banner.png")
        assert bag["category"] == "Tech Talk"

    @pytest.mark.parametrize("url,expected", [
        ("https://gdg.community.dev/gdg-new-delhi/", "GDG NEW DELHI"),
        ("https://gdg.community.dev/events/details/x/", "Google Developer Group"),
    ])
    def test_chapter_organizer(self, url: str, expected: str):
        assert chapter_organizer(url) == expected


class TestMeetup:
    """Meetup pages: DOM first, JSON-LD and metadata fill gaps."""

    URL = "https://www.meetup.com/python-pune/events/301234567/"

    def test_fields(self, manager, load_fixture):
        bag = parse(MeetupStrategy, manager, load_fixture("meetup_event.html"), self.URL)
        assert bag["title"] == "Async Deep Dive with Python"
        assert bag["start_date"] == "2025-11-12T18:30:00+05:30"
        assert bag["location"] == "Thoughtworks Pune"
        assert bag["full_address"] == "Panchshil Tech Park, Yerwada, Pune"
        assert bag["organizer"] == "Python Pune"
        assert bag["image_url"] == "https://secure.meetupstatic.com/photos/event/cover.jpeg"
        assert bag["price"] == "Free"
        assert bag["attendee_count"] == "38"
        assert bag["agenda"] == "6:30 PM talks, 8:00 PM networking"
        assert bag["registration_type"] == "RSVP Required"
        assert bag["category"] == "Meetup"

    def test_normalized(self, manager, load_fixture):
        bag = parse(MeetupStrategy, manager, load_fixture("meetup_event.html"), self.URL)
        event = normalize_event(bag, self.URL, category=MeetupStrategy.category)
        assert event.platform_label == "Meetup"
        assert event.category == EventCategory.MEETUP
        assert event.attendee_count == 38
        assert "python" in event.tags

    @pytest.mark.parametrize("url,expected", [
        ("https://www.meetup.com/python-pune/events/301234567/", "Python Pune"),
        ("https://www.meetup.com/find/", ""),
    ])
    def test_group_slug_organizer(self, url: str, expected: str):
        assert group_slug_organizer(url) == expected

    def test_date_text_scan(self):
        from bs4 import BeautifulSoup

        soup = BeautifulSoup("<p>Hosted by Python Pune</p><p>Wednesday, November 12</p>", "lxml")
        assert date_text_scan(soup) == "Wednesday, November 12"

    def test_structured_organizer_beats_group_slug(self, manager):
        html = (
            '<html><head><script type="application/ld+json">'
            '{"@type": "Event", "name": "Pandas Night",'
            ' "organizer": {"@type": "Organization", "name": "PyData Pune"}}'
            "</script></head><body><h1>Pandas Night</h1></body></html>"
        )
        bag = parse(MeetupStrategy, manager, html, self.URL)
        assert bag["organizer"] == "PyData Pune"

    def test_group_slug_when_no_organizer_anywhere(self, manager):
        bag = parse(MeetupStrategy, manager, "<html><body><h1>Pandas Night</h1></body></html>", self.URL)
        assert bag["organizer"] == "Python Pune"


class TestBevy:
    URL = "https://www.bevy.com/events/details/cloud-native-night/"

    def test_snap_labels(self, manager, load_fixture):
        bag = parse(BevyStrategy, manager, load_fixture("bevy_event.html"), self.URL)
        assert bag["title"] == "Cloud Native Night"
        assert bag["start_date"] == "Saturday, October 4, 2025 10:00 AM"
        assert bag["end_date"] == "Saturday, October 4, 2025 1:00 PM"
        assert bag["location"] == "WeWork Galaxy, Bengaluru"
        assert bag["organizer"] == "CNCF Bengaluru"
        assert bag["image_url"] == "https://www.bevy.com/media/banner.jpg"

    def test_normalized_dates(self, manager, load_fixture):
        bag = parse(BevyStrategy, manager, load_fixture("bevy_event.html"), self.URL)
        event = normalize_event(bag, self.URL, category=BevyStrategy.category)
        assert event.event_date == datetime(2025, 10, 4, 10, 0, tzinfo=UTC)
        assert event.end_date == datetime(2025, 10, 4, 13, 0, tzinfo=UTC)


class TestDevpost:
    URL = "https://ai-agents.devpost.com/"

    def test_fields(self, manager, load_fixture):
        bag = parse(DevpostStrategy, manager, load_fixture("devpost_hackathon.html"), self.URL)
        assert bag["title"] == "AI Agents Hackathon"
        assert bag["description"].startswith("Build autonomous agents")
        assert bag["start_date"] == "Nov 30, 2025 @ 5:00pm GMT+5:30"
        assert bag["location"] == "Online"
        assert bag["full_address"] == "Virtual Event"
        assert bag["organizer"] == "Google Cloud"
        assert bag["prize"] == "$25000"
        assert bag["attendee_count"] == "1,204"
        assert bag["image_url"] == "https://ai-agents.devpost.com/images/hero.png"
        assert {"ai", "machine learning", "beginner friendly"} <= set(bag["topics"])

    def test_deadline_becomes_event_date(self, manager, load_fixture):
        bag = parse(DevpostStrategy, manager, load_fixture("devpost_hackathon.html"), self.URL)
        event = normalize_event(bag, self.URL, category=DevpostStrategy.category)
        assert event.event_date == datetime(2025, 11, 30, 17, 0, tzinfo=IST)
        assert event.attendee_count == 1204
        assert event.category == EventCategory.HACKATHON


class TestUnstop:
    URL = "https://unstop.com/hackathons/codesprint-2025"

    def test_fields(self, manager, load_fixture):
        bag = parse(UnstopStrategy, manager, load_fixture("unstop_event.html"), self.URL)
        assert bag["title"] == "CodeSprint 2025"
        assert bag["description"].startswith("CodeSprint is a 48 hour Hackathon")
        assert bag["start_date"] == "04 Oct 25, 10:00 AM IST"
        assert bag["end_date"] == "06 Oct 25, 06:00 PM IST"
        assert bag["location"] == "Bengaluru, India"
        assert bag["organizer"] == "IIT Bombay"
        assert bag["price"] == "Free"
        assert bag["prize"] == "₹1,00,000"
        assert bag["topics"] == ["ai", "web3"]
        assert bag["image_url"].endswith("codesprint-banner.png")

    def test_normalized_dates(self, manager, load_fixture):
        bag = parse(UnstopStrategy, manager, load_fixture("unstop_event.html"), self.URL)
        event = normalize_event(bag, self.URL, category=UnstopStrategy.category)
        assert event.event_date == datetime(2025, 10, 4, 10, 0, tzinfo=IST)
        assert event.end_date == datetime(2025, 10, 6, 18, 0, tzinfo=IST)

    def test_four_digit_year(self, manager):
        html = "<html><body><h1>Sprint</h1><p>Start: 04 Oct 2025</p></body></html>"
        bag = parse(UnstopStrategy, manager, html, self.URL)
        assert bag["start_date"] == "04 Oct 2025"

        event = normalize_event(bag, self.URL, category=UnstopStrategy.category)
        assert event.event_date == datetime(2025, 10, 4, tzinfo=UTC)
        assert not event.event_date_estimated


class TestEventbrite:
    URL = "https://www.eventbrite.com/e/pycon-india-2025-tickets-1234567890"

    def test_structured_first(self, manager, load_fixture):
        bag = parse(EventbriteStrategy, manager, load_fixture("eventbrite_event.html"), self.URL)
        assert bag["title"] == "PyCon India 2025"
        assert bag["start_date"] == "2025-09-12T09:00:00+05:30"
        assert bag["location"] == "NIMHANS Convention Centre"
        assert bag["price"] == "Free"
        # Not in JSON-LD, filled from the DOM
        assert bag["organizer"] == "PyCon India Team"
        assert bag["category"] == "Conference"


class TestLuma:
    URL = "https://lu.ma/prompting"

    def test_next_data_fallback(self, manager, load_fixture):
        bag = parse(LumaStrategy, manager, load_fixture("luma_event.html"), self.URL)
        assert bag["title"] == "Prompt Engineering Workshop"
        assert bag["description"] == "Hands-on session on prompting large language models."
        assert bag["start_date"] == "2025-11-20T13:30:00.000Z"
        assert bag["location"] == "San Francisco"
        assert bag["full_address"] == "548 Market St, San Francisco, CA 94104"
        assert bag["organizer"] == "Maya Chen, Leo Park"
        assert bag["image_url"] == "https://images.lumacdn.com/event-covers/prompting.png"
        assert bag["category"] == "Workshop"

    def test_find_event_payload(self):
        data = {"props": {"items": [{"x": 1}, {"name": "E", "start_at": "2025-01-01"}]}}
        assert find_event_payload(data)["name"] == "E"
        assert find_event_payload({"props": {}}) is None


class TestIBM:
    URL = "https://www.ibm.com/events/quantum-seminar"

    def test_fields(self, manager, load_fixture):
        bag = parse(IBMStrategy, manager, load_fixture("ibm_event.html"), self.URL)
        assert bag["title"] == "Quantum Computing Seminar"
        assert bag["start_date"] == "October 15, 2025 10:00 AM"
        assert bag["end_date"] == "2025-10-15T13:00:00+00:00"
        assert bag["location"] == "IBM Research Lab"
        assert bag["full_address"] == "IBM Research Lab, Bangalore, India"
        assert bag["organizer"] == "IBM Quantum"
        assert bag["price"] == "Free"
        assert bag["image_url"] == "https://www.ibm.com/content/dam/seminar-hero.jpg"

    def test_overnight_end_rolls_over(self, manager):
        html = "<h1>Night Lab</h1><p>March 3, 2026</p><p>10:00 PM - 1:00 AM</p>"
        bag = parse(IBMStrategy, manager, html, self.URL)
        assert bag["end_date"] == "2026-03-04T01:00:00+00:00"

    def test_structured_only_page(self, manager):
        """JSON-LD fills the title and price when the DOM has neither."""
        html = (
            '<html><head><script type="application/ld+json">'
            '{"@type": "Event", "name": "Quantum Summit", "offers": {"price": 0}}'
            "</script></head><body></body></html>"
        )
        bag = parse(IBMStrategy, manager, html, self.URL)
        assert bag["title"] == "Quantum Summit"
        assert bag["price"] == "Free"

    def test_empty_page_defaults(self, manager):
        bag = parse(IBMStrategy, manager, "<html><body></body></html>", self.URL)
        assert bag["title"] == "Unknown"
        assert bag["price"] == "Paid"
        assert bag["organizer"] == "IBM"


class TestDevfolio:
    URL = "https://ethindia2025.devfolio.co/"

    def test_fields(self, manager, load_fixture):
        bag = parse(DevfolioStrategy, manager, load_fixture("devfolio_event.html"), self.URL)
        assert bag["title"] == "ETHIndia 2025"
        assert bag["start_date"] == "Dec 5, 2025"
        assert bag["end_date"] == "Dec 7, 2025"
        assert bag["location"] == "Bengaluru, India"
        assert bag["organizer"] == "Devfolio"

    @pytest.mark.parametrize("text,expected", [
        ("Dec 5 - 7, 2025", ("Dec 5, 2025", "Dec 7, 2025")),
        ("Oct 30 - Nov 2, 2025", ("Oct 30, 2025", "Nov 2, 2025")),
        ("Jan 10, 2026", ("Jan 10, 2026", "")),
        ("", ("", "")),
    ])
    def test_split_date_range(self, text: str, expected: tuple):
        assert split_date_range(text) == expected


class TestHack2Skill:
    URL = "https://hack2skill.com/event/genai-sprint"

    def test_fields(self, manager):
        html = """
        <h1>GenAI Sprint</h1>
        <div><h2>Overview</h2><p>Build generative AI apps on cloud credits in a weekend sprint with mentors.</p></div>
        <h3>Timeline</h3>
        <p>Registrations open: January 5, 2026</p>
        <p>Finale: February 14, 2026</p>
        <p>Total cash prize worth ₹5 Lakhs</p>
        <a href="/register">Register now</a>
        """
        bag = parse(Hack2SkillStrategy, manager, html, self.URL)
        assert bag["title"] == "GenAI Sprint"
        assert bag["description"].startswith("Build generative AI apps")
        assert bag["start_date"] == "January 5, 2026"
        assert bag["end_date"] == "February 14, 2026"
        assert bag["prize"] == "₹5 Lakhs"
        assert bag["registration_type"] == "Registration Required"
        assert bag["location"] == "Online"
        assert bag["organizer"] == "Hack2Skill"


class TestGenericAndPartialPages:
    """Pages without a dedicated strategy, or with missing evidence."""

    def test_no_date_anywhere(self, manager, load_fixture):
        """No date yields an estimated current time and a placeholder location."""
        url = "https://random-blog.example.com/reading-group"
        bag = parse(GenericStrategy, manager, load_fixture("generic_no_date.html"), url)

        before = datetime.now(UTC)
        event = normalize_event(bag, url)
        after = datetime.now(UTC)

        assert before <= event.event_date <= after
        assert event.event_date_estimated is True
        assert event.location == "TBD"
        assert event.description == ""
        assert event.title == "Reading group notes"

    def test_malformed_jsonld_alongside_valid(self, manager, load_fixture):
        """The valid JSON-LD block still fills the fields."""
        url = "https://rust-berlin.example.org/events/december"
        bag = parse(GenericStrategy, manager, load_fixture("malformed_jsonld.html"), url)
        assert bag["title"] == "Rust Meetup Berlin"
        assert bag["location"] == "c-base"
        assert bag["full_address"] == "Rungestrasse 20, 10179 Berlin, Germany"

        event = normalize_event(bag, url)
        assert event.event_date == datetime(2025, 12, 3, 19, 0, tzinfo=timezone(timedelta(hours=1)))

    def test_empty_page_gets_sentinels(self, manager):
        bag = parse(GenericStrategy, manager, "<html><body></body></html>", "https://x.example.com/")
        assert bag["title"] == "Unknown"
        assert bag["description"] == "No description available"
        assert bag["location"] == "TBD"

    def test_hackathon_defaults(self, manager):
        bag = parse(DevpostStrategy, manager, "<html><body></body></html>", "https://x.devpost.com/")
        assert bag["location"] == "Online"
        assert bag["organizer"] == "Devpost"
        assert bag["category"] == "Hackathon"
