"""Tests for the evidence channels and Schema.org mapping."""

import asyncio

import pytest

from event_pipeline.extractors.evidence import (
    PageEvidence,
    extract_meta_tags,
    extract_next_data,
    extract_rendered_html,
    extract_structured_data,
)
from event_pipeline.extractors.structured import (
    event_fields_from_structured,
    fields_from_meta,
    find_event_object,
    format_address,
    price_from_offers,
)


class TestStructuredData:
    """Tests for JSON-LD collection."""

    def test_malformed_block_skipped(self, load_fixture):
        """A broken block does not hide the valid one next to it."""
        blocks = extract_structured_data(load_fixture("malformed_jsonld.html"))
        assert len(blocks) == 1
        assert blocks[0]["name"] == "Rust Meetup Berlin"

    def test_top_level_array_flattened(self):
        html = """<script type="application/ld+json">
        [{"@type": "Organization", "name": "Org"}, {"@type": "Event", "name": "Talk"}]
        </script>"""
        blocks = extract_structured_data(html)
        assert [b["name"] for b in blocks] == ["Org", "Talk"]

    def test_no_blocks(self):
        assert extract_structured_data("<html><body><p>hi</p></body></html>") == []

    def test_event_inside_graph(self):
        blocks = [{"@graph": [{"@type": "WebPage"}, {"@type": "Event", "name": "In graph"}]}]
        assert find_event_object(blocks)["name"] == "In graph"

    def test_list_valued_type(self):
        blocks = [{"@type": ["Thing", "Hackathon"], "name": "Hack"}]
        assert find_event_object(blocks)["name"] == "Hack"

    def test_no_event(self):
        assert find_event_object([{"@type": "Organization"}]) is None
        assert event_fields_from_structured([{"@type": "Organization"}]) == {}


class TestSchemaMapping:
    """Tests for mapping a Schema.org Event onto raw fields."""

    def test_full_event(self):
        blocks = [{
            "@type": "Event",
            "name": "DevFest",
            "startDate": "2025-10-04T10:00:00+05:30",
            "image": [{"url": "https://example.com/a.png"}],
            "organizer": [{"@type": "Organization", "name": "GDG Pune"}],
            "location": {
                "@type": "Place",
                "name": "Tech Park",
                "address": {"streetAddress": "12 MG Road", "addressLocality": "Pune"},
            },
            "offers": {"price": "499", "priceCurrency": "INR"},
            "keywords": "android, flutter",
        }]
        fields = event_fields_from_structured(blocks)
        assert fields["title"] == "DevFest"
        assert fields["start_date"] == "2025-10-04T10:00:00+05:30"
        assert fields["image_url"] == "https://example.com/a.png"
        assert fields["organizer"] == "GDG Pune"
        assert fields["location"] == "Tech Park"
        assert fields["full_address"] == "12 MG Road, Pune"
        assert fields["price"] == "499 INR"
        assert fields["topics"] == ["android", "flutter"]

    def test_virtual_location(self):
        blocks = [{"@type": "Event", "name": "Webinar", "location": {"@type": "VirtualLocation", "url": "https://zoom.us/j/1"}}]
        assert event_fields_from_structured(blocks)["location"] == "Online"

    def test_online_attendance_mode(self):
        blocks = [{
            "@type": "Event",
            "name": "Webinar",
            "eventAttendanceMode": "https://schema.org/OnlineEventAttendanceMode",
        }]
        assert event_fields_from_structured(blocks)["location"] == "Online"

    @pytest.mark.parametrize("offers,expected", [
        ({"price": 0}, "Free"),
        ({"price": "0.00", "priceCurrency": "USD"}, "Free"),
        ([{"price": "25", "priceCurrency": "USD"}], "25 USD"),
        ({"lowPrice": "10", "priceCurrency": "EUR"}, "10 EUR"),
        ({}, ""),
        (None, ""),
    ])
    def test_price_from_offers(self, offers, expected: str):
        assert price_from_offers(offers) == expected

    @pytest.mark.parametrize("address,expected", [
        ("Rungestrasse 20, Berlin", "Rungestrasse 20, Berlin"),
        ({"addressLocality": "Pune", "addressCountry": {"name": "India"}}, "Pune, India"),
        (None, ""),
    ])
    def test_format_address(self, address, expected: str):
        assert format_address(address) == expected


class TestMetaTags:
    """Tests for OpenGraph and standard metadata."""

    def test_meta_and_title(self):
        html = """<html><head>
        <title> Event Page </title>
        <meta property="og:title" content="OG Title">
        <meta name="description" content="Plain description">
        <meta property="og:image" content="https://example.com/og.png">
        </head></html>"""
        meta = extract_meta_tags(html)
        assert meta["title"] == "Event Page"
        assert meta["og:title"] == "OG Title"

        fields = fields_from_meta(meta)
        assert fields["title"] == "OG Title"
        assert fields["description"] == "Plain description"
        assert fields["image_url"] == "https://example.com/og.png"

    def test_event_start_time_property(self):
        fields = fields_from_meta({"event:start_time": "2025-10-04T10:00:00Z", "keywords": "ai, web"})
        assert fields["start_date"] == "2025-10-04T10:00:00Z"
        assert fields["topics"] == ["ai", "web"]


class TestPageEvidence:
    """Tests for the parsed page bundle."""

    def test_collects_channels(self, load_fixture):
        page = PageEvidence.from_html(load_fixture("luma_event.html"), "https://lu.ma/prompting")
        assert page.meta["og:title"] == "Prompt Engineering Workshop"
        assert "props" in page.next_data
        # Script payloads never leak into the visible text
        assert "start_at" not in page.text
        assert "Prompt Engineering Workshop" in page.lines

    def test_meta_value_first_non_empty(self):
        page = PageEvidence.from_html('<meta property="og:title" content="">'
                                      '<meta name="twitter:title" content="T">', "https://x.test/")
        assert page.meta_value("og:title", "twitter:title") == "T"

    def test_next_data_missing_or_broken(self):
        assert extract_next_data("<html></html>") == {}
        assert extract_next_data('<script id="__NEXT_DATA__">{oops</script>') == {}

    def test_rendered_html_failure_is_empty(self):
        """A session that cannot serialize its page yields ""."""

        class BrokenSession:
            async def content(self):
                raise RuntimeError("Target closed")

        assert asyncio.run(extract_rendered_html(BrokenSession())) == ""
