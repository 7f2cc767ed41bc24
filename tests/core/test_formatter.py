"""Unit tests for event formatting.

Pure function tests - verify display strings and JSON payloads.
"""

import pytest

from event_discovery.core.errors import ErrorKind
from event_discovery.core.event import (
    Classification,
    Event,
    EventDate,
    TextPair,
    Venue,
    VenueAddress,
)
from event_discovery.core.formatter import (
    format_event_payload,
    format_event_summary,
    format_local_datetime,
    format_snapshot_payload,
)
from event_discovery.core.geo import Coordinate
from event_discovery.core.state import DiscoverySnapshot, EngineState


@pytest.fixture
def sample_event():
    """Create a sample event for testing."""
    start = EventDate(
        timezone="America/Los_Angeles",
        local="2024-12-02T19:30:00",
        utc="2024-12-03T03:30:00Z",
    )
    return Event(
        id="evt-1",
        name=TextPair(text="Jazz Night", html="Jazz Night"),
        description=TextPair(text="Event at The Fillmore", html="Event at The Fillmore"),
        start=start,
        end=start,
        venue=Venue(
            id="ven-1",
            name="The Fillmore",
            address=VenueAddress(
                line1="1805 Geary Blvd",
                city="San Francisco",
                region="CA",
                display="1805 Geary Blvd, San Francisco, CA",
            ),
            latitude="37.7840",
            longitude="-122.4330",
        ),
        classification=Classification(segment="Music", genre="Jazz"),
        is_favorite=True,
    )


class TestFormatLocalDatetime:
    """Tests for format_local_datetime()."""

    def test_evening_time(self):
        assert format_local_datetime("2024-12-02T19:30:00") == "December 2, 2024 at 7:30 PM"

    def test_midnight(self):
        assert format_local_datetime("2024-01-15T00:00:00") == "January 15, 2024 at 12:00 AM"

    def test_unparseable_returns_none(self):
        assert format_local_datetime("T19:30:00") is None


class TestFormatEventSummary:
    """Tests for format_event_summary()."""

    def test_includes_name_venue_and_date(self, sample_event):
        summary = format_event_summary(sample_event)
        assert summary == "Jazz Night - The Fillmore (December 2, 2024 at 7:30 PM)"


class TestFormatEventPayload:
    """Tests for format_event_payload()."""

    def test_contains_display_fields(self, sample_event):
        payload = format_event_payload(sample_event)

        assert payload["id"] == "evt-1"
        assert payload["name"] == "Jazz Night"
        assert payload["venue"]["address"] == "1805 Geary Blvd, San Francisco, CA"
        assert payload["event_type"] == "Music"
        assert payload["genre"] == "Jazz"
        assert payload["subgenre"] == "Unknown Subgenre"
        assert payload["is_favorite"] is True
        assert payload["start"]["utc"] == "2024-12-03T03:30:00Z"
        assert "distance_km" not in payload

    def test_adds_distance_with_origin(self, sample_event):
        payload = format_event_payload(sample_event, Coordinate(37.7749, -122.4194))
        assert payload["distance_km"] == pytest.approx(1.55, abs=0.2)


class TestFormatSnapshotPayload:
    """Tests for format_snapshot_payload()."""

    def test_ready_snapshot(self, sample_event):
        snapshot = DiscoverySnapshot(
            events=(sample_event,),
            state=EngineState.READY,
            has_more=True,
            coordinate=Coordinate(37.7749, -122.4194),
            radius_miles=10,
            epoch_id=1,
        )

        payload = format_snapshot_payload(snapshot)

        assert payload["state"] == "ready"
        assert payload["is_loading"] is False
        assert payload["has_more"] is True
        assert payload["error"] is None
        assert payload["coordinate"] == {"latitude": 37.7749, "longitude": -122.4194}
        assert payload["count"] == 1
        assert payload["events"][0]["id"] == "evt-1"

    def test_failed_snapshot(self):
        snapshot = DiscoverySnapshot(
            state=EngineState.FAILED,
            error=ErrorKind.TRANSPORT_FAILURE,
        )

        payload = format_snapshot_payload(snapshot)

        assert payload["state"] == "failed"
        assert payload["error"] == "transport_failure"
        assert payload["coordinate"] is None
        assert payload["events"] == []
