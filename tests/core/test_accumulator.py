"""Unit tests for page accumulation.

Pure in-memory tests - no mocks needed.
"""

import pytest

from event_discovery.core.accumulator import PageAccumulator
from event_discovery.core.event import Event, EventDate, TextPair, Venue


def make_event(event_id: str, name: str | None = None) -> Event:
    """Create a minimal event."""
    start = EventDate(timezone="UTC", local="2024-12-14T19:30:00", utc="2024-12-14T19:30:00Z")
    label = name or f"Event {event_id}"
    return Event(
        id=event_id,
        name=TextPair(text=label, html=label),
        description=TextPair(text="Event at Hall", html="Event at Hall"),
        start=start,
        end=start,
        venue=Venue(id="v1", name="Hall"),
    )


@pytest.fixture
def accumulator():
    return PageAccumulator()


class TestAppend:
    """Tests for PageAccumulator.append()."""

    def test_appends_in_server_order(self, accumulator):
        """Events keep the order they were appended in."""
        accumulator.append([make_event("a"), make_event("b")])
        accumulator.append([make_event("c")])

        assert [e.id for e in accumulator.snapshot()] == ["a", "b", "c"]

    def test_returns_number_added(self, accumulator):
        assert accumulator.append([make_event("a"), make_event("b")]) == 2
        assert accumulator.append([make_event("b"), make_event("c")]) == 1

    def test_drops_duplicates_across_pages(self, accumulator):
        """A re-seen id keeps its first-seen position and data."""
        accumulator.append([make_event("a", "First"), make_event("b")])
        accumulator.append([make_event("c"), make_event("a", "Second")])

        events = accumulator.snapshot()

        assert [e.id for e in events] == ["a", "b", "c"]
        assert events[0].name.text == "First"

    def test_drops_duplicates_within_page(self, accumulator):
        accumulator.append([make_event("a"), make_event("a"), make_event("b")])
        assert [e.id for e in accumulator.snapshot()] == ["a", "b"]

    def test_never_contains_duplicate_ids(self, accumulator):
        """No sequence of pages produces duplicate ids."""
        pages = [
            ["a", "b", "c"],
            ["c", "d"],
            ["a", "e", "e"],
            [],
            ["f", "b"],
        ]
        for page in pages:
            accumulator.append([make_event(i) for i in page])

        ids = [e.id for e in accumulator.snapshot()]

        assert len(ids) == len(set(ids))
        assert ids == ["a", "b", "c", "d", "e", "f"]


class TestReset:
    """Tests for PageAccumulator.reset()."""

    def test_clears_events(self, accumulator):
        accumulator.append([make_event("a")])
        accumulator.reset()

        assert accumulator.snapshot() == ()
        assert accumulator.is_empty
        assert len(accumulator) == 0

    def test_forgets_seen_ids(self, accumulator):
        """After reset a previously seen id can be appended again."""
        accumulator.append([make_event("a")])
        accumulator.reset()

        assert accumulator.append([make_event("a")]) == 1


class TestSnapshot:
    """Tests for PageAccumulator.snapshot()."""

    def test_snapshot_is_not_affected_by_later_appends(self, accumulator):
        """A held snapshot never observes future mutation."""
        accumulator.append([make_event("a")])
        held = accumulator.snapshot()

        accumulator.append([make_event("b")])
        accumulator.reset()

        assert [e.id for e in held] == ["a"]

    def test_snapshot_is_immutable(self, accumulator):
        accumulator.append([make_event("a")])
        assert isinstance(accumulator.snapshot(), tuple)
