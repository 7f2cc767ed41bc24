"""Unit tests for the favorite overlay.

Pure function tests - no mocks needed.
"""

from event_discovery.core.event import Event, EventDate, TextPair, Venue
from event_discovery.core.favorites import (
    apply_pending_favorites,
    overlay_favorites,
    toggled_state,
)


def make_event(event_id: str, favorite: bool = False) -> Event:
    start = EventDate(timezone="UTC", local="2024-12-14T19:30:00", utc="")
    return Event(
        id=event_id,
        name=TextPair(text=event_id, html=event_id),
        description=TextPair(text="", html=""),
        start=start,
        end=start,
        venue=Venue(id="v1", name="Hall"),
        is_favorite=favorite,
    )


def flags(events):
    return [(e.id, e.is_favorite) for e in events]


class TestOverlayFavorites:
    """Tests for overlay_favorites()."""

    def test_marks_members_as_favorite(self):
        events = [make_event("a"), make_event("b"), make_event("c")]

        result = overlay_favorites(events, frozenset({"b"}))

        assert flags(result) == [("a", False), ("b", True), ("c", False)]

    def test_clears_stale_flags(self):
        """Flags not backed by the set are cleared."""
        events = [make_event("a", favorite=True)]

        result = overlay_favorites(events, frozenset())

        assert flags(result) == [("a", False)]

    def test_preserves_order(self):
        events = [make_event(i) for i in ["z", "a", "m"]]

        result = overlay_favorites(events, frozenset({"a"}))

        assert [e.id for e in result] == ["z", "a", "m"]

    def test_is_idempotent(self):
        """overlay(overlay(L, F), F) == overlay(L, F)."""
        events = [make_event("a"), make_event("b", favorite=True), make_event("c")]
        favorites = frozenset({"a", "c"})

        once = overlay_favorites(events, favorites)
        twice = overlay_favorites(once, favorites)

        assert flags(twice) == flags(once)

    def test_does_not_mutate_input(self):
        events = [make_event("a")]

        overlay_favorites(events, frozenset({"a"}))

        assert events[0].is_favorite is False

    def test_unchanged_events_are_reused(self):
        """Events whose flag already matches are passed through as-is."""
        event = make_event("a")

        result = overlay_favorites([event], frozenset())

        assert result[0] is event

    def test_empty_list(self):
        assert overlay_favorites([], frozenset({"a"})) == ()


class TestApplyPendingFavorites:
    """Tests for apply_pending_favorites()."""

    def test_no_pending_returns_stored_set(self):
        stored = frozenset({"a"})
        assert apply_pending_favorites(stored, {}) is stored

    def test_pending_add(self):
        assert apply_pending_favorites(frozenset({"a"}), {"b": True}) == {"a", "b"}

    def test_pending_remove(self):
        assert apply_pending_favorites(frozenset({"a", "b"}), {"a": False}) == {"b"}


class TestToggledState:
    """Tests for toggled_state()."""

    def test_toggle_on(self):
        assert toggled_state("a", frozenset()) is True

    def test_toggle_off(self):
        assert toggled_state("a", frozenset({"a"})) is False
