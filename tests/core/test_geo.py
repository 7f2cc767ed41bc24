"""Unit tests for geographic calculations.

Pure function tests - no mocks needed, fast execution.
"""

import math

import pytest

from event_discovery.core.errors import ErrorKind, InvalidQuery
from event_discovery.core.event import Event, EventDate, TextPair, Venue
from event_discovery.core.geo import (
    Coordinate,
    RADIUS_OPTIONS_MILES,
    calculate_distance,
    distance_between,
    distance_to_venue,
    has_moved,
    validate_search_area,
)


SF = Coordinate(37.7749, -122.4194)
LA = Coordinate(34.0522, -118.2437)


def make_event(latitude=None, longitude=None):
    start = EventDate(timezone="UTC", local="2024-12-14T19:30:00", utc="")
    return Event(
        id="e1",
        name=TextPair(text="Show", html="Show"),
        description=TextPair(text="", html=""),
        start=start,
        end=start,
        venue=Venue(id="v1", name="Hall", latitude=latitude, longitude=longitude),
    )


class TestCalculateDistance:
    """Tests for calculate_distance() Haversine implementation."""

    def test_same_point_returns_zero(self):
        """Distance from point to itself should be zero."""
        distance = calculate_distance(37.7749, -122.4194, 37.7749, -122.4194)
        assert distance == pytest.approx(0.0, abs=0.001)

    def test_known_distance_sf_to_la(self):
        """SF to LA should be approximately 559 km."""
        distance = calculate_distance(SF.latitude, SF.longitude, LA.latitude, LA.longitude)
        assert distance == pytest.approx(559, rel=0.02)

    def test_distance_is_symmetric(self):
        """Distance A->B should equal distance B->A."""
        assert distance_between(SF, LA) == pytest.approx(distance_between(LA, SF))


class TestCoordinate:
    """Tests for Coordinate."""

    def test_as_latlong(self):
        assert Coordinate(40.7128, -74.006).as_latlong() == "40.7128,-74.006"

    def test_value_equality(self):
        assert Coordinate(1.0, 2.0) == Coordinate(1.0, 2.0)


class TestHasMoved:
    """Tests for has_moved()."""

    def test_first_fix_is_a_change(self):
        assert has_moved(None, SF) is True

    def test_same_point_is_not_a_change(self):
        assert has_moved(SF, Coordinate(37.7749, -122.4194)) is False

    def test_any_difference_counts_without_threshold(self):
        assert has_moved(SF, Coordinate(37.7750, -122.4194)) is True

    def test_small_move_under_threshold(self):
        """~11 m of movement is below a 1 km threshold."""
        assert has_moved(SF, Coordinate(37.7750, -122.4194), threshold_km=1.0) is False

    def test_large_move_over_threshold(self):
        assert has_moved(SF, LA, threshold_km=1.0) is True


class TestDistanceToVenue:
    """Tests for distance_to_venue()."""

    def test_parses_string_coordinates(self):
        event = make_event("34.0522", "-118.2437")
        assert distance_to_venue(SF, event) == pytest.approx(559, rel=0.02)

    def test_missing_location_returns_none(self):
        assert distance_to_venue(SF, make_event()) is None

    def test_garbage_location_returns_none(self):
        assert distance_to_venue(SF, make_event("north", "-118.2")) is None


class TestValidateSearchArea:
    """Tests for validate_search_area()."""

    def test_valid_area_passes(self):
        validate_search_area(SF, 10, 0)

    @pytest.mark.parametrize("radius", RADIUS_OPTIONS_MILES)
    def test_offered_radii_pass(self, radius):
        validate_search_area(SF, radius)

    def test_boundary_coordinates_pass(self):
        validate_search_area(Coordinate(90.0, 180.0), 5)
        validate_search_area(Coordinate(-90.0, -180.0), 5)

    @pytest.mark.parametrize(
        "coordinate",
        [
            Coordinate(90.1, 0.0),
            Coordinate(-91.0, 0.0),
            Coordinate(0.0, 180.5),
            Coordinate(0.0, -181.0),
            Coordinate(math.nan, 0.0),
            Coordinate(0.0, math.inf),
            Coordinate("37.7", "-122.4"),
        ],
    )
    def test_bad_coordinate_raises(self, coordinate):
        with pytest.raises(InvalidQuery):
            validate_search_area(coordinate, 10)

    @pytest.mark.parametrize("radius", [0, -5, math.nan, "10", True])
    def test_bad_radius_raises(self, radius):
        with pytest.raises(InvalidQuery):
            validate_search_area(SF, radius)

    def test_negative_page_raises(self):
        with pytest.raises(InvalidQuery):
            validate_search_area(SF, 10, -1)

    def test_error_kind_is_invalid_query(self):
        with pytest.raises(InvalidQuery) as exc_info:
            validate_search_area(SF, 0)
        assert exc_info.value.kind == ErrorKind.INVALID_QUERY
