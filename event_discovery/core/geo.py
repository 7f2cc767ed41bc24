"""Geographic calculations - Pure functions.

This module provides coordinates, search-area validation and distance
calculations for event discovery. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from event_discovery.core.errors import InvalidQuery

if TYPE_CHECKING:
    from event_discovery.core.event import Event


# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Radius choices offered to users, in miles
RADIUS_OPTIONS_MILES = (5, 10, 25, 50, 100)


@dataclass(frozen=True)
class Coordinate:
    """A geographic point.

    Attributes:
        latitude: Latitude in degrees
        longitude: Longitude in degrees
    """
    latitude: float
    longitude: float

    def as_latlong(self) -> str:
        """Return the "lat,lon" form used in catalog queries."""
        return f"{self.latitude},{self.longitude}"


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_between(a: Coordinate, b: Coordinate) -> float:
    """Distance in kilometers between two coordinates."""
    return calculate_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def has_moved(
    previous: Coordinate | None,
    current: Coordinate,
    threshold_km: float = 0.0,
) -> bool:
    """Check whether a new location fix counts as a location change.

    Pure function.

    Args:
        previous: Last known coordinate (None if there was none)
        current: Newly reported coordinate
        threshold_km: Minimum movement to count as a change; 0 means any
            difference at all

    Returns:
        True if the location changed
    """
    if previous is None:
        return True

    if threshold_km <= 0:
        return previous != current

    return distance_between(previous, current) >= threshold_km


def distance_to_venue(coordinate: Coordinate, event: "Event") -> float | None:
    """Distance in kilometers from a coordinate to an event's venue.

    Venue coordinates arrive from the catalog as numeric strings and may be
    missing or garbage.

    Returns:
        Distance in kilometers, or None if the venue has no usable location
    """
    venue = event.venue
    if venue.latitude is None or venue.longitude is None:
        return None

    try:
        lat = float(venue.latitude)
        lon = float(venue.longitude)
    except ValueError:
        return None

    return calculate_distance(coordinate.latitude, coordinate.longitude, lat, lon)


def validate_search_area(
    coordinate: Coordinate,
    radius_miles: float,
    page_index: int = 0,
) -> None:
    """Validate the inputs of a catalog search.

    Pure function.

    Raises:
        InvalidQuery: If the coordinate, radius or page index is malformed
    """
    lat, lon = coordinate.latitude, coordinate.longitude

    if not (isinstance(lat, (int, float)) and isinstance(lon, (int, float))):
        raise InvalidQuery(f"Coordinate must be numeric, got ({lat!r}, {lon!r})")

    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidQuery(f"Coordinate must be finite, got ({lat}, {lon})")

    if not -90 <= lat <= 90:
        raise InvalidQuery(f"Latitude {lat} out of range [-90, 90]")

    if not -180 <= lon <= 180:
        raise InvalidQuery(f"Longitude {lon} out of range [-180, 180]")

    if isinstance(radius_miles, bool) or not isinstance(radius_miles, (int, float)):
        raise InvalidQuery(f"Radius must be numeric, got {radius_miles!r}")

    if not math.isfinite(radius_miles) or radius_miles <= 0:
        raise InvalidQuery(f"Radius must be positive, got {radius_miles}")

    if page_index < 0:
        raise InvalidQuery(f"Page index must be non-negative, got {page_index}")
