"""Event formatting - Pure functions.

This module turns events and discovery snapshots into display strings and
JSON-ready payloads. All functions are pure with no side effects.
"""

from datetime import datetime
from typing import Any

from event_discovery.core.event import Event
from event_discovery.core.geo import Coordinate, distance_to_venue
from event_discovery.core.state import DiscoverySnapshot


LOCAL_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def format_local_datetime(local: str) -> str | None:
    """Format a venue wall-clock string for display.

    Pure function.

    Args:
        local: "YYYY-MM-DDTHH:MM:SS" as stored on EventDate.local

    Returns:
        e.g. "December 2, 2024 at 7:30 PM", or None if unparseable
    """
    try:
        dt = datetime.strptime(local, LOCAL_DATETIME_FORMAT)
    except ValueError:
        return None

    hour = dt.strftime("%I").lstrip("0") or "12"
    return f"{dt.strftime('%B')} {dt.day}, {dt.year} at {hour}:{dt.strftime('%M %p')}"


def format_event_summary(event: Event) -> str:
    """Format a one-line summary of an event.

    Pure function.
    """
    when = format_local_datetime(event.start.local) or "Date TBA"
    return f"{event.display_name} - {event.venue.name} ({when})"


def format_event_payload(
    event: Event,
    origin: Coordinate | None = None,
) -> dict[str, Any]:
    """Format an event as a JSON-ready dict.

    Pure function.

    Args:
        event: Event to format
        origin: Search center; adds distance_km when given

    Returns:
        Event payload dict
    """
    payload: dict[str, Any] = {
        "id": event.id,
        "name": event.display_name,
        "description": event.display_description,
        "start": {
            "timezone": event.start.timezone,
            "local": event.start.local,
            "utc": event.start.utc,
        },
        "end": {
            "timezone": event.end.timezone,
            "local": event.end.local,
            "utc": event.end.utc,
        },
        "venue": {
            "id": event.venue.id,
            "name": event.venue.name,
            "address": event.display_address,
            "latitude": event.venue.latitude,
            "longitude": event.venue.longitude,
        },
        "event_type": event.event_type,
        "genre": event.genre,
        "subgenre": event.subgenre,
        "is_favorite": event.is_favorite,
    }

    if origin is not None:
        distance = distance_to_venue(origin, event)
        payload["distance_km"] = round(distance, 2) if distance is not None else None

    return payload


def format_snapshot_payload(snapshot: DiscoverySnapshot) -> dict[str, Any]:
    """Format a discovery snapshot as a JSON-ready dict.

    Pure function.
    """
    coordinate = None
    if snapshot.coordinate is not None:
        coordinate = {
            "latitude": snapshot.coordinate.latitude,
            "longitude": snapshot.coordinate.longitude,
        }

    return {
        "state": snapshot.state.value,
        "is_loading": snapshot.is_loading,
        "is_loading_more": snapshot.is_loading_more,
        "has_more": snapshot.has_more,
        "error": snapshot.error.value if snapshot.error else None,
        "coordinate": coordinate,
        "radius_miles": snapshot.radius_miles,
        "count": len(snapshot.events),
        "events": [
            format_event_payload(e, snapshot.coordinate) for e in snapshot.events
        ],
    }
