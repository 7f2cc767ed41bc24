"""Favorite overlay logic - Pure functions.

This module stamps favorite status onto events at read time. The favorite
set itself is owned by the favorites store in the shell; nothing here
stores it.
"""

from dataclasses import replace
from typing import Iterable, Mapping

from event_discovery.core.event import Event


def overlay_favorites(
    events: Iterable[Event],
    favorite_ids: frozenset[str] | set[str],
) -> tuple[Event, ...]:
    """Project favorite status onto a list of events.

    Pure function. Order is preserved and each event is looked up once in
    the set, so the cost is linear in the number of events.

    Args:
        events: Accumulated events in display order
        favorite_ids: Current favorite event IDs

    Returns:
        Events with is_favorite set from membership in favorite_ids
    """
    result = []
    for event in events:
        is_favorite = event.id in favorite_ids
        if event.is_favorite != is_favorite:
            event = replace(event, is_favorite=is_favorite)
        result.append(event)
    return tuple(result)


def apply_pending_favorites(
    favorite_ids: frozenset[str],
    pending: Mapping[str, bool],
) -> frozenset[str]:
    """Combine the stored favorite set with optimistic, unconfirmed toggles.

    Pure function.

    Args:
        favorite_ids: Favorite IDs as the store currently reports them
        pending: Event ID -> desired favorite state for writes still in flight

    Returns:
        The favorite set the user should currently see
    """
    if not pending:
        return favorite_ids

    added = {event_id for event_id, favorite in pending.items() if favorite}
    removed = {event_id for event_id, favorite in pending.items() if not favorite}
    return frozenset((favorite_ids | added) - removed)


def toggled_state(event_id: str, favorite_ids: frozenset[str]) -> bool:
    """Return the favorite state an event should move to when toggled."""
    return event_id not in favorite_ids
