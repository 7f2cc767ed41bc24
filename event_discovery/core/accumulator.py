"""Page accumulation - Pure in-memory state.

Holds the ordered, id-deduplicated event list of one search epoch. It does
no I/O; the engine is its only writer.
"""

from typing import Iterable

from event_discovery.core.event import Event


class PageAccumulator:
    """Ordered, deduplicated list of events across the pages of an epoch."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._seen_ids: set[str] = set()

    def reset(self) -> None:
        """Clear all accumulated events. Called once per new epoch."""
        self._events = []
        self._seen_ids = set()

    def append(self, events: Iterable[Event]) -> int:
        """Append events in server order.

        An id that was already seen is dropped; the first occurrence keeps
        its position.

        Args:
            events: Events from one catalog page

        Returns:
            Number of events actually added
        """
        added = 0
        for event in events:
            if event.id in self._seen_ids:
                continue
            self._seen_ids.add(event.id)
            self._events.append(event)
            added += 1
        return added

    def snapshot(self) -> tuple[Event, ...]:
        """Return the current events by value."""
        return tuple(self._events)

    @property
    def is_empty(self) -> bool:
        return not self._events

    def __len__(self) -> int:
        return len(self._events)
