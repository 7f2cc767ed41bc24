"""Discovery state models - Pure data structures and decisions.

The engine in event_discovery.engine owns the mutable state; this module
holds the types it is made of and the pure decisions it takes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from event_discovery.core.errors import ErrorKind
from event_discovery.core.event import Event
from event_discovery.core.geo import Coordinate


class EngineState(str, Enum):
    """Refresh/paginate state of the discovery engine."""
    IDLE = "idle"
    LOADING = "loading"
    LOADING_MORE = "loading_more"
    READY = "ready"
    FAILED = "failed"


@dataclass
class SearchEpoch:
    """One location/radius search context.

    Superseded epochs are replaced, never reused. Only `next_page_index` and
    `has_more` change during an epoch's life.

    Attributes:
        epoch_id: Monotonic identifier used to tag outstanding fetches
        coordinate: Search center
        radius_miles: Search radius
        date_window_start: Start of the date window (fixed at creation)
        date_window_end: End of the date window (fixed at creation)
        next_page_index: Page to request next
        has_more: Whether the catalog reported more pages
    """
    epoch_id: int
    coordinate: Coordinate
    radius_miles: float
    date_window_start: datetime
    date_window_end: datetime
    next_page_index: int = 0
    has_more: bool = False


@dataclass(frozen=True)
class DiscoverySnapshot:
    """Immutable view of the engine published to the presentation layer.

    Attributes:
        events: Accumulated events with favorite status applied
        state: Engine state at publication time
        has_more: Whether more pages can be loaded
        error: Last error kind, if any
        coordinate: Search center of the current epoch (None when idle)
        radius_miles: Current search radius
        epoch_id: Current epoch (None before the first search)
    """
    events: tuple[Event, ...] = ()
    state: EngineState = EngineState.IDLE
    has_more: bool = False
    error: ErrorKind | None = None
    coordinate: Coordinate | None = None
    radius_miles: float | None = None
    epoch_id: int | None = None

    @property
    def is_loading(self) -> bool:
        return self.state == EngineState.LOADING

    @property
    def is_loading_more(self) -> bool:
        return self.state == EngineState.LOADING_MORE


def compute_date_window(now: datetime, days: int = 30) -> tuple[datetime, datetime]:
    """Return the (start, end) date window of a new epoch.

    Pure function.
    """
    return now, now + timedelta(days=days)


def should_load_more(current_index: int, event_count: int, threshold: int = 5) -> bool:
    """Check whether the rendered item is close enough to the end of the list.

    Pure function.

    Args:
        current_index: Index of the item being rendered
        event_count: Number of events currently known
        threshold: Lookback window from the end of the list

    Returns:
        True if current_index is within `threshold` items of the end
    """
    if event_count == 0:
        return False
    return current_index >= event_count - threshold
