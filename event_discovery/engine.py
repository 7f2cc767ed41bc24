"""Discovery Engine - Wires Functional Core and Imperative Shell.

This module owns the refresh/paginate state machine. It decides when a new
search epoch starts, dispatches catalog fetches to worker threads, merges
their results through the page accumulator and publishes immutable
snapshots with favorite status applied.

Every public operation and every fetch result is applied under one
re-entrant lock. Network calls run outside the lock; each one carries the
epoch it was dispatched for, and results for a superseded epoch are dropped.
"""

import itertools
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable

from event_discovery.core.accumulator import PageAccumulator
from event_discovery.core.config import EngineConfig
from event_discovery.core.errors import CatalogError, ErrorKind
from event_discovery.core.event import CatalogPage
from event_discovery.core.favorites import (
    apply_pending_favorites,
    overlay_favorites,
    toggled_state,
)
from event_discovery.core.geo import Coordinate, has_moved
from event_discovery.core.state import (
    DiscoverySnapshot,
    EngineState,
    SearchEpoch,
    compute_date_window,
    should_load_more,
)
from event_discovery.shell.favorites_store import FavoritesStore


logger = logging.getLogger(__name__)


SnapshotListener = Callable[[DiscoverySnapshot], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DiscoveryEngine:
    """Keeps the nearby-event list in sync with location, radius and favorites.

    This class wires together:
    - Catalog client (fetches event pages)
    - Core functions (accumulation, overlay, state decisions)
    - Favorites store (favorite set and its persistence)

    Fetch operations return a Future that completes once the result (or
    failure) has been applied, or None when nothing was dispatched.
    """

    def __init__(
        self,
        catalog_client: Any,
        favorites_store: FavoritesStore,
        config: EngineConfig | None = None,
        executor: Executor | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize engine with its collaborators.

        Args:
            catalog_client: Object with a CatalogClient-compatible fetch_page()
            favorites_store: Source of the favorite set
            config: Engine configuration
            executor: Executor for catalog fetches (a private thread pool if None)
            clock: Returns the current UTC time; used for date windows
        """
        self.catalog_client = catalog_client
        self.favorites_store = favorites_store
        self.config = config or EngineConfig()

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="discovery-fetch",
        )
        # Single writer keeps favorite writes in submission order
        self._favorites_executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="discovery-favorites",
        )
        self._clock = clock or _utc_now

        self._lock = threading.RLock()
        self._epoch_ids = itertools.count(1)
        self._toggle_ids = itertools.count(1)
        self._accumulator = PageAccumulator()
        self._epoch: SearchEpoch | None = None
        self._state = EngineState.IDLE
        self._error: ErrorKind | None = None
        self._coordinate: Coordinate | None = None
        self._radius_miles: float = self.config.default_radius_miles
        self._pending_favorites: dict[str, tuple[int, bool]] = {}
        self._listeners: list[SnapshotListener] = []
        self._closed = False

        self._unsubscribe_favorites = favorites_store.subscribe(self._on_favorites_changed)

    # ----- Presentation-facing surface -----

    def snapshot(self) -> DiscoverySnapshot:
        """Return the current state as an immutable snapshot."""
        with self._lock:
            return self._build_snapshot()

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener for every published snapshot.

        Listeners are called in publication order while the engine lock is
        held, so they may call back into the engine from the same thread.

        Returns:
            Callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def state(self) -> EngineState:
        with self._lock:
            return self._state

    # ----- Location / radius / refresh -----

    def update_location(
        self,
        coordinate: Coordinate | None,
        radius_miles: float | None = None,
    ) -> Future | None:
        """Handle a push from the location source.

        A changed coordinate or radius starts a new epoch. Without any
        coordinate the engine stays idle and fetches nothing.

        Args:
            coordinate: Best-known search center (None if unavailable)
            radius_miles: Search radius (None keeps the current one)

        Returns:
            Future of the page-0 fetch, or None if no epoch was started
        """
        with self._lock:
            if self._ignore_after_close("location update"):
                return None

            radius = self._radius_miles if radius_miles is None else radius_miles

            if coordinate is None:
                self._radius_miles = radius
                logger.info("No location available; not searching")
                return None

            moved = has_moved(
                self._coordinate,
                coordinate,
                self.config.location_change_threshold_km,
            )
            if not moved and radius == self._radius_miles:
                return None

            self._coordinate = coordinate
            self._radius_miles = radius
            return self._start_epoch("location changed" if moved else "radius changed")

    def set_radius(self, radius_miles: float) -> Future | None:
        """Change the search radius; starts a new epoch when a location is known."""
        with self._lock:
            if self._ignore_after_close("radius change"):
                return None

            if radius_miles == self._radius_miles:
                return None

            self._radius_miles = radius_miles

            if self._coordinate is None:
                return None

            return self._start_epoch("radius changed")

    def refresh(self) -> Future | None:
        """Start a new epoch at the current location and radius.

        Returns:
            Future of the page-0 fetch, or None while no location is known
        """
        with self._lock:
            if self._ignore_after_close("refresh"):
                return None

            if self._coordinate is None:
                logger.info("Refresh requested before any location; staying idle")
                return None

            return self._start_epoch("refresh")

    # ----- Pagination -----

    def load_more(self) -> Future | None:
        """Fetch the next page of the current epoch.

        Only one pagination fetch is in flight at a time; calls while one is
        running, before the first page arrived, or with no more pages are
        no-ops.

        Returns:
            Future of the page fetch, or None if nothing was dispatched
        """
        with self._lock:
            epoch = self._epoch
            if self._ignore_after_close("load more"):
                return None

            if epoch is None or self._state != EngineState.READY or not epoch.has_more:
                return None

            self._state = EngineState.LOADING_MORE
            logger.info(
                "Loading page %d of epoch %d",
                epoch.next_page_index,
                epoch.epoch_id,
            )
            self._publish()
            return self._dispatch(epoch, epoch.next_page_index)

    def load_more_if_needed(self, current_index: int) -> Future | None:
        """Load the next page when the rendered item is near the end of the list.

        Args:
            current_index: Index of the item the consumer is rendering

        Returns:
            Future of the page fetch, or None if nothing was dispatched
        """
        with self._lock:
            if not should_load_more(
                current_index,
                len(self._accumulator),
                self.config.load_more_threshold,
            ):
                return None

            return self.load_more()

    # ----- Favorites -----

    def toggle_favorite(self, event_id: str) -> Future | None:
        """Flip an event's favorite state.

        The new state is shown immediately and persisted through the
        favorites store; if the store rejects the write the change is
        reverted and FAVORITE_UPDATE_FAILED is reported.

        Returns:
            Future resolving to True if the store saved the change, or None
            once the engine is closed
        """
        with self._lock:
            if self._ignore_after_close("favorite toggle"):
                return None

            favorite = toggled_state(event_id, self._current_favorites())
            token = next(self._toggle_ids)
            self._pending_favorites[event_id] = (token, favorite)

            logger.info(
                "%s favorite %s (optimistic)",
                "Adding" if favorite else "Removing",
                event_id,
            )
            self._publish()

            return self._favorites_executor.submit(
                self._persist_favorite,
                event_id,
                favorite,
                token,
            )

    # ----- Lifecycle -----

    def close(self) -> None:
        """Stop listening to favorites and release worker threads.

        Results of fetches still in flight are discarded.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._listeners.clear()

        self._unsubscribe_favorites()
        self._favorites_executor.shutdown(wait=True)
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "DiscoveryEngine":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ----- Internals (lock held unless noted) -----

    def _ignore_after_close(self, operation: str) -> bool:
        if self._closed:
            logger.info("Engine closed; ignoring %s", operation)
        return self._closed

    def _current_favorites(self) -> frozenset[str]:
        pending = {
            event_id: favorite
            for event_id, (_, favorite) in self._pending_favorites.items()
        }
        return apply_pending_favorites(self.favorites_store.favorite_ids(), pending)

    def _build_snapshot(self) -> DiscoverySnapshot:
        epoch = self._epoch
        events = overlay_favorites(self._accumulator.snapshot(), self._current_favorites())

        return DiscoverySnapshot(
            events=events,
            state=self._state,
            has_more=epoch.has_more if epoch is not None else False,
            error=self._error,
            coordinate=self._coordinate,
            radius_miles=self._radius_miles,
            epoch_id=epoch.epoch_id if epoch is not None else None,
        )

    def _publish(self) -> DiscoverySnapshot:
        snapshot = self._build_snapshot()

        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed")

        return snapshot

    def _is_current(self, epoch_id: int) -> bool:
        return (
            not self._closed
            and self._epoch is not None
            and self._epoch.epoch_id == epoch_id
        )

    def _start_epoch(self, reason: str) -> Future:
        window_start, window_end = compute_date_window(
            self._clock(),
            self.config.date_window_days,
        )

        epoch = SearchEpoch(
            epoch_id=next(self._epoch_ids),
            coordinate=self._coordinate,
            radius_miles=self._radius_miles,
            date_window_start=window_start,
            date_window_end=window_end,
        )

        self._epoch = epoch
        self._accumulator.reset()
        self._state = EngineState.LOADING
        self._error = None

        logger.info(
            "Starting epoch %d (%s): %s within %s miles",
            epoch.epoch_id,
            reason,
            epoch.coordinate.as_latlong(),
            epoch.radius_miles,
        )

        self._publish()
        return self._dispatch(epoch, 0)

    def _dispatch(self, epoch: SearchEpoch, page_index: int) -> Future:
        return self._executor.submit(
            self._run_fetch,
            epoch.epoch_id,
            epoch.coordinate,
            epoch.radius_miles,
            page_index,
            epoch.date_window_start,
            epoch.date_window_end,
        )

    def _run_fetch(
        self,
        epoch_id: int,
        coordinate: Coordinate,
        radius_miles: float,
        page_index: int,
        window_start: datetime,
        window_end: datetime,
    ) -> None:
        """Worker thread body: fetch without the lock, then apply under it."""
        try:
            page = self.catalog_client.fetch_page(
                coordinate,
                radius_miles,
                page_index,
                window_start,
                window_end,
            )
        except CatalogError as e:
            self._apply_failure(epoch_id, page_index, e.kind)
            return
        except Exception:
            logger.exception("Unexpected error fetching page %d", page_index)
            self._apply_failure(epoch_id, page_index, ErrorKind.TRANSPORT_FAILURE)
            return

        self._apply_page(epoch_id, page_index, page)

    def _apply_page(self, epoch_id: int, page_index: int, page: CatalogPage) -> None:
        with self._lock:
            if not self._is_current(epoch_id):
                logger.info(
                    "Discarding page %d of superseded epoch %d",
                    page_index,
                    epoch_id,
                )
                return

            epoch = self._epoch
            added = self._accumulator.append(page.events)
            epoch.next_page_index = page_index + 1
            epoch.has_more = page.has_more
            self._state = EngineState.READY
            self._error = None

            logger.info(
                "Epoch %d page %d: %d new events (%d total), has_more=%s",
                epoch_id,
                page_index,
                added,
                len(self._accumulator),
                page.has_more,
            )

            self._publish()

    def _apply_failure(self, epoch_id: int, page_index: int, kind: ErrorKind) -> None:
        with self._lock:
            if not self._is_current(epoch_id):
                logger.info(
                    "Discarding failure of page %d for superseded epoch %d",
                    page_index,
                    epoch_id,
                )
                return

            self._error = kind

            if self._state == EngineState.LOADING_MORE:
                self._state = EngineState.READY
                logger.warning(
                    "Loading page %d failed (%s); keeping %d events",
                    page_index,
                    kind.value,
                    len(self._accumulator),
                )
            else:
                self._accumulator.reset()
                self._epoch.has_more = False
                self._state = EngineState.FAILED
                logger.warning("Refresh failed (%s); cleared events", kind.value)

            self._publish()

    def _persist_favorite(self, event_id: str, favorite: bool, token: int) -> bool:
        """Worker thread body: write through the store, then settle the overlay."""
        try:
            saved = self.favorites_store.set_favorite(event_id, favorite)
        except Exception:
            logger.exception("Favorites store raised while saving %s", event_id)
            saved = False

        with self._lock:
            pending = self._pending_favorites.get(event_id)
            if pending is not None and pending[0] == token:
                del self._pending_favorites[event_id]

            if not saved:
                logger.warning("Favorite update for %s rejected; reverting", event_id)
                self._error = ErrorKind.FAVORITE_UPDATE_FAILED

            self._publish()

        return saved

    def _on_favorites_changed(self, favorite_ids: frozenset[str]) -> None:
        """Store listener: re-overlay the current list without fetching."""
        with self._lock:
            if self._closed or self._accumulator.is_empty:
                return

            logger.debug("Favorites changed (%d); republishing", len(favorite_ids))
            self._publish()
