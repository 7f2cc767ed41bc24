"""Location Source - Imperative Shell.

Holds the best-known search center and radius and pushes them to
subscribers. Device fixes come from whatever positioning the host has; a
manual override (a city the user picked) wins while it is set.
"""

import logging
import threading
from typing import Callable

from event_discovery.core.geo import Coordinate


logger = logging.getLogger(__name__)


LocationListener = Callable[[Coordinate | None, float], None]


class LocationSource:
    """Push source of (coordinate, radius_miles)."""

    def __init__(self, radius_miles: float = 10) -> None:
        self._lock = threading.Lock()
        self._device: Coordinate | None = None
        self._manual: Coordinate | None = None
        self._radius_miles = radius_miles
        self._listeners: list[LocationListener] = []

    @property
    def coordinate(self) -> Coordinate | None:
        """Manual override if set, otherwise the last device fix."""
        with self._lock:
            return self._manual or self._device

    @property
    def radius_miles(self) -> float:
        with self._lock:
            return self._radius_miles

    def subscribe(self, listener: LocationListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def update_device_location(self, coordinate: Coordinate) -> None:
        """Record a new device fix."""
        logger.debug("Device location updated: %s", coordinate.as_latlong())
        with self._lock:
            self._device = coordinate
        self._notify()

    def set_manual_location(self, coordinate: Coordinate) -> None:
        """Override the device location with a user-picked coordinate."""
        logger.info("Manual location set: %s", coordinate.as_latlong())
        with self._lock:
            self._manual = coordinate
        self._notify()

    def clear_manual_location(self) -> None:
        """Go back to following the device location."""
        with self._lock:
            if self._manual is None:
                return
            self._manual = None
        self._notify()

    def set_radius(self, radius_miles: float) -> None:
        with self._lock:
            if radius_miles == self._radius_miles:
                return
            self._radius_miles = radius_miles
        self._notify()

    def _notify(self) -> None:
        with self._lock:
            coordinate = self._manual or self._device
            radius = self._radius_miles
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(coordinate, radius)
            except Exception:
                logger.exception("Location listener failed")
