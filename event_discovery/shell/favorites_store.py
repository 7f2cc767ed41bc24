"""Favorites Store - Imperative Shell.

This module owns the user's set of favorite event IDs and persists it.
Two implementations share one interface: an in-memory store for local runs
and tests, and a Firestore-backed store keeping favorites on the user's
profile document.

All I/O is contained here; the favorite overlay is in the core module.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from google.cloud import firestore

from event_discovery.core.config import FavoritesConfig


logger = logging.getLogger(__name__)


FavoritesListener = Callable[[frozenset[str]], None]


class FavoritesStore:
    """Abstract favorites store: holds the current set and notifies listeners.

    Not used directly. Subclasses must implement `_persist(event_id, favorite)`
    to make a change durable and return whether it was saved. Listeners are
    always called outside the store's lock.
    """

    def __init__(self, favorite_ids: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._favorite_ids: frozenset[str] = frozenset(favorite_ids)
        self._listeners: list[FavoritesListener] = []

    def favorite_ids(self) -> frozenset[str]:
        """Return the current favorite set."""
        with self._lock:
            return self._favorite_ids

    def contains(self, event_id: str) -> bool:
        """Check if an event is a favorite."""
        return event_id in self.favorite_ids()

    def subscribe(self, listener: FavoritesListener) -> Callable[[], None]:
        """Register a listener called with the new set on every change.

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

    def _persist(self, event_id: str, favorite: bool) -> bool:
        raise NotImplementedError(f"{type(self).__name__} must implement _persist")

    def set_favorite(self, event_id: str, favorite: bool) -> bool:
        """Mark or unmark an event as favorite and persist the change.

        Args:
            event_id: Catalog event ID
            favorite: Desired state

        Returns:
            True if the change was persisted; the local set is left untouched
            on failure
        """
        if not self._persist(event_id, favorite):
            return False

        with self._lock:
            if favorite:
                self._favorite_ids = self._favorite_ids | {event_id}
            else:
                self._favorite_ids = self._favorite_ids - {event_id}
            current = self._favorite_ids

        self._notify(current)
        return True

    def replace(self, favorite_ids: Iterable[str]) -> None:
        """Replace the whole set (e.g. after a user signs in) and notify."""
        with self._lock:
            self._favorite_ids = frozenset(favorite_ids)
            current = self._favorite_ids

        self._notify(current)

    def _notify(self, favorite_ids: frozenset[str]) -> None:
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(favorite_ids)
            except Exception:
                logger.exception("Favorites listener failed")


class InMemoryFavoritesStore(FavoritesStore):
    """Favorites kept only in process memory."""

    def __init__(self, favorite_ids: Iterable[str] = (), fail_writes: bool = False) -> None:
        super().__init__(favorite_ids)
        self.fail_writes = fail_writes

    def _persist(self, event_id: str, favorite: bool) -> bool:
        if self.fail_writes:
            logger.warning("Rejecting favorite write for %s", event_id)
            return False
        return True


class FirestoreFavoritesStore(FavoritesStore):
    """Favorites persisted on a user's Firestore profile document.

    Document structure (collection "users" by default):
    {
        "favorites": ["event_id_1", "event_id_2", ...],
        "updated_at": <timestamp>
    }
    """

    def __init__(
        self,
        user_id: str,
        config: FavoritesConfig | None = None,
        client: firestore.Client | None = None,
    ) -> None:
        """Initialize Firestore favorites store.

        Args:
            user_id: Document ID of the signed-in user
            config: Firestore location of favorites
            client: Firestore client (created lazily if None)
        """
        super().__init__()
        self.user_id = user_id
        self.config = config or FavoritesConfig()
        self._client = client

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.firestore_database:
                kwargs['database'] = self.config.firestore_database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _get_doc_ref(self) -> Any:
        """Get reference to the user's profile document."""
        return (
            self.client
            .collection(self.config.collection)
            .document(self.user_id)
        )

    def load(self) -> frozenset[str]:
        """Fetch the user's favorites from Firestore and replace the local set.

        This method performs database I/O. On failure the local set is kept.

        Returns:
            The favorite set after loading
        """
        logger.info("Fetching favorites for user %s from Firestore", self.user_id)

        try:
            doc = self._get_doc_ref().get()

            if not doc.exists:
                logger.info("No profile document found for user %s", self.user_id)
                self.replace(())
                return self.favorite_ids()

            data = doc.to_dict() or {}
            ids = data.get(self.config.field, [])

            logger.info("Fetched %d favorites from Firestore", len(ids))
            self.replace(ids)

        except Exception as e:
            logger.error("Failed to fetch favorites: %s", str(e))

        return self.favorite_ids()

    def _persist(self, event_id: str, favorite: bool) -> bool:
        """Add or remove one ID on the profile document.

        This is an atomic update operation.
        """
        operation = firestore.ArrayUnion if favorite else firestore.ArrayRemove

        logger.info(
            "%s favorite %s for user %s",
            "Adding" if favorite else "Removing",
            event_id,
            self.user_id,
        )

        try:
            self._get_doc_ref().set(
                {
                    self.config.field: operation([event_id]),
                    "updated_at": datetime.now(timezone.utc),
                },
                merge=True,
            )

            logger.info("Successfully updated favorites")
            return True

        except Exception as e:
            logger.error("Failed to update favorites: %s", str(e))
            return False
