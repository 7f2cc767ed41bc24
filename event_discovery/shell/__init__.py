"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Ticketmaster catalog client (HTTP)
- Favorites store (Firestore)
- Location source (device fixes and manual override)
- Configuration loading (environment/files/Secret Manager)

Keep this layer thin and simple. All business logic should be in core.
"""

from event_discovery.shell.catalog_client import CatalogClient
from event_discovery.shell.favorites_store import (
    FavoritesStore,
    FirestoreFavoritesStore,
    InMemoryFavoritesStore,
)
from event_discovery.shell.location_source import LocationSource
from event_discovery.shell.config_loader import load_config, Config

__all__ = [
    "CatalogClient",
    "FavoritesStore",
    "FirestoreFavoritesStore",
    "InMemoryFavoritesStore",
    "LocationSource",
    "load_config",
    "Config",
]
