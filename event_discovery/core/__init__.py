"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions and immutable data:
- Catalog payload normalization
- Geo/distance calculations and search-area validation
- Page accumulation
- Favorite overlay
- Engine state decisions and snapshot formatting

All functions here are deterministic and have no I/O.
"""

from event_discovery.core.accumulator import PageAccumulator
from event_discovery.core.errors import (
    CatalogError,
    ErrorKind,
    InvalidQuery,
    MalformedResponse,
    TransportFailure,
)
from event_discovery.core.event import CatalogPage, Event, compute_has_more, parse_catalog_page
from event_discovery.core.favorites import overlay_favorites
from event_discovery.core.geo import Coordinate, calculate_distance, validate_search_area
from event_discovery.core.state import DiscoverySnapshot, EngineState, SearchEpoch

__all__ = [
    # Events
    "Event",
    "CatalogPage",
    "parse_catalog_page",
    "compute_has_more",
    # Errors
    "ErrorKind",
    "CatalogError",
    "InvalidQuery",
    "TransportFailure",
    "MalformedResponse",
    # Geo
    "Coordinate",
    "calculate_distance",
    "validate_search_area",
    # Accumulation and overlay
    "PageAccumulator",
    "overlay_favorites",
    # State
    "EngineState",
    "SearchEpoch",
    "DiscoverySnapshot",
]
