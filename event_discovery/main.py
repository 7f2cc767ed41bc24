"""Cloud Function Entry Point.

This module provides the entry point for Google Cloud Functions.
It's a thin wrapper that loads configuration, runs one discovery session
through the engine and returns the resulting snapshot as JSON.
"""

import logging
import os
import json
from typing import Any

import functions_framework
from flask import Request

from event_discovery.core.config import Config, validate_config
from event_discovery.core.errors import ErrorKind
from event_discovery.core.formatter import format_snapshot_payload
from event_discovery.core.geo import Coordinate
from event_discovery.core.state import DiscoverySnapshot, EngineState
from event_discovery.engine import DiscoveryEngine
from event_discovery.shell.catalog_client import CatalogClient
from event_discovery.shell.config_loader import load_config, load_config_from_env
from event_discovery.shell.favorites_store import (
    FavoritesStore,
    FirestoreFavoritesStore,
    InMemoryFavoritesStore,
)


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# Upper bound on pages one request may walk through
MAX_PAGES = 10


def _get_config() -> Config:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    elif os.environ.get("TICKETMASTER_API_KEY"):
        # Simple env-based config
        return load_config_from_env()
    else:
        # Try default config path
        return load_config()


def _parse_request(request: Request) -> tuple[Coordinate | None, float | None, int, str | None]:
    """Read search parameters from query args.

    The coordinate is None when lat or lon is absent.

    Raises:
        ValueError: If a parameter is not a number or pages is out of range
    """
    args = request.args

    lat = args.get("lat")
    lon = args.get("lon")

    radius = args.get("radius")
    pages = int(args.get("pages", 1))
    if not 1 <= pages <= MAX_PAGES:
        raise ValueError(f"pages must be between 1 and {MAX_PAGES}")

    coordinate = None
    if lat is not None and lon is not None:
        coordinate = Coordinate(latitude=float(lat), longitude=float(lon))

    return (
        coordinate,
        float(radius) if radius is not None else None,
        pages,
        args.get("user_id"),
    )


def _build_favorites_store(config: Config, user_id: str | None) -> FavoritesStore:
    """Firestore favorites for a known user, an empty set otherwise."""
    if not user_id:
        return InMemoryFavoritesStore()

    store = FirestoreFavoritesStore(user_id, config.favorites)
    store.load()
    return store


def run_discovery(
    engine: DiscoveryEngine,
    coordinate: Coordinate,
    radius_miles: float | None = None,
    pages: int = 1,
) -> DiscoverySnapshot:
    """Search around a coordinate and page through up to `pages` pages.

    Blocks until every dispatched fetch has been applied.

    Returns:
        Final snapshot of the engine
    """
    future = engine.update_location(coordinate, radius_miles)
    if future is None:
        future = engine.refresh()
    if future is not None:
        future.result()

    for _ in range(pages - 1):
        future = engine.load_more()
        if future is None:
            break
        future.result()

    return engine.snapshot()


def _status_for(snapshot: DiscoverySnapshot) -> int:
    if snapshot.state != EngineState.FAILED:
        return 200
    if snapshot.error == ErrorKind.INVALID_QUERY:
        return 400
    return 502


@functions_framework.http
def discover_events(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP Cloud Function entry point.

    Query parameters: lat, lon, radius (miles, optional), pages (optional,
    default 1) and user_id (optional, loads that user's favorites).

    Args:
        request: Flask request object

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    logger.info("Starting event discovery request")

    try:
        coordinate, radius, pages, user_id = _parse_request(request)
    except ValueError as e:
        logger.warning("Rejected request: %s", e)
        return {"status": "error", "message": str(e)}, 400

    if coordinate is None:
        logger.warning("Rejected request: no location given")
        return {
            "status": "error",
            "error": ErrorKind.LOCATION_UNAVAILABLE.value,
            "message": "lat and lon are required",
        }, 400

    try:
        config = _get_config()

        validation = validate_config(config)
        for warning in validation.warnings:
            logger.warning("Config %s: %s", warning.field, warning.message)
        if not validation.valid:
            messages = [f"{e.field}: {e.message}" for e in validation.critical_errors]
            logger.error("Invalid configuration: %s", "; ".join(messages))
            return {"status": "error", "message": "Invalid configuration"}, 500

        catalog_client = CatalogClient(config.catalog)
        favorites_store = _build_favorites_store(config, user_id)

        with DiscoveryEngine(catalog_client, favorites_store, config.engine) as engine:
            snapshot = run_discovery(engine, coordinate, radius, pages)

        response = {
            "status": "success" if snapshot.state != EngineState.FAILED else "error",
            **format_snapshot_payload(snapshot),
        }

        logger.info(
            "Completed: %d events, state=%s",
            len(snapshot.events),
            snapshot.state.value,
        )

        return response, _status_for(snapshot)

    except Exception as e:
        logger.exception("Unexpected error in event discovery")
        return {
            "status": "error",
            "message": str(e),
        }, 500


# For local testing
if __name__ == "__main__":
    import sys

    print("Running event discovery locally...")

    if not os.environ.get("TICKETMASTER_API_KEY") and not os.path.exists("config/config.yaml"):
        print("Error: Set TICKETMASTER_API_KEY or create config/config.yaml")
        sys.exit(1)

    class MockRequest:
        args = {
            "lat": os.environ.get("LAT", "40.7128"),
            "lon": os.environ.get("LON", "-74.0060"),
            "pages": os.environ.get("PAGES", "1"),
        }

    response, status = discover_events(MockRequest())
    print(f"\nResponse ({status}):")
    print(json.dumps(response, indent=2))
