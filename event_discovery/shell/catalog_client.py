"""Ticketmaster Catalog Client - Imperative Shell.

This module handles HTTP communication with the Ticketmaster Discovery API.
All I/O is contained here; normalization is in the core module.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import requests

from event_discovery.core.config import CatalogConfig
from event_discovery.core.errors import MalformedResponse, TransportFailure
from event_discovery.core.event import CatalogPage, parse_catalog_page
from event_discovery.core.geo import Coordinate, validate_search_area


logger = logging.getLogger(__name__)


# Discovery API event search endpoint
TICKETMASTER_EVENTS_URL = "https://app.ticketmaster.com/discovery/v2/events.json"

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 15

CATALOG_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass
class CatalogQuery:
    """Parameters for one catalog page request.

    Attributes:
        coordinate: Search center
        radius_miles: Search radius in miles
        page_index: Zero-based page to fetch
        date_window_start: Only events starting after this time
        date_window_end: Only events starting before this time
    """
    coordinate: Coordinate
    radius_miles: float
    page_index: int
    date_window_start: datetime
    date_window_end: datetime


def _format_radius(radius_miles: float) -> str:
    if float(radius_miles).is_integer():
        return str(int(radius_miles))
    return str(radius_miles)


def _format_catalog_datetime(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(CATALOG_DATETIME_FORMAT)


class CatalogClient:
    """Client for fetching event pages from the Ticketmaster Discovery API.

    This is part of the imperative shell - it handles HTTP I/O. It keeps no
    state between calls.
    """

    def __init__(
        self,
        config: CatalogConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize catalog client.

        Args:
            config: Catalog settings (API key, page size, timeout)
            session: HTTP session to reuse (a plain requests call if None)
        """
        self.config = config or CatalogConfig()
        self.base_url = self.config.base_url or TICKETMASTER_EVENTS_URL
        self.timeout = self.config.timeout_seconds or DEFAULT_TIMEOUT
        self.session = session

    def _build_params(self, query: CatalogQuery) -> dict[str, str]:
        """Build query parameters for a Discovery API event search.

        Args:
            query: Query parameters

        Returns:
            Dict of URL query parameters
        """
        params: dict[str, str] = {
            "apikey": self.config.api_key,
            "latlong": query.coordinate.as_latlong(),
            "radius": _format_radius(query.radius_miles),
            "unit": "miles",
            "size": str(self.config.page_size),
            "page": str(query.page_index),
            "startDateTime": _format_catalog_datetime(query.date_window_start),
            "endDateTime": _format_catalog_datetime(query.date_window_end),
            "sort": self.config.sort,
        }

        if self.config.classification_names:
            params["classificationName"] = ",".join(self.config.classification_names)

        return params

    def _get(self, params: dict[str, str]) -> requests.Response:
        if self.session is not None:
            return self.session.get(self.base_url, params=params, timeout=self.timeout)
        return requests.get(self.base_url, params=params, timeout=self.timeout)

    def fetch(self, query: CatalogQuery) -> CatalogPage:
        """Fetch and normalize one page of events.

        This method performs HTTP I/O.

        Args:
            query: Query parameters

        Returns:
            Normalized CatalogPage

        Raises:
            InvalidQuery: If the coordinate, radius or page index is malformed
            TransportFailure: On timeout, connection failure or non-2xx status
            MalformedResponse: If the body is not the expected JSON schema
        """
        validate_search_area(query.coordinate, query.radius_miles, query.page_index)

        params = self._build_params(query)

        logger.info(
            "Fetching events page %d from catalog",
            query.page_index,
            extra={"params": {k: v for k, v in params.items() if k != "apikey"}},
        )

        try:
            response = self._get(params)
        except requests.Timeout as e:
            logger.error("Catalog request timed out after %ss", self.timeout)
            raise TransportFailure("Request timed out") from e
        except requests.RequestException as e:
            logger.error("Catalog request failed: %s", str(e))
            raise TransportFailure(str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Catalog returned non-2xx: %d - %s",
                response.status_code,
                response.text[:200],
            )
            raise TransportFailure(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Catalog response is not valid JSON")
            raise MalformedResponse("Response body is not valid JSON") from e

        try:
            page = parse_catalog_page(data)
        except MalformedResponse as e:
            logger.error("Catalog response did not match schema: %s", str(e))
            raise

        logger.info(
            "Fetched %d events (page %d of %d, has_more=%s)",
            len(page.events),
            page.page_number + 1,
            page.total_pages,
            page.has_more,
        )

        return page

    def fetch_page(
        self,
        coordinate: Coordinate,
        radius_miles: float,
        page_index: int,
        date_window_start: datetime,
        date_window_end: datetime,
    ) -> CatalogPage:
        """Convenience wrapper around fetch() taking the query fields directly.

        Returns:
            Normalized CatalogPage
        """
        query = CatalogQuery(
            coordinate=coordinate,
            radius_miles=radius_miles,
            page_index=page_index,
            date_window_start=date_window_start,
            date_window_end=date_window_end,
        )
        return self.fetch(query)
