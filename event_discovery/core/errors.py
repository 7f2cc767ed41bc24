"""Error kinds - Pure data structures.

Typed failure kinds surfaced by the discovery engine, and the exceptions
the catalog client raises for them. The engine never lets these exceptions
escape; it records the kind on its snapshot instead.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of failure exposed to the presentation layer."""
    INVALID_QUERY = "invalid_query"
    TRANSPORT_FAILURE = "transport_failure"
    MALFORMED_RESPONSE = "malformed_response"
    LOCATION_UNAVAILABLE = "location_unavailable"
    FAVORITE_UPDATE_FAILED = "favorite_update_failed"


class CatalogError(Exception):
    """Base class for catalog fetch failures.

    Attributes:
        kind: The ErrorKind this failure maps to
    """
    kind: ErrorKind = ErrorKind.TRANSPORT_FAILURE


class InvalidQuery(CatalogError):
    """Coordinate, radius or page index is malformed."""
    kind = ErrorKind.INVALID_QUERY


class TransportFailure(CatalogError):
    """Network failure, timeout or non-2xx HTTP status."""
    kind = ErrorKind.TRANSPORT_FAILURE


class MalformedResponse(CatalogError):
    """Catalog response does not match the expected schema."""
    kind = ErrorKind.MALFORMED_RESPONSE
