"""Event data models and catalog parsing - Pure functions.

This module normalizes Ticketmaster Discovery API payloads into typed,
immutable Event objects. All functions are pure with no side effects.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable

from event_discovery.core.errors import MalformedResponse


UNKNOWN_VENUE = "Unknown Venue"
NO_ADDRESS = "No address available"
DEFAULT_TIMEZONE = "UTC"
DEFAULT_LOCAL_TIME = "00:00:00"

# Segment names users can filter by
EVENT_TYPES = ("Music", "Sports", "Arts & Theatre")


@dataclass(frozen=True)
class TextPair:
    """Plain-text and markup forms of the same string."""
    text: str
    html: str


@dataclass(frozen=True)
class EventDate:
    """A point in time as the catalog reports it.

    Attributes:
        timezone: IANA timezone name of the venue
        local: Venue wall-clock time, "YYYY-MM-DDTHH:MM:SS"
        utc: UTC instant string ("" when the catalog has none)
    """
    timezone: str
    local: str
    utc: str


@dataclass(frozen=True)
class VenueAddress:
    """Postal address of a venue. Every field is optional.

    Attributes:
        display: Comma-joined street line, city and region code
    """
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country: str | None = None
    display: str | None = None


@dataclass(frozen=True)
class Venue:
    """Where an event takes place.

    Latitude and longitude are kept as the numeric strings the catalog sends.
    """
    id: str
    name: str
    address: VenueAddress = field(default_factory=VenueAddress)
    latitude: str | None = None
    longitude: str | None = None


@dataclass(frozen=True)
class Classification:
    """Segment/genre/subgenre display names; None when the catalog omits one."""
    segment: str | None = None
    genre: str | None = None
    subgenre: str | None = None


@dataclass(frozen=True)
class Event:
    """Immutable event record.

    `is_favorite` is derived by the favorites overlay. It is never read from
    the catalog and takes no part in equality or hashing.

    Attributes:
        id: Stable catalog identifier
        name: Event name
        description: Event synopsis
        start: Start date
        end: End date (the catalog has none; always equal to start)
        venue: First venue of the event
        classification: First classification entry, if any
        is_favorite: Whether the event is in the user's favorite set
    """
    id: str
    name: TextPair
    description: TextPair
    start: EventDate
    end: EventDate
    venue: Venue
    classification: Classification | None = None
    is_favorite: bool = field(default=False, compare=False)

    @property
    def display_name(self) -> str:
        return self.name.text

    @property
    def display_description(self) -> str:
        return self.description.text

    @property
    def display_address(self) -> str:
        return self.venue.address.display or NO_ADDRESS

    @property
    def event_type(self) -> str:
        """Segment name, or "Other" when unclassified."""
        if self.classification and self.classification.segment:
            return self.classification.segment
        return "Other"

    @property
    def genre(self) -> str:
        if self.classification and self.classification.genre:
            return self.classification.genre
        return "Unknown Genre"

    @property
    def subgenre(self) -> str:
        if self.classification and self.classification.subgenre:
            return self.classification.subgenre
        return "Unknown Subgenre"


@dataclass(frozen=True)
class CatalogPage:
    """One normalized page of catalog results.

    Attributes:
        events: Events in server order
        page_number: Zero-based page number reported by the server
        total_pages: Total pages reported by the server
        has_more: Whether another page exists after this one
    """
    events: tuple[Event, ...]
    page_number: int
    total_pages: int
    has_more: bool


def compute_has_more(page_number: int | None, total_pages: int | None) -> bool:
    """Decide whether the catalog has a page after this one.

    Pure function. A missing page number is treated as 0 and a missing total
    as 1, so an unpaged response never reports more.
    """
    number = 0 if page_number is None else page_number
    total = 1 if total_pages is None else total_pages
    return number < total - 1


def build_address_display(
    line1: str | None,
    city: str | None,
    region: str | None,
) -> str:
    """Join street line, city and region code with ", ", skipping absent parts.

    Pure function. May return an empty string.
    """
    return ", ".join(part for part in (line1, city, region) if part)


def _optional_str(
    data: dict[str, Any],
    key: str,
    default: str | None = None,
) -> str | None:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise MalformedResponse(f"Expected string for '{key}', got {type(value).__name__}")
    return value


def _optional_dict(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedResponse(f"Expected object for '{key}', got {type(value).__name__}")
    return value


def _first_item(data: dict[str, Any], key: str) -> dict[str, Any] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise MalformedResponse(f"Expected list for '{key}', got {type(value).__name__}")
    if not value:
        return None
    if not isinstance(value[0], dict):
        raise MalformedResponse(f"Expected object in '{key}'")
    return value[0]


def _nested_name(data: dict[str, Any], key: str, name_key: str = "name") -> str | None:
    return _optional_str(_optional_dict(data, key), name_key)


def parse_event_date(start: dict[str, Any]) -> EventDate:
    """Build an EventDate from a catalog `dates.start` object.

    Pure function.
    """
    local_date = _optional_str(start, "localDate", "")
    local_time = _optional_str(start, "localTime", DEFAULT_LOCAL_TIME)

    return EventDate(
        timezone=_optional_str(start, "timezone", DEFAULT_TIMEZONE),
        local=f"{local_date}T{local_time}",
        utc=_optional_str(start, "dateTime", ""),
    )


def parse_venue(raw: dict[str, Any] | None) -> Venue:
    """Build a Venue from the first catalog venue entry (or None).

    Pure function.
    """
    raw = raw or {}

    line1 = _nested_name(raw, "address", "line1")
    city = _nested_name(raw, "city")
    region = _nested_name(raw, "state", "stateCode")
    location = _optional_dict(raw, "location")

    address = VenueAddress(
        line1=line1,
        line2=None,
        city=city,
        region=region,
        postal_code=_optional_str(raw, "postalCode"),
        country=_nested_name(raw, "country", "countryCode"),
        display=build_address_display(line1, city, region),
    )

    return Venue(
        id=_optional_str(raw, "id", ""),
        name=_optional_str(raw, "name", UNKNOWN_VENUE),
        address=address,
        latitude=_optional_str(location, "latitude"),
        longitude=_optional_str(location, "longitude"),
    )


def parse_classification(raw: dict[str, Any] | None) -> Classification | None:
    """Build a Classification from the first catalog classification entry.

    Pure function. Names that are absent stay None.
    """
    if raw is None:
        return None

    return Classification(
        segment=_nested_name(raw, "segment"),
        genre=_nested_name(raw, "genre"),
        subgenre=_nested_name(raw, "subGenre"),
    )


def parse_event(raw: Any) -> Event:
    """Normalize a single catalog event.

    Pure function.

    Args:
        raw: Event object from `_embedded.events`

    Returns:
        Normalized Event (is_favorite is always False here)

    Raises:
        MalformedResponse: If required fields are missing or mistyped
    """
    if not isinstance(raw, dict):
        raise MalformedResponse("Event entry is not an object")

    event_id = raw.get("id")
    name = raw.get("name")
    if not isinstance(event_id, str) or not event_id:
        raise MalformedResponse("Event is missing a string 'id'")
    if not isinstance(name, str):
        raise MalformedResponse(f"Event {event_id} is missing a string 'name'")

    dates = _optional_dict(raw, "dates")
    start_raw = dates.get("start")
    if not isinstance(start_raw, dict):
        raise MalformedResponse(f"Event {event_id} is missing 'dates.start'")

    venue = parse_venue(_first_item(_optional_dict(raw, "_embedded"), "venues"))
    classification = parse_classification(_first_item(raw, "classifications"))

    info = _optional_str(raw, "info")
    synopsis = info if info is not None else f"Event at {venue.name}"

    start = parse_event_date(start_raw)

    return Event(
        id=event_id,
        name=TextPair(text=name, html=name),
        description=TextPair(text=synopsis, html=synopsis),
        start=start,
        # The catalog has no end date
        end=start,
        venue=venue,
        classification=classification,
    )


def _optional_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedResponse(f"Expected integer for 'page.{key}', got {value!r}")
    return value


def parse_catalog_page(payload: Any) -> CatalogPage:
    """Normalize a full catalog search response.

    Pure function. Any schema mismatch fails the whole page; events are
    never silently dropped.

    Args:
        payload: Decoded JSON body of a Discovery API event search

    Returns:
        CatalogPage with events in server order

    Raises:
        MalformedResponse: If the payload does not match the expected schema
    """
    if not isinstance(payload, dict):
        raise MalformedResponse("Response body is not an object")

    embedded = _optional_dict(payload, "_embedded")
    raw_events = embedded.get("events", [])
    if not isinstance(raw_events, list):
        raise MalformedResponse("'_embedded.events' is not a list")

    events = tuple(parse_event(raw) for raw in raw_events)

    page = _optional_dict(payload, "page")
    page_number = _optional_int(page, "number")
    total_pages = _optional_int(page, "totalPages")

    return CatalogPage(
        events=events,
        page_number=0 if page_number is None else page_number,
        total_pages=1 if total_pages is None else total_pages,
        has_more=compute_has_more(page_number, total_pages),
    )


def filter_by_event_types(
    events: Iterable[Event],
    types: Iterable[str],
) -> list[Event]:
    """Keep events whose segment matches one of the given types.

    Pure function. Matching is case-insensitive; unclassified events never
    match, even for "Other".
    """
    wanted = {t.lower() for t in types}
    return [
        e for e in events
        if e.classification is not None
        and e.classification.segment is not None
        and e.classification.segment.lower() in wanted
    ]


def filter_favorites(events: Iterable[Event]) -> list[Event]:
    """Keep only events the overlay marked as favorite."""
    return [e for e in events if e.is_favorite]


def filter_by_search_text(events: Iterable[Event], text: str) -> list[Event]:
    """Keep events whose name, venue or description contains `text`.

    Pure function. Case-insensitive; blank text keeps everything.
    """
    needle = text.strip().lower()
    if not needle:
        return list(events)

    return [
        e for e in events
        if needle in e.name.text.lower()
        or needle in e.venue.name.lower()
        or needle in e.description.text.lower()
    ]
