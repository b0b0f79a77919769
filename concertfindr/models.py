"""Domain models for the city search and event search workflow.

These are plain immutable objects. Parsing from upstream JSON lives next to
each model so the HTTP clients stay thin.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Self

from concertfindr import settings
from concertfindr.errors import ValidationError


@dataclass(frozen=True)
class PlaceSuggestion:
    """A city candidate returned by the autocomplete service."""

    id: str
    primary_name: str
    region_code: str | None = None

    @property
    def display_text(self) -> str:
        if self.region_code:
            return f"{self.primary_name}, {self.region_code}"
        return self.primary_name

    @classmethod
    def from_api(cls, item: dict) -> Self | None:
        """Build from a Mapbox suggestion, or None if it has no id or name."""
        place_id = item.get("mapbox_id") or item.get("id")
        name = item.get("name")
        if not isinstance(place_id, str) or not isinstance(name, str) or not place_id or not name:
            return None

        region_code = item.get("region_code")
        if not region_code:
            context = item.get("context")
            region = context.get("region") if isinstance(context, dict) else None
            region_code = region.get("region_code") if isinstance(region, dict) else None

        if not isinstance(region_code, str) or not region_code:
            region_code = None
        return cls(id=place_id, primary_name=name, region_code=region_code)


@dataclass(frozen=True)
class ResolvedPlace:
    """Coordinates for a place id. Never changes once resolved."""

    place_id: str
    latitude: float
    longitude: float

    @property
    def latlong(self) -> str:
        return f"{self.latitude},{self.longitude}"


@dataclass(frozen=True)
class SearchCriteria:
    """Everything the event search needs, captured at submit time."""

    place_id: str
    city_display_name: str
    start_date: date
    end_date: date
    radius_miles: int = settings.DEFAULT_RADIUS_MILES
    genre_filter: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValidationError("End date must be on or after start date", field="end_date")
        if isinstance(self.radius_miles, bool) or not isinstance(self.radius_miles, int):
            raise ValidationError("Radius must be a whole number of miles", field="radius_miles")
        if not 0 < self.radius_miles <= settings.MAX_RADIUS_MILES:
            raise ValidationError(
                f"Radius must be between 1 and {settings.MAX_RADIUS_MILES} miles",
                field="radius_miles",
            )

    @classmethod
    def from_input(
        cls,
        place_id: str | None,
        city_display_name: str | None,
        start_date: date | str | None,
        end_date: date | str | None,
        radius_miles: int | str | None = None,
        genres=None,
    ) -> Self:
        """Validate raw user input and build criteria.

        Raises:
            ValidationError: If a place is not selected, a date is missing or
                malformed, the range is inverted, or the radius is invalid.
        """
        if not place_id:
            raise ValidationError("Please select a city from the suggestions", field="place_id")
        if not isinstance(place_id, str):
            raise ValidationError("place_id must be a string", field="place_id")

        start = _parse_date(start_date, "start_date")
        end = _parse_date(end_date, "end_date")

        return cls(
            place_id=place_id,
            city_display_name=city_display_name if isinstance(city_display_name, str) else "",
            start_date=start,
            end_date=end,
            radius_miles=_parse_radius(radius_miles),
            genre_filter=frozenset(g for g in (genres or ()) if g),
        )


@dataclass(frozen=True)
class EventRecord:
    """A single event as returned by Ticketmaster. Filtered, never modified."""

    id: str
    name: str
    start_local_date: str | None
    start_local_time: str | None
    venue_name: str | None
    venue_city: str | None
    status: str | None
    detail_url: str | None

    @property
    def is_cancelled(self) -> bool:
        return (self.status or "").lower() in settings.CANCELLED_STATUS_CODES

    @classmethod
    def from_api(cls, event: dict) -> Self:
        """Build from a Ticketmaster event.

        Absent fields become None. A field that is present with the wrong
        JSON type (``"dates": null``, a numeric ``localDate``) is malformed.

        Raises:
            ValueError: If the event is not shaped like a Ticketmaster event.
        """
        if not isinstance(event, dict):
            raise ValueError("event is not an object")

        embedded = _object(event, "_embedded")
        venues = embedded.get("venues", [])
        if not isinstance(venues, list):
            raise ValueError("_embedded.venues is not a list")
        venue = venues[0] if venues else {}
        if not isinstance(venue, dict):
            raise ValueError("venue is not an object")

        dates = _object(event, "dates")
        start = _object(dates, "start")

        return cls(
            id=_text(event, "id") or "",
            name=_text(event, "name") or "",
            start_local_date=_text(start, "localDate") or None,
            start_local_time=_text(start, "localTime") or None,
            venue_name=_text(venue, "name"),
            venue_city=_text(_object(venue, "city"), "name"),
            status=_text(_object(dates, "status"), "code"),
            detail_url=_text(event, "url"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.start_local_date,
            "time": self.start_local_time,
            "venue_name": self.venue_name,
            "venue_city": self.venue_city,
            "status": self.status,
            "url": self.detail_url,
        }


@dataclass(frozen=True)
class SuggestionResult:
    """Outcome of one suggestion query. Failure is a flag, never an exception."""

    query: str
    suggestions: tuple[PlaceSuggestion, ...] = ()
    failed: bool = False
    error: str | None = None

    @classmethod
    def failure(cls, query: str, error: str) -> Self:
        return cls(query=query, suggestions=(), failed=True, error=error)


@dataclass(frozen=True)
class SearchResult:
    """Outcome of one event search: either events (possibly none) or an error."""

    criteria: SearchCriteria
    events: tuple[EventRecord, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return self.ok and not self.events

    @classmethod
    def failure(cls, criteria: SearchCriteria, error: str) -> Self:
        return cls(criteria=criteria, events=(), error=error)


def _parse_date(value: date | str | None, field_name: str) -> date:
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationError("Please select both dates", field=field_name)
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD", field=field_name)


def _parse_radius(value) -> int:
    if value is None or value == "":
        return settings.DEFAULT_RADIUS_MILES
    # JSON true would otherwise pass as 1 and 30.9 would truncate.
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError("Radius must be a whole number of miles", field="radius_miles")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Radius must be a whole number of miles", field="radius_miles")


def _object(parent: dict, key: str) -> dict:
    value = parent.get(key)
    if value is None and key not in parent:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} is not an object")
    return value


def _text(parent: dict, key: str) -> str | None:
    value = parent.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{key} is not a string")
    return value
