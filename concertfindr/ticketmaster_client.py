"""Ticketmaster Discovery API client to find concerts near a point."""

from datetime import date

from concertfindr import settings
from concertfindr.config import get_ticketmaster_key
from concertfindr.errors import UpstreamError
from concertfindr.upstream import get_json, make_session


class TicketmasterClient:
    """Client for Ticketmaster Discovery API."""

    def __init__(self, api_key: str | None = None, session=None):
        self.api_key = api_key or get_ticketmaster_key()

        if not self.api_key:
            raise ValueError(
                "Ticketmaster API key required. Set TICKETMASTER_API_KEY env var "
                "or pass api_key to constructor."
            )
        self.session = session or make_session()

    def search_events(
        self,
        latlong: str,
        start_date: date,
        end_date: date,
        radius: int = settings.DEFAULT_RADIUS_MILES,
        genre_ids: list[str] | None = None,
        size: int = settings.TICKETMASTER_PAGE_SIZE,
    ) -> list[dict]:
        """
        Search for events around a point on Ticketmaster.

        Args:
            latlong: "lat,lng" of the search centre
            start_date: First local date to include
            end_date: Last local date to include
            radius: Search radius in miles
            genre_ids: Ticketmaster genre ids; None or empty sends no genre filter
            size: Number of results (max 200, first page only)

        Returns:
            Raw event dicts in upstream order

        Raises:
            UpstreamError: On HTTP failure or an unusable body
        """
        params = self.build_search_params(latlong, start_date, end_date, radius, genre_ids, size)

        data = get_json(
            self.session,
            f"{settings.TICKETMASTER_API_BASE}/events.json",
            params=params,
            service="Ticketmaster",
        )

        # No _embedded at all means no matches.
        embedded = data.get("_embedded", {})
        if not isinstance(embedded, dict):
            raise UpstreamError("Ticketmaster", "_embedded is not an object")
        events = embedded.get("events", [])
        if not isinstance(events, list):
            raise UpstreamError("Ticketmaster", "events is not a list")
        return events

    def build_search_params(
        self,
        latlong: str,
        start_date: date,
        end_date: date,
        radius: int = settings.DEFAULT_RADIUS_MILES,
        genre_ids: list[str] | None = None,
        size: int = settings.TICKETMASTER_PAGE_SIZE,
    ) -> dict:
        # No "Z" suffix: Ticketmaster then matches on the venue's local time.
        params = {
            "apikey": self.api_key,
            "latlong": latlong,
            "radius": radius,
            "unit": settings.RADIUS_UNIT,
            "startDateTime": f"{start_date.isoformat()}T00:00:00",
            "endDateTime": f"{end_date.isoformat()}T23:59:59",
            "sort": settings.TICKETMASTER_SORT,
            "size": min(size, settings.TICKETMASTER_PAGE_SIZE),
        }

        if genre_ids:
            params["genreId"] = ",".join(genre_ids)

        return params
