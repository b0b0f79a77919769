"""Event search orchestration: resolve, query Ticketmaster, filter locally."""

from concertfindr import settings
from concertfindr.errors import UpstreamError
from concertfindr.models import EventRecord, SearchCriteria, SearchResult
from concertfindr.observability import increment, log_event, record_failure


def genre_ids_for(genres) -> list[str]:
    """Map genre names to Ticketmaster genre ids, dropping unknown names."""
    ids = []
    for genre in sorted(genres):
        genre_id = settings.GENRE_IDS.get(genre)
        if genre_id:
            ids.append(genre_id)
        else:
            log_event("search.unknown_genre", genre=genre)
    return ids


def filter_events(events: list[EventRecord], criteria: SearchCriteria) -> list[EventRecord]:
    """Drop cancelled events and events outside the requested local dates.

    Runs regardless of what Ticketmaster already filtered. Dates compare as
    ISO strings; survivors keep their upstream order.
    """
    start = criteria.start_date.isoformat()
    end = criteria.end_date.isoformat()

    kept = []
    for event in events:
        if event.is_cancelled:
            continue
        if not event.start_local_date or not start <= event.start_local_date <= end:
            continue
        kept.append(event)
    return kept


class EventSearchOrchestrator:
    """Run one concert search for a set of criteria."""

    def __init__(self, resolver, ticketmaster):
        self.resolver = resolver
        self.ticketmaster = ticketmaster

    def search(self, criteria: SearchCriteria, token: str | None) -> SearchResult:
        """
        Resolve the place, query events and post-filter them.

        Any upstream failure aborts the whole search and comes back as a
        single error message on the result; partial results are never
        returned.

        Raises:
            MissingSessionTokenError: If the place is not cached and no token
                is supplied.
        """
        increment("search.requests")
        try:
            place = self.resolver.resolve(criteria.place_id, token)
            raw_events = self.ticketmaster.search_events(
                latlong=place.latlong,
                start_date=criteria.start_date,
                end_date=criteria.end_date,
                radius=criteria.radius_miles,
                genre_ids=genre_ids_for(criteria.genre_filter),
                size=settings.TICKETMASTER_PAGE_SIZE,
            )
            events = _parse_events(raw_events)
        except UpstreamError as e:
            record_failure("search", e.message, place_id=criteria.place_id)
            return SearchResult.failure(criteria, f"Failed to fetch concerts: {e.message}")

        kept = filter_events(events, criteria)

        log_event(
            "search.completed",
            place_id=criteria.place_id,
            start=criteria.start_date.isoformat(),
            end=criteria.end_date.isoformat(),
            fetched=len(events),
            kept=len(kept),
        )
        return SearchResult(criteria=criteria, events=tuple(kept))


def _parse_events(raw_events: list) -> list[EventRecord]:
    events = []
    for i, raw in enumerate(raw_events):
        try:
            events.append(EventRecord.from_api(raw))
        except ValueError as e:
            raise UpstreamError("Ticketmaster", f"malformed event at index {i}: {e}") from e
    return events
