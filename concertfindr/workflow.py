"""The city → dates → concerts interaction, with every token transition in one place.

A UI (the Flask API, the CLI, or a mobile front end) drives this object with
user actions and renders whatever it returns.
"""

import threading
from dataclasses import dataclass

from concertfindr import settings
from concertfindr.coordinates import CoordinateCache, CoordinateResolver
from concertfindr.models import PlaceSuggestion, SearchCriteria, SearchResult
from concertfindr.observability import log_event
from concertfindr.preferences import GenrePreferenceStore
from concertfindr.search import EventSearchOrchestrator
from concertfindr.session_token import SessionTokenManager
from concertfindr.suggestions import CitySuggestionFetcher


@dataclass(frozen=True)
class PlaceSelection:
    place_id: str
    display_name: str
    session_token: str  # token the retrieve call will spend


class SearchWorkflow:
    """Owns the token manager, fetcher, resolver, orchestrator and genre store."""

    def __init__(
        self,
        mapbox,
        ticketmaster,
        preferences: GenrePreferenceStore | None = None,
        cache: CoordinateCache | None = None,
        tokens: SessionTokenManager | None = None,
        debounce_seconds: float = settings.SUGGEST_DEBOUNCE_SEC,
        timer_factory=threading.Timer,
    ):
        self.tokens = tokens or SessionTokenManager()
        self.fetcher = CitySuggestionFetcher(mapbox, debounce_seconds, timer_factory=timer_factory)
        self.resolver = CoordinateResolver(mapbox, cache)
        self.orchestrator = EventSearchOrchestrator(self.resolver, ticketmaster)
        self.preferences = preferences or GenrePreferenceStore()

        self.selection: PlaceSelection | None = None
        self.genres: frozenset[str] = frozenset(self.preferences.load())
        self._closed = False

        self.tokens.issue()

    def city_changed(self, text: str, on_result) -> None:
        """Handle a keystroke in the city field.

        ``on_result`` receives a SuggestionResult, possibly from a timer
        thread, and only for the most recent input.
        """
        self.selection = None
        # Typing again after close() reopens the flow.
        self._closed = False
        if not (text or "").strip():
            self.clear_city()
            return

        token = self.tokens.begin()
        self.fetcher.request(text, token, lambda result: self._deliver(result, on_result))

    def _deliver(self, result, on_result) -> None:
        if self._closed:
            return
        on_result(result)

    def select_place(self, suggestion: PlaceSuggestion) -> PlaceSelection:
        """Remember the chosen city and close the autocomplete session."""
        token = self.tokens.require("place selection")
        self.fetcher.cancel()
        self.selection = PlaceSelection(
            place_id=suggestion.id,
            display_name=suggestion.display_text,
            session_token=token,
        )
        self.tokens.rotate()
        log_event("workflow.place_selected", place_id=suggestion.id)
        return self.selection

    def clear_city(self) -> None:
        self.fetcher.cancel()
        self.selection = None
        self.tokens.rotate()

    def set_genres(self, genres) -> frozenset[str]:
        self.genres = frozenset(g for g in genres if g)
        self.preferences.save(self.genres)
        return self.genres

    def build_criteria(self, start_date, end_date, radius_miles=None) -> SearchCriteria:
        """
        Validate the form and build criteria for the current selection.

        Raises:
            ValidationError: If no city is selected or the dates/radius are invalid.
        """
        selection = self.selection
        return SearchCriteria.from_input(
            place_id=selection.place_id if selection else None,
            city_display_name=selection.display_name if selection else None,
            start_date=start_date,
            end_date=end_date,
            radius_miles=radius_miles,
            genres=self.genres,
        )

    def search(self, start_date, end_date, radius_miles=None) -> SearchResult:
        """Validate, run the search and start a fresh session.

        Raises:
            ValidationError: Before any network call, if the form is incomplete.
        """
        criteria = self.build_criteria(start_date, end_date, radius_miles)
        result = self.orchestrator.search(criteria, self.selection.session_token)
        self.tokens.rotate()
        return result

    def close(self) -> None:
        """Leave the search flow; pending and late suggestion results are dropped.

        The next ``city_changed`` reopens the flow with a fresh token.
        """
        self._closed = True
        self.fetcher.cancel()
        self.tokens.end()
