"""City suggestion fetching with debounce and last-query-wins delivery."""

import threading
from threading import Lock

from concertfindr import settings
from concertfindr.errors import MissingSessionTokenError, UpstreamError
from concertfindr.models import PlaceSuggestion, SuggestionResult
from concertfindr.observability import increment, log_event, record_failure


class Debouncer:
    """Coalesce rapid calls so only the last one in a quiet window runs.

    Every call bumps a generation number. A scheduled call only runs if its
    generation is still current, and callers use ``is_current`` to drop
    results that arrive after a newer call was made.
    """

    def __init__(self, wait_seconds: float, timer_factory=threading.Timer):
        self.wait_seconds = wait_seconds
        self._timer_factory = timer_factory
        self._timer = None
        self._generation = 0
        self._lock = Lock()

    def call(self, fn, *args) -> int:
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._timer is not None:
                self._timer.cancel()
            timer = self._timer_factory(self.wait_seconds, self._fire, args=(generation, fn, args))
            timer.daemon = True
            self._timer = timer
        timer.start()
        return generation

    def _fire(self, generation: int, fn, args: tuple) -> None:
        if not self.is_current(generation):
            return
        fn(generation, *args)

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def cancel(self) -> None:
        """Drop the pending call and make anything in flight stale."""
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class CitySuggestionFetcher:
    """Turn partial city input into ranked place suggestions."""

    def __init__(
        self,
        mapbox,
        debounce_seconds: float = settings.SUGGEST_DEBOUNCE_SEC,
        timer_factory=threading.Timer,
    ):
        self.mapbox = mapbox
        self._debouncer = Debouncer(debounce_seconds, timer_factory=timer_factory)

    def suggest(self, query: str, token: str | None) -> SuggestionResult:
        """Fetch suggestions for one query right away.

        Input shorter than ``SUGGEST_MIN_QUERY_LENGTH`` yields an empty result
        without a network call. Upstream failures come back as a failed
        result, never as an exception.

        Raises:
            MissingSessionTokenError: If no session token is supplied.
        """
        query = (query or "").strip()
        if len(query) < settings.SUGGEST_MIN_QUERY_LENGTH:
            return SuggestionResult(query=query)
        if not token:
            raise MissingSessionTokenError("city suggestions")

        increment("suggest.requests")
        try:
            raw = self.mapbox.suggest(query, token)
        except UpstreamError as e:
            record_failure("suggest", e.message, query=query)
            return SuggestionResult.failure(query, e.message)

        suggestions = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            suggestion = PlaceSuggestion.from_api(item)
            if suggestion is not None:
                suggestions.append(suggestion)

        return SuggestionResult(query=query, suggestions=tuple(suggestions))

    def request(self, query: str, token: str | None, on_result) -> None:
        """Debounced ``suggest``; ``on_result(result)`` gets only the latest answer."""
        stripped = (query or "").strip()
        if len(stripped) < settings.SUGGEST_MIN_QUERY_LENGTH:
            self._debouncer.cancel()
            on_result(SuggestionResult(query=stripped))
            return
        if not token:
            raise MissingSessionTokenError("city suggestions")

        self._debouncer.call(self._run, stripped, token, on_result)

    def _run(self, generation: int, query: str, token: str, on_result) -> None:
        result = self.suggest(query, token)
        if not self._debouncer.is_current(generation):
            increment("suggest.discarded")
            log_event("suggest.discarded", query=query)
            return
        on_result(result)

    def cancel(self) -> None:
        self._debouncer.cancel()
