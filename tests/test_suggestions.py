"""Tests for city suggestions, debounce and last-query-wins delivery.

Run with: pytest tests/test_suggestions.py -v
"""

import pytest
import requests

from conftest import FakeResponse, mapbox_suggestion, suggest_payload
from concertfindr import settings
from concertfindr.errors import MissingSessionTokenError
from concertfindr.suggestions import CitySuggestionFetcher, Debouncer


@pytest.fixture
def fetcher(mapbox, timers) -> CitySuggestionFetcher:
    return CitySuggestionFetcher(mapbox, debounce_seconds=0.3, timer_factory=timers)


class TestSuggest:
    """Tests for the immediate suggest() call."""

    @pytest.mark.parametrize("query", ["", "C", "Ch", "  Ch  "])
    def test_short_query_skips_network(self, fetcher, mapbox_session, query):
        """Input of two characters or fewer means no suggestions, no request."""
        result = fetcher.suggest(query, "tok")
        assert result.suggestions == ()
        assert not result.failed
        assert mapbox_session.calls == []

    def test_short_query_needs_no_token(self, fetcher):
        assert fetcher.suggest("Ch", None).suggestions == ()

    def test_chicago_scenario(self, fetcher, mapbox_session):
        """'Chi' returns one suggestion displayed as 'Chicago, IL'."""
        mapbox_session.route("/suggest", FakeResponse(200, suggest_payload(
            mapbox_suggestion("Chicago", "abc", "IL"),
        )))

        result = fetcher.suggest("Chi", "tok-1")

        assert not result.failed
        assert len(result.suggestions) == 1
        suggestion = result.suggestions[0]
        assert suggestion.id == "abc"
        assert suggestion.display_text == "Chicago, IL"

        call = mapbox_session.calls[0]
        assert call["params"]["q"] == "Chi"
        assert call["params"]["session_token"] == "tok-1"
        assert call["params"]["types"] == "place"
        assert call["timeout"] == settings.REQUEST_TIMEOUT_SEC

    def test_flat_suggestion_shape(self, fetcher, mapbox_session):
        """Suggestions with top-level id/region_code are accepted too."""
        mapbox_session.route("/suggest", FakeResponse(200, suggest_payload(
            {"name": "Chicago", "id": "abc", "region_code": "IL"},
        )))
        result = fetcher.suggest("Chi", "tok")
        assert result.suggestions[0].display_text == "Chicago, IL"

    def test_upstream_order_preserved(self, fetcher, mapbox_session):
        mapbox_session.route("/suggest", FakeResponse(200, suggest_payload(
            mapbox_suggestion("Springfield", "s-il", "IL"),
            mapbox_suggestion("Springfield", "s-mo", "MO"),
            mapbox_suggestion("Springfield", "s-ma", "MA"),
        )))
        result = fetcher.suggest("Springf", "tok")
        assert [s.id for s in result.suggestions] == ["s-il", "s-mo", "s-ma"]

    def test_suggestion_without_region(self, fetcher, mapbox_session):
        mapbox_session.route("/suggest", FakeResponse(200, suggest_payload(
            mapbox_suggestion("Washington", "dc"),
            {"name": "No id here"},
        )))
        result = fetcher.suggest("Wash", "tok")
        assert [s.display_text for s in result.suggestions] == ["Washington"]

    def test_missing_token_is_precondition_error(self, fetcher, mapbox_session):
        with pytest.raises(MissingSessionTokenError):
            fetcher.suggest("Chicago", "")
        assert mapbox_session.calls == []

    def test_http_error_returns_failed_result(self, fetcher, mapbox_session):
        """Non-success status comes back as a flag, not an exception."""
        mapbox_session.route("/suggest", FakeResponse(401, {"message": "Not Authorized - Invalid Token"}))
        result = fetcher.suggest("Chicago", "tok")
        assert result.failed
        assert result.suggestions == ()
        assert "Invalid Token" in result.error
        assert len(mapbox_session.calls) == 1

    def test_network_error_returns_failed_result(self, fetcher, mapbox_session):
        mapbox_session.route("/suggest", requests.ConnectionError("connection refused"))
        result = fetcher.suggest("Chicago", "tok")
        assert result.failed
        assert len(mapbox_session.calls) == 1

    def test_timeout_returns_failed_result(self, fetcher, mapbox_session):
        mapbox_session.route("/suggest", requests.Timeout())
        result = fetcher.suggest("Chicago", "tok")
        assert result.failed
        assert "timed out" in result.error


class TestDebouncedRequest:
    """Tests for request(): coalescing and last-query-wins."""

    def test_only_last_call_reaches_network(self, fetcher, mapbox_session, timers):
        """Fast typing results in a single request for the final input."""
        mapbox_session.route("/suggest", lambda url, params: FakeResponse(200, suggest_payload(
            mapbox_suggestion(params["q"], params["q"].lower()),
        )))
        received = []

        for text in ["Chi", "Chic", "Chica", "Chicag"]:
            fetcher.request(text, "tok", received.append)
        assert mapbox_session.calls == []
        assert len(timers.pending) == 1
        assert timers.pending[0].interval == 0.3

        timers.fire_pending()

        assert len(mapbox_session.calls) == 1
        assert mapbox_session.calls[0]["params"]["q"] == "Chicag"
        assert [r.query for r in received] == ["Chicag"]

    def test_cancelled_timer_never_fires(self, fetcher, mapbox_session, timers):
        mapbox_session.route("/suggest", FakeResponse(200, suggest_payload()))
        received = []
        fetcher.request("Chi", "tok", received.append)
        first = timers.timers[0]
        fetcher.request("Chic", "tok", received.append)

        first.fire()

        assert first.cancelled
        assert received == []
        assert mapbox_session.calls == []

    def test_obsolete_in_flight_result_is_discarded(self, fetcher, mapbox_session, timers):
        """A response for an older query never overwrites a newer one."""
        received = []

        def respond(url, params):
            if params["q"] == "Chic":
                # The user keeps typing while this request is in flight.
                fetcher.request("Chicago", "tok", received.append)
            return FakeResponse(200, suggest_payload(mapbox_suggestion(params["q"], params["q"])))

        mapbox_session.route("/suggest", respond)

        fetcher.request("Chic", "tok", received.append)
        timers.timers[0].fire()
        assert received == []

        timers.timers[1].fire()
        assert [r.query for r in received] == ["Chicago"]
        assert [c["params"]["q"] for c in mapbox_session.calls] == ["Chic", "Chicago"]

    def test_short_query_clears_immediately(self, fetcher, mapbox_session, timers):
        """Deleting back to two characters empties the list and drops the pending call."""
        mapbox_session.route("/suggest", FakeResponse(200, suggest_payload(mapbox_suggestion("Chicago", "abc"))))
        received = []

        fetcher.request("Chi", "tok", received.append)
        fetcher.request("Ch", "tok", received.append)

        assert len(received) == 1
        assert received[0].suggestions == ()
        assert timers.pending == []

        timers.timers[0].fire()
        assert len(received) == 1
        assert mapbox_session.calls == []

    def test_request_without_token_raises(self, fetcher):
        with pytest.raises(MissingSessionTokenError):
            fetcher.request("Chicago", None, lambda r: None)

    def test_cancel_drops_in_flight_result(self, fetcher, mapbox_session, timers):
        """Navigating away while a request is in flight discards its result."""
        received = []

        def respond(url, params):
            fetcher.cancel()
            return FakeResponse(200, suggest_payload(mapbox_suggestion("Chicago", "abc")))

        mapbox_session.route("/suggest", respond)
        fetcher.request("Chicago", "tok", received.append)
        timers.fire_pending()

        assert received == []
        assert len(mapbox_session.calls) == 1


class TestDebouncer:
    """Tests for the Debouncer itself."""

    def test_generations_increase(self, timers):
        debouncer = Debouncer(0.3, timer_factory=timers)
        g1 = debouncer.call(lambda gen: None)
        g2 = debouncer.call(lambda gen: None)
        assert g2 > g1
        assert debouncer.is_current(g2)
        assert not debouncer.is_current(g1)

    def test_timers_are_daemons(self, timers):
        debouncer = Debouncer(0.3, timer_factory=timers)
        debouncer.call(lambda gen: None)
        assert timers.timers[0].daemon is True

    def test_real_timer_runs_last_call(self):
        """With threading.Timer the last call still wins."""
        import threading

        done = threading.Event()
        seen = []

        def record(gen, value):
            seen.append(value)
            done.set()

        debouncer = Debouncer(0.2)
        debouncer.call(record, "first")
        debouncer.call(record, "second")

        assert done.wait(5)
        assert seen == ["second"]
