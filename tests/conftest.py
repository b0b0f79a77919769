"""Pytest configuration and shared fixtures."""

import pytest

from concertfindr import observability
from concertfindr.mapbox_client import MapboxClient
from concertfindr.preferences import GenrePreferenceStore
from concertfindr.ticketmaster_client import TicketmasterClient

_NO_JSON = object()


class FakeResponse:
    """Just enough of requests.Response for the clients."""

    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Stand-in for requests.Session that records every GET.

    Routes map a URL substring to a FakeResponse, an exception instance to
    raise, or a callable(url, params) returning either.
    """

    def __init__(self):
        self.routes: dict = {}
        self.calls: list[dict] = []
        self.headers: dict = {}

    def route(self, fragment: str, response):
        self.routes[fragment] = response
        return self

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        for fragment, response in self.routes.items():
            if fragment in url:
                if callable(response) and not isinstance(response, FakeResponse):
                    response = response(url, params)
                if isinstance(response, Exception):
                    raise response
                return response
        raise AssertionError(f"Unexpected request to {url}")

    def calls_to(self, fragment: str) -> list[dict]:
        return [c for c in self.calls if fragment in c["url"]]


class ManualTimer:
    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled:
            self.function(*self.args, **self.kwargs)


class ManualTimerFactory:
    """Timer factory whose timers only fire when a test says so."""

    def __init__(self):
        self.timers: list[ManualTimer] = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = ManualTimer(interval, function, args=args, kwargs=kwargs)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]

    def fire_pending(self):
        for timer in self.pending:
            timer.fire()


def suggest_payload(*items):
    return {"suggestions": list(items), "attribution": "© Mapbox"}


def mapbox_suggestion(name, mapbox_id, region_code=None):
    item = {"name": name, "mapbox_id": mapbox_id, "feature_type": "place"}
    if region_code:
        item["context"] = {"region": {"name": name, "region_code": region_code}}
    return item


def retrieve_payload(lng, lat):
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [lng, lat]},
                "properties": {"name": "Chicago"},
            }
        ],
    }


def tm_event(event_id, local_date, status="onsale", local_time="19:30:00", venue="Metro", city="Chicago"):
    event = {
        "id": event_id,
        "name": f"Show {event_id}",
        "url": f"https://www.ticketmaster.com/event/{event_id}",
        "dates": {
            "start": {"localDate": local_date},
            "status": {"code": status},
        },
        "_embedded": {"venues": [{"name": venue, "city": {"name": city}}]},
    }
    if local_time:
        event["dates"]["start"]["localTime"] = local_time
    return event


def events_payload(*events):
    if not events:
        return {"page": {"size": 200, "totalElements": 0}}
    return {"_embedded": {"events": list(events)}, "page": {"size": 200}}


@pytest.fixture(autouse=True)
def reset_observability():
    observability.reset()
    yield
    observability.reset()


@pytest.fixture
def mapbox_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def tm_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def mapbox(mapbox_session) -> MapboxClient:
    return MapboxClient(access_token="mapbox-test-token", session=mapbox_session)


@pytest.fixture
def ticketmaster(tm_session) -> TicketmasterClient:
    return TicketmasterClient(api_key="tm-test-key", session=tm_session)


@pytest.fixture
def timers() -> ManualTimerFactory:
    return ManualTimerFactory()


@pytest.fixture
def preferences(tmp_path) -> GenrePreferenceStore:
    return GenrePreferenceStore(tmp_path / "genre_preferences.json")
