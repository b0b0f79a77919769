"""Shared HTTP plumbing for the upstream API clients."""

import requests

from concertfindr import settings
from concertfindr.errors import UpstreamError
from concertfindr.observability import increment, timed


def make_session() -> requests.Session:
    """Create a session with the default headers.

    No retry adapter is mounted: a failed call is reported, never repeated.
    """
    s = requests.Session()
    s.headers.update({"User-Agent": settings.USER_AGENT, "Accept": "application/json"})
    return s


def error_detail(response) -> str:
    """Pull a human-readable message out of an error response body."""
    try:
        data = response.json()
    except ValueError:
        return (response.text or "").strip()[:200] or "No response body"

    if not isinstance(data, dict):
        return str(data)[:200]

    # Ticketmaster
    fault = data.get("fault")
    if isinstance(fault, dict) and fault.get("faultstring"):
        return fault["faultstring"]
    errors = data.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict) and errors[0].get("detail"):
        return errors[0]["detail"]

    # Mapbox
    if data.get("message"):
        return data["message"]

    return "Unknown error"


def get_json(session, url: str, params: dict, service: str) -> dict:
    """GET a JSON object, raising UpstreamError on any failure.

    Raises:
        UpstreamError: On connection errors, timeouts, non-2xx status, or a
            body that is not a JSON object.
    """
    metric = "upstream." + service.lower().replace(" ", "_")
    increment(f"{metric}.calls")
    try:
        with timed(metric):
            response = session.get(url, params=params, timeout=settings.REQUEST_TIMEOUT_SEC)
    except requests.Timeout:
        raise UpstreamError(service, f"request timed out after {settings.REQUEST_TIMEOUT_SEC}s")
    except requests.RequestException as e:
        raise UpstreamError(service, str(e))

    if not 200 <= response.status_code < 300:
        raise UpstreamError(service, error_detail(response), status=response.status_code)

    try:
        data = response.json()
    except ValueError:
        raise UpstreamError(service, "response was not valid JSON", status=response.status_code)

    if not isinstance(data, dict):
        raise UpstreamError(service, "unexpected response shape", status=response.status_code)

    return data
