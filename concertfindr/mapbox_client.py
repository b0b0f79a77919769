"""Mapbox Search Box API client for city autocomplete and place retrieval."""

from urllib.parse import quote

from concertfindr import settings
from concertfindr.config import get_mapbox_token
from concertfindr.errors import UpstreamError
from concertfindr.upstream import get_json, make_session


class MapboxClient:
    """Client for the Mapbox Search Box suggest and retrieve endpoints."""

    def __init__(self, access_token: str | None = None, session=None):
        self.access_token = access_token or get_mapbox_token()

        if not self.access_token:
            raise ValueError(
                "Mapbox access token required. Set MAPBOX_ACCESS_TOKEN env var "
                "or pass access_token to constructor."
            )
        self.session = session or make_session()

    def suggest(self, query: str, session_token: str) -> list[dict]:
        """
        Fetch city suggestions for partial input.

        Args:
            query: Text typed so far
            session_token: Token grouping this autocomplete session

        Returns:
            Raw suggestion dicts in upstream (relevance) order

        Raises:
            UpstreamError: On HTTP failure or an unusable body
        """
        params = {
            "q": query,
            "session_token": session_token,
            "access_token": self.access_token,
            "types": settings.SUGGEST_TYPES,
            "country": settings.SUGGEST_COUNTRY,
            "language": settings.SUGGEST_LANGUAGE,
            "limit": settings.SUGGEST_LIMIT,
        }

        data = get_json(
            self.session,
            f"{settings.MAPBOX_SEARCH_BASE}/suggest",
            params=params,
            service="Mapbox Suggest",
        )

        suggestions = data.get("suggestions", [])
        if not isinstance(suggestions, list):
            raise UpstreamError("Mapbox Suggest", "suggestions is not a list")
        return suggestions

    def retrieve(self, place_id: str, session_token: str) -> dict:
        """
        Retrieve the GeoJSON feature collection for a suggested place.

        This call spends the session token.
        """
        params = {
            "session_token": session_token,
            "access_token": self.access_token,
        }

        return get_json(
            self.session,
            f"{settings.MAPBOX_SEARCH_BASE}/retrieve/{quote(place_id, safe='')}",
            params=params,
            service="Mapbox Retrieve",
        )
