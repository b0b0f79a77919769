#!/usr/bin/env python3
"""Flask JSON API in front of the ConcertFindr search workflow."""

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from concertfindr import settings
from concertfindr.coordinates import CoordinateCache, CoordinateResolver
from concertfindr.errors import MissingSessionTokenError, ValidationError
from concertfindr.models import SearchCriteria
from concertfindr.observability import increment, record_failure, snapshot
from concertfindr.preferences import GenrePreferenceStore
from concertfindr.search import EventSearchOrchestrator
from concertfindr.session_token import SessionTokenManager
from concertfindr.suggestions import CitySuggestionFetcher


def create_app(
    mapbox=None,
    ticketmaster=None,
    preferences: GenrePreferenceStore | None = None,
    cache: CoordinateCache | None = None,
    config: dict | None = None,
) -> Flask:
    """Build the app. Clients default to ones configured from config.json/env."""
    if mapbox is None:
        from concertfindr.mapbox_client import MapboxClient
        mapbox = MapboxClient()
    if ticketmaster is None:
        from concertfindr.ticketmaster_client import TicketmasterClient
        ticketmaster = TicketmasterClient()

    app = Flask(__name__)
    app.config.update(config or {})
    CORS(app)

    # Upstream-calling routes get tighter per-route limits below.
    limiter = Limiter(
        get_remote_address,
        app=app,
        default_limits=["300 per hour"],
        storage_uri="memory://",
    )
    # Route limits only hold a weak reference to the limiter; the app owns it.
    app.extensions["concertfindr_limiter"] = limiter

    # Shared for the process lifetime: coordinates for a place never change.
    coordinate_cache = cache if cache is not None else CoordinateCache()
    fetcher = CitySuggestionFetcher(mapbox)
    orchestrator = EventSearchOrchestrator(CoordinateResolver(mapbox, coordinate_cache), ticketmaster)
    store = preferences or GenrePreferenceStore()
    tokens = SessionTokenManager()

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({"error": e.message, "field": e.field}), 400

    @app.errorhandler(MissingSessionTokenError)
    def handle_missing_token(e):
        record_failure("server.session_token", e.message)
        return jsonify({"error": "session_token is required"}), 400

    @app.route('/api/session', methods=['POST'])
    def new_session():
        """Start a new autocomplete session."""
        increment("server.api.session.calls")
        return jsonify({"session_token": tokens.issue()})

    @app.route('/api/suggest')
    @limiter.limit("120 per minute")  # Mapbox Suggest
    def suggest():
        """
        City suggestions for partial input.

        Query params:
            q: Text typed so far
            session_token: Token from POST /api/session

        Response:
        {
            "query": "Chi",
            "suggestions": [{"id": "...", "name": "Chicago", "region_code": "IL",
                             "display_text": "Chicago, IL"}]
        }
        """
        increment("server.api.suggest.calls")
        query = request.args.get('q', '')
        token = request.args.get('session_token', '')

        result = fetcher.suggest(query, token)
        payload = {
            "query": result.query,
            "suggestions": [
                {
                    "id": s.id,
                    "name": s.primary_name,
                    "region_code": s.region_code,
                    "display_text": s.display_text,
                }
                for s in result.suggestions
            ],
        }
        if result.failed:
            payload["error"] = result.error
            return jsonify(payload), 502
        return jsonify(payload)

    @app.route('/api/search', methods=['POST'])
    @limiter.limit("30 per minute")  # Mapbox Retrieve + Ticketmaster
    def search():
        """
        Search concerts near a selected city.

        Request:
        {
            "place_id": "...", "city": "Chicago, IL",
            "start_date": "2025-06-01", "end_date": "2025-06-01",
            "radius": 30, "genres": ["Rock"], "session_token": "..."
        }

        Genres default to the saved selection when omitted.
        """
        increment("server.api.search.calls")
        data = _json_object()

        genres = data.get("genres")
        if genres is None:
            genres = store.load()
        elif not isinstance(genres, list) or not all(isinstance(g, str) for g in genres):
            raise ValidationError("genres must be a list of names", field="genres")

        criteria = SearchCriteria.from_input(
            place_id=data.get("place_id"),
            city_display_name=data.get("city"),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            radius_miles=data.get("radius"),
            genres=genres,
        )

        result = orchestrator.search(criteria, data.get("session_token"))
        if not result.ok:
            return jsonify({"error": result.error, "events": []}), 502

        return jsonify({
            "events": [e.to_dict() for e in result.events],
            "count": len(result.events),
            "empty": result.is_empty,
            "city": criteria.city_display_name,
        })

    @app.route('/api/genres', methods=['GET'])
    def get_genres():
        increment("server.api.genres.calls")
        return jsonify({
            "genres": store.load(),
            "available": sorted(settings.GENRE_IDS),
        })

    @app.route('/api/genres', methods=['PUT'])
    def put_genres():
        increment("server.api.genres.calls")
        data = _json_object()
        genres = data.get("genres")
        if not isinstance(genres, list) or not all(isinstance(g, str) for g in genres):
            raise ValidationError("genres must be a list of names", field="genres")

        unknown = sorted(set(genres) - set(settings.GENRE_IDS))
        if unknown:
            raise ValidationError(f"Unknown genres: {', '.join(unknown)}", field="genres")

        store.save(genres)
        return jsonify({"genres": store.load()})

    @app.route('/api/debug/health')
    def debug_health():
        """Expose lightweight process health and recent failures."""
        return jsonify({
            "status": "ok",
            "coordinate_cache_entries": len(coordinate_cache),
            "observability": snapshot(),
        })

    return app


def _json_object() -> dict:
    """Request body as a dict; an empty body counts as {}."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


if __name__ == '__main__':
    print("Starting ConcertFindr server...")
    print("Open http://localhost:8000/api/genres in your browser")
    create_app().run(port=8000, debug=True)
