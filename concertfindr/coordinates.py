"""Resolve place ids to coordinates, consulting an in-memory cache first."""

from numbers import Real

from concertfindr.errors import MissingSessionTokenError, PlaceResolutionError, UpstreamError
from concertfindr.models import ResolvedPlace
from concertfindr.observability import increment, log_event, record_failure


class CoordinateCache:
    """Process-lifetime map of place id to ResolvedPlace. No expiry, no eviction."""

    def __init__(self):
        self._entries: dict[str, ResolvedPlace] = {}

    def get(self, place_id: str) -> ResolvedPlace | None:
        return self._entries.get(place_id)

    def set(self, place: ResolvedPlace) -> None:
        # Coordinates for a place never change within a run; first write wins.
        self._entries.setdefault(place.place_id, place)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, place_id: str) -> bool:
        return place_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class CoordinateResolver:
    """Cache-or-fetch lookup of a place's latitude/longitude."""

    def __init__(self, mapbox, cache: CoordinateCache | None = None):
        self.mapbox = mapbox
        self.cache = cache if cache is not None else CoordinateCache()

    def resolve(self, place_id: str, token: str | None) -> ResolvedPlace:
        """
        Return coordinates for a place id.

        Raises:
            PlaceResolutionError: If retrieve fails or its body has no usable point.
            MissingSessionTokenError: On a cache miss with no session token.
        """
        cached = self.cache.get(place_id)
        if cached is not None:
            increment("resolve.cache_hits")
            return cached

        if not token:
            raise MissingSessionTokenError("place retrieve")

        increment("resolve.cache_misses")
        try:
            data = self.mapbox.retrieve(place_id, token)
        except UpstreamError as e:
            record_failure("resolve", e.detail, place_id=place_id, status=e.status)
            raise PlaceResolutionError(place_id, e.detail, status=e.status) from e

        place = _place_from_feature_collection(place_id, data)
        self.cache.set(place)
        log_event("resolve.cached", place_id=place_id, lat=place.latitude, lng=place.longitude)
        return place


def _place_from_feature_collection(place_id: str, data: dict) -> ResolvedPlace:
    features = data.get("features")
    if not isinstance(features, list) or not features:
        raise PlaceResolutionError(place_id, "no features in retrieve response")

    feature = features[0] if isinstance(features[0], dict) else {}
    geometry = feature.get("geometry") or {}
    coordinates = geometry.get("coordinates")
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
        raise PlaceResolutionError(place_id, "could not extract coordinates")

    # GeoJSON order is [longitude, latitude].
    lng, lat = coordinates[0], coordinates[1]
    if not _is_number(lat) or not _is_number(lng):
        raise PlaceResolutionError(place_id, "could not extract coordinates")

    return ResolvedPlace(place_id=place_id, latitude=float(lat), longitude=float(lng))


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)
