"""Central settings for ConcertFindr."""

# =============================================================================
# UPSTREAM APIS
# =============================================================================
# MAPBOX SEARCH BOX API:
#   - suggest + retrieve calls are billed per session_token
#   - Docs: https://docs.mapbox.com/api/search/search-box/
#
# TICKETMASTER DISCOVERY API:
#   - 5 requests/second (5 QPS), 5000 requests/day
#   - size is capped at 200 per page
#   - Docs: https://developer.ticketmaster.com/products-and-docs/apis/discovery-api/v2/
#
# =============================================================================

MAPBOX_SEARCH_BASE = "https://api.mapbox.com/search/searchbox/v1"
TICKETMASTER_API_BASE = "https://app.ticketmaster.com/discovery/v2"
USER_AGENT = "concertfindr/1.0"

# HTTP timeout settings
REQUEST_TIMEOUT_SEC = 15          # Per-request timeout for every upstream call.

# City autocomplete settings
SUGGEST_MIN_QUERY_LENGTH = 3      # Shorter input means "no suggestions", no network call.
SUGGEST_DEBOUNCE_SEC = 0.3        # Quiet window before a keystroke query reaches the network.
SUGGEST_LIMIT = 5                 # Max suggestions per query.
SUGGEST_TYPES = "place"           # Mapbox feature types (cities/localities).
SUGGEST_COUNTRY = "us"
SUGGEST_LANGUAGE = "en"

# Event search settings
DEFAULT_RADIUS_MILES = 30
MAX_RADIUS_MILES = 19999          # Ticketmaster rejects larger radius values.
RADIUS_UNIT = "miles"
TICKETMASTER_PAGE_SIZE = 200      # First page only; no pagination.
TICKETMASTER_SORT = "date,asc"
CANCELLED_STATUS_CODES = ("cancelled", "canceled")

# Ticketmaster music genre ids, keyed by the names shown to the user.
GENRE_IDS = {
    "Alternative": "KnvZfZ7vAvv",
    "Blues": "KnvZfZ7vAvd",
    "Classical": "KnvZfZ7vAeJ",
    "Country": "KnvZfZ7vAv6",
    "Dance/Electronic": "KnvZfZ7vAvF",
    "Folk": "KnvZfZ7vAva",
    "Hip-Hop/Rap": "KnvZfZ7vAvJ",
    "Jazz": "KnvZfZ7vAvE",
    "Latin": "KnvZfZ7vAFe",
    "Metal": "KnvZfZ7vAvt",
    "New Age": "KnvZfZ7vAee",
    "Pop": "KnvZfZ7vAev",
    "R&B": "KnvZfZ7vA_e",
    "Reggae": "KnvZfZ7vAed",
    "Religious": "KnvZfZ7vAAd",
    "Rock": "KnvZfZ7vAeA",
    "World": "KnvZfZ7vAFr",
}

# Observability
OBSERVABILITY_BUFFER_SIZE = 200   # Recent events/failures kept in memory.
