"""ConcertFindr - find concerts near a city for a range of dates."""

from .models import EventRecord, PlaceSuggestion, ResolvedPlace, SearchCriteria, SearchResult, SuggestionResult
from .workflow import SearchWorkflow

__all__ = [
    "EventRecord",
    "PlaceSuggestion",
    "ResolvedPlace",
    "SearchCriteria",
    "SearchResult",
    "SuggestionResult",
    "SearchWorkflow",
]
