"""Persisted genre filter selection (a JSON array of genre names)."""

import json
from pathlib import Path

from concertfindr import paths
from concertfindr.observability import record_failure


class GenrePreferenceStore:
    """Load and save the user's last chosen genres."""

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else paths.GENRE_PREFERENCES_FILE

    def load(self) -> list[str]:
        """Return saved genres, or an empty list if nothing usable is stored."""
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            record_failure("preferences", "unreadable genre preferences", error=str(e))
            return []

        if not isinstance(data, list):
            return []
        return [g for g in data if isinstance(g, str)]

    def save(self, genres) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(sorted(set(genres)), f, indent=2)
