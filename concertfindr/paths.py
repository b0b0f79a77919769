"""Shared filesystem paths for the concertfindr package."""

import os
from pathlib import Path


BASE_DIR = Path(__file__).parent
PROJECT_DIR = BASE_DIR.parent
CONFIG_DIR = PROJECT_DIR / "config"
DATA_DIR = Path(os.environ.get("CONCERTFINDR_DATA_DIR") or PROJECT_DIR / "data")

# Config files
CONFIG_FILE = CONFIG_DIR / "config.json"

# Data files
GENRE_PREFERENCES_FILE = DATA_DIR / "genre_preferences.json"
