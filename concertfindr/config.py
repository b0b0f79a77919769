"""Configuration loader for API credentials."""

import json
import os

from concertfindr import paths
from concertfindr.observability import record_failure


def load_config() -> dict:
    """Load configuration from config.json or environment variables."""
    config = {
        "ticketmaster_api_key": None,
        "mapbox_access_token": None,
    }

    if paths.CONFIG_FILE.exists():
        try:
            file_config = json.loads(paths.CONFIG_FILE.read_text())
            if "ticketmaster" in file_config:
                config["ticketmaster_api_key"] = file_config["ticketmaster"].get("api_key")
            if "mapbox" in file_config:
                config["mapbox_access_token"] = file_config["mapbox"].get("access_token")
        except (json.JSONDecodeError, AttributeError, OSError) as e:
            record_failure("config", "unreadable config.json", error=str(e))

    # Environment variables override config file
    if os.environ.get("TICKETMASTER_API_KEY"):
        config["ticketmaster_api_key"] = os.environ["TICKETMASTER_API_KEY"]
    if os.environ.get("MAPBOX_ACCESS_TOKEN"):
        config["mapbox_access_token"] = os.environ["MAPBOX_ACCESS_TOKEN"]

    return config


def get_ticketmaster_key() -> str | None:
    """Get Ticketmaster API key."""
    return load_config()["ticketmaster_api_key"]


def get_mapbox_token() -> str | None:
    """Get Mapbox access token."""
    return load_config()["mapbox_access_token"]
