"""Application configuration"""

import json
import os
from pathlib import Path


def _get_config_value(key: str, default: str | None = None) -> str | None:
    """
    Get configuration value from environment or local.settings.json.

    Priority:
    1. Environment variable
    2. local.settings.json (Values.key)
    3. Default value

    Args:
        key: Configuration key name
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    value = os.getenv(key)
    if value:
        return value

    project_root = Path(__file__).resolve().parent.parent
    local_settings_path = project_root / "local.settings.json"

    if local_settings_path.exists():
        try:
            with open(local_settings_path) as f:
                settings = json.load(f)
                value = settings.get("Values", {}).get(key)
                if value:
                    return value
        except (json.JSONDecodeError, KeyError):
            pass

    return default


def get_database_url() -> str | None:
    """
    Get database URL from environment or config.

    Returns:
        Database connection string (default: SQLite file dev.db)
    """
    return _get_config_value("DATABASE_URL", default="sqlite:///dev.db")


def get_tmdb_api_key() -> str | None:
    """
    Get the TMDB API key.

    Returns:
        API key or None. The placeholder value from the sample settings
        counts as unset.
    """
    key = _get_config_value("TMDB_API_KEY")
    if key == "your_tmdb_api_key_here":
        return None
    return key


def get_tmdb_base_url() -> str | None:
    """Get the TMDB REST API base URL."""
    return _get_config_value("TMDB_BASE_URL", default="https://api.themoviedb.org/3")


def get_tmdb_image_base_url() -> str | None:
    """Get the TMDB image CDN base URL (without size segment)."""
    return _get_config_value("TMDB_IMAGE_BASE_URL", default="https://image.tmdb.org/t/p")


def get_watch_region() -> str | None:
    """
    Get the region used for streaming provider lookups.

    Returns:
        ISO 3166-1 country code (default: AR)
    """
    return _get_config_value("WATCH_REGION", default="AR")


def get_guest_username() -> str | None:
    """Get the username interactions are recorded under."""
    return _get_config_value("GUEST_USERNAME", default="guest_user")


def get_site_url() -> str | None:
    """Get the public base URL used in the sitemap."""
    return _get_config_value("SITE_URL", default="https://kdramas.example.com")
