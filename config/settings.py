"""
Configuration. All settings from env vars or a .env file.
No YAML. No TOML parsing. Just a dataclass with env defaults.
"""

import os
from dataclasses import dataclass

# Auto-load .env file so you don't need `export $(grep ...)` every time
from dotenv import load_dotenv
load_dotenv()

KEY_PROPERTY = "TWITTER_CONSUMER_KEY"
SECRET_PROPERTY = "TWITTER_CONSUMER_SECRET"
MAPS_KEY_PROPERTY = "TWITTER_MAPS_KEY"


class ConfigurationError(Exception):
    """Raised when required settings are missing. Always before any network call."""
    pass


@dataclass
class Config:
    # Credentials, read from env only
    consumer_key: str = os.environ.get(KEY_PROPERTY, "")
    consumer_secret: str = os.environ.get(SECRET_PROPERTY, "")
    maps_key: str = os.environ.get(MAPS_KEY_PROPERTY, "")

    # Endpoints
    api_base: str = os.environ.get("TWITTER_API_BASE", "https://api.twitter.com")
    geocode_url: str = os.environ.get(
        "TWITTER_GEOCODE_URL", "https://maps.googleapis.com/maps/api/geocode/json"
    )

    # Per-request HTTP timeout, seconds
    request_timeout: float = float(os.environ.get("TWITTER_REQUEST_TIMEOUT", "15"))
    # Whole-collection budget, seconds. 0 disables.
    collect_timeout: float = float(os.environ.get("TWITTER_COLLECT_TIMEOUT", "0"))

    # ── Collection policy ──
    default_count: int = int(os.environ.get("TWITTER_DEFAULT_COUNT", "15"))
    # Provider caps a single search page at 100 statuses
    page_ceiling: int = int(os.environ.get("TWITTER_PAGE_CEILING", "100"))
    # Used when an address is given without a positive radius
    default_radius: float = float(os.environ.get("TWITTER_DEFAULT_RADIUS", "10"))

    def require_credentials(self) -> tuple[str, str]:
        """Return (key, secret) or raise ConfigurationError naming what is missing."""
        if not self.consumer_key:
            raise ConfigurationError(
                f"The Twitter Consumer Key property has not been set ({KEY_PROPERTY})."
            )
        if not self.consumer_secret:
            raise ConfigurationError(
                f"The Twitter Consumer Secret property has not been set ({SECRET_PROPERTY})."
            )
        return self.consumer_key, self.consumer_secret


def load_config() -> Config:
    return Config()
