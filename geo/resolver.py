"""
Address → coordinate resolution. Only used to build the geocode filter.

Any failure here is fatal to the whole search: the caller explicitly asked
for location-scoped results, so searching without the filter would be wrong.
"""

import logging
from abc import ABC, abstractmethod

import requests

log = logging.getLogger(__name__)


class ResolutionError(Exception):
    """Raised when an address can't be turned into coordinates."""
    pass


class LocationResolver(ABC):
    @abstractmethod
    def resolve(self, address: str) -> tuple[float, float]:
        """
        Return (latitude, longitude) for a free-form address.

        Raises:
            ResolutionError: On any lookup failure.
        """
        ...


class GoogleGeocoder(LocationResolver):
    """Google Geocoding API. First result wins."""

    def __init__(
        self,
        api_key: str,
        url: str = "https://maps.googleapis.com/maps/api/geocode/json",
        timeout: float = 15,
        session: requests.Session | None = None,
    ):
        self._api_key = api_key
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = "twitter-datasource/1.0"

    def resolve(self, address: str) -> tuple[float, float]:
        if not self._api_key:
            raise ResolutionError("TWITTER_MAPS_KEY not set; cannot resolve address")

        try:
            resp = self._session.get(
                self._url,
                params={"address": address, "key": self._api_key},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ResolutionError(f"Geocoding request failed: {e}") from e

        if resp.status_code != 200:
            raise ResolutionError(f"Geocoding API: HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ResolutionError(f"Geocoding API returned invalid JSON: {e}") from e

        status = data.get("status", "")
        if status != "OK":
            detail = data.get("error_message") or status or "unknown error"
            raise ResolutionError(f"Could not resolve address '{address}': {detail}")

        results = data.get("results") or []
        try:
            location = results[0]["geometry"]["location"]
            coords = float(location["lat"]), float(location["lng"])
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise ResolutionError(f"Could not resolve address '{address}': no coordinates") from e

        log.debug(f"Resolved '{address}' to {coords}")
        return coords
