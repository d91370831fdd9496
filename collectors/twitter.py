"""
Twitter standard search provider (REST v1.1).

Uses application-only auth: consumer key + secret are exchanged for a bearer
token once, then every search call carries it. No user context needed.
"""

import logging
from datetime import datetime, timezone
from urllib.parse import quote

import requests

from collectors.base import AuthenticationError, FailureKind, ProviderError, SearchProvider
from models import SearchRequestTemplate, Tweet

log = logging.getLogger(__name__)

# Legacy v1.1 error code for "Rate limit exceeded"
RATE_LIMIT_ERROR_CODE = 88
CREATED_AT_FORMAT = "%a %b %d %H:%M:%S %z %Y"


def _error_message(resp: requests.Response) -> str:
    """Pull the provider's own message out of an error response."""
    try:
        data = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    errors = data.get("errors") if isinstance(data, dict) else None
    if errors and isinstance(errors, list):
        first = errors[0]
        if isinstance(first, dict) and first.get("message"):
            return f"{first['message']} (HTTP {resp.status_code})"
    if isinstance(data, dict) and data.get("error"):
        return f"{data['error']} (HTTP {resp.status_code})"
    return f"HTTP {resp.status_code}"


def _error_codes(resp: requests.Response) -> set[int]:
    try:
        errors = resp.json().get("errors") or []
    except (ValueError, AttributeError):
        return set()
    return {e.get("code") for e in errors if isinstance(e, dict)}


def parse_status(status: dict) -> Tweet:
    """Convert one v1.1 status object into a Tweet."""
    created_raw = status.get("created_at", "")
    try:
        created_at = datetime.strptime(created_raw, CREATED_AT_FORMAT).astimezone(timezone.utc)
    except ValueError:
        created_at = datetime.fromtimestamp(0, tz=timezone.utc)

    user = status.get("user") or {}
    return Tweet(
        id=int(status.get("id_str") or status["id"]),
        created_at=created_at,
        screen_name=user.get("screen_name", ""),
        text=status.get("full_text") or status.get("text", ""),
        metadata={
            "lang": status.get("lang", ""),
            "retweet_count": status.get("retweet_count", 0),
            "favorite_count": status.get("favorite_count", 0),
            "url": f"https://twitter.com/{user.get('screen_name', 'i')}/status/{status.get('id_str', '')}",
        },
    )


class TwitterSearchProvider(SearchProvider):
    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        api_base: str = "https://api.twitter.com",
        timeout: float = 15,
        session: requests.Session | None = None,
    ):
        self._key = consumer_key
        self._secret = consumer_secret
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = "twitter-datasource/1.0"
        self._token: str | None = None

    def name(self) -> str:
        return "twitter"

    def authenticate(self) -> str:
        """
        Exchange consumer credentials for an app-only bearer token.

        Raises:
            AuthenticationError: On rejected credentials or transport failure.
        """
        if self._token:
            return self._token

        # Credentials are URL-encoded before being used as basic auth
        auth = (quote(self._key, safe=""), quote(self._secret, safe=""))
        try:
            resp = self._session.post(
                f"{self._api_base}/oauth2/token",
                auth=auth,
                data={"grant_type": "client_credentials"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"Token exchange failed: {e}") from e

        if resp.status_code != 200:
            raise AuthenticationError(f"Token exchange rejected: {_error_message(resp)}")

        try:
            data = resp.json()
        except ValueError as e:
            raise AuthenticationError(f"Token exchange returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise AuthenticationError("Token exchange returned an unexpected response")
        if str(data.get("token_type", "")).lower() != "bearer" or not data.get("access_token"):
            raise AuthenticationError("Token exchange returned no bearer token")

        self._token = data["access_token"]
        self._session.headers["Authorization"] = f"Bearer {self._token}"
        log.debug("Obtained app-only bearer token")
        return self._token

    def _build_params(self, template: SearchRequestTemplate, count: int, max_id: int | None) -> dict:
        q = template.query
        if template.since:
            # `since` is a query operator on this endpoint, not a parameter
            q = f"{q} since:{template.since}"

        params = {
            "q": q,
            "count": count,
            "result_type": template.result_type.value,
            "tweet_mode": "extended",
        }
        if template.lang:
            params["lang"] = template.lang
        if template.until:
            params["until"] = template.until
        if template.geo:
            params["geocode"] = template.geo.to_param()
        if max_id is not None:
            params["max_id"] = max_id
        return params

    def search(
        self,
        template: SearchRequestTemplate,
        count: int,
        max_id: int | None = None,
    ) -> list[Tweet]:
        if not self._token:
            try:
                self.authenticate()
            except AuthenticationError as e:
                raise ProviderError(str(e)) from e

        params = self._build_params(template, count, max_id)
        try:
            resp = self._session.get(
                f"{self._api_base}/1.1/search/tweets.json",
                params=params,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ProviderError(f"Twitter search request failed: {e}") from e

        if resp.status_code == 429 or RATE_LIMIT_ERROR_CODE in _error_codes(resp):
            raise ProviderError(
                f"Rate limit exceeded: {_error_message(resp)}",
                kind=FailureKind.RATE_LIMITED,
            )
        if resp.status_code != 200:
            log.warning(f"Twitter search: HTTP {resp.status_code}")
            raise ProviderError(_error_message(resp))

        try:
            statuses = resp.json().get("statuses", [])
        except (ValueError, AttributeError) as e:
            raise ProviderError(f"Twitter search returned invalid JSON: {e}") from e

        tweets = []
        for status in statuses:
            try:
                tweets.append(parse_status(status))
            except (KeyError, TypeError, ValueError) as e:
                log.debug(f"Skipping malformed status: {e}")
        return tweets
