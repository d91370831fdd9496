"""
Datasource entry point: JSON envelope in, JSON envelope out.

Envelope shape:
    {"discriminator": <uri>, "payload": <query text>, "parameters": {...}}

- error discriminator  → returned unchanged (already failed upstream)
- get discriminator    → search, reply with a LIF container of tweet lines
- anything else        → error envelope

Every fatal failure becomes an error envelope with one message string.
Rate limiting after some progress is not a failure: whatever was gathered
is returned as a normal result.
"""

import json
import logging
import threading
import time
from typing import Callable

from collectors.base import AuthenticationError, ProviderError, SearchProvider
from collectors.paginator import CollectionCancelled, collect_by_count
from collectors.twitter import TwitterSearchProvider
from config.settings import Config, ConfigurationError, load_config
from delivery.output import render_tweets
from geo.resolver import GoogleGeocoder, LocationResolver, ResolutionError
from models import CollectionOutcome, CollectionResult
from query.builder import SearchParams, build_template
from service import __version__

log = logging.getLogger(__name__)


class Uri:
    GET = "http://vocab.lappsgrid.org/ns/action/get"
    ERROR = "http://vocab.lappsgrid.org/ns/error"
    LAPPS = "http://vocab.lappsgrid.org/ns/media/jsonld#lapps"
    ANY = "http://vocab.lappsgrid.org/ns/allow#any"
    APACHE2 = "http://vocab.lappsgrid.org/ns/license#apache-2.0"


LIF_CONTEXT = "http://vocab.lappsgrid.org/context-1.0.0.jsonld"

EMPTY_RESULT_MESSAGE = (
    "No tweets found for the following query. "
    "Note: Twitter's REST API only retrieves tweets from the past week."
)

# Everything that ends a request with an error envelope
FATAL_ERRORS = (
    ConfigurationError,
    AuthenticationError,
    ResolutionError,
    ProviderError,
    CollectionCancelled,
    ValueError,
)

PARAMETERS = {
    "type": "Result ordering: mixed (default), popular or recent",
    "lang": "ISO 639-1 language code",
    "since": "Only tweets created on or after this date (YYYY-MM-DD)",
    "until": "Only tweets created before this date (YYYY-MM-DD)",
    "address": "Free-form address; restricts results to a radius around it",
    "radius": "Radius around the address (default 10)",
    "unit": "Radius unit: mi (default) or km",
    "count": "Number of tweets to return (default 15)",
}


class EmptyResultError(Exception):
    """Nothing matched. Not a fault, but there is nothing to return."""

    def __init__(self, message: str = EMPTY_RESULT_MESSAGE):
        super().__init__(message)


def error_envelope(message: str) -> str:
    return json.dumps({"discriminator": Uri.ERROR, "payload": message}, indent=2)


def container_envelope(text: str) -> str:
    container = {
        "@context": LIF_CONTEXT,
        "metadata": {},
        "text": {"@value": text},
        "views": [],
    }
    return json.dumps({"discriminator": Uri.LAPPS, "payload": container}, indent=2)


class TwitterDatasource:
    def __init__(
        self,
        config: Config | None = None,
        provider_factory: Callable[[str, str], SearchProvider] | None = None,
        resolver: LocationResolver | None = None,
    ):
        self._config = config or load_config()
        self._provider_factory = provider_factory or self._default_provider
        self._resolver = resolver
        self._metadata = json.dumps({
            "$schema": "https://vocab.lappsgrid.org/schema/1.1.0/datasource-schema.json",
            "name": "Twitter Datasource",
            "description": "Extracts tweets based on query from Twitter's REST API.",
            "vendor": "http://www.anc.org",
            "version": __version__,
            "license": Uri.APACHE2,
            "allow": Uri.ANY,
            "encoding": "UTF-8",
            "parameters": PARAMETERS,
        }, indent=2)

    def _default_provider(self, key: str, secret: str) -> SearchProvider:
        return TwitterSearchProvider(
            key,
            secret,
            api_base=self._config.api_base,
            timeout=self._config.request_timeout,
        )

    def _location_resolver(self) -> LocationResolver:
        if self._resolver is None:
            self._resolver = GoogleGeocoder(
                self._config.maps_key,
                url=self._config.geocode_url,
                timeout=self._config.request_timeout,
            )
        return self._resolver

    def get_metadata(self) -> str:
        return self._metadata

    def search(
        self,
        params: SearchParams,
        cancel: threading.Event | None = None,
    ) -> CollectionResult:
        """
        Run one search end to end.

        Raises:
            ConfigurationError, AuthenticationError, ResolutionError,
            ProviderError, CollectionCancelled, ValueError (empty query),
            EmptyResultError (nothing matched).
        """
        key, secret = self._config.require_credentials()

        provider = self._provider_factory(key, secret)
        provider.authenticate()

        resolver = self._location_resolver() if params.address else None
        template = build_template(params, resolver, default_radius=self._config.default_radius)

        deadline = None
        if self._config.collect_timeout > 0:
            deadline = time.monotonic() + self._config.collect_timeout

        count = params.count if params.count > 0 else self._config.default_count
        result = collect_by_count(
            provider,
            template,
            count=count,
            page_ceiling=self._config.page_ceiling,
            cancel=cancel,
            deadline=deadline,
        )
        log.info(
            f"Query {template.query!r}: {len(result.tweets)}/{result.requested} tweets, "
            f"{result.pages} pages, {result.outcome.value}"
        )

        if result.outcome is CollectionOutcome.EMPTY:
            raise EmptyResultError()
        return result

    def execute(self, input_json: str) -> str:
        try:
            data = json.loads(input_json)
        except (TypeError, ValueError) as e:
            return error_envelope(f"Unable to parse input: {e}")
        if not isinstance(data, dict):
            return error_envelope("Unable to parse input: expected a JSON object")

        discriminator = data.get("discriminator")

        # Already failed upstream, pass it through untouched
        if discriminator == Uri.ERROR:
            return input_json

        if discriminator != Uri.GET:
            return error_envelope(
                f"Invalid discriminator.\nExpected {Uri.GET}\nFound {discriminator}"
            )

        payload = data.get("payload")
        if not isinstance(payload, str) or not payload.strip():
            return error_envelope("A query string is required as the payload.")

        params = SearchParams.from_mapping(payload, data.get("parameters"))

        try:
            result = self.search(params)
        except EmptyResultError as e:
            return error_envelope(str(e))
        except FATAL_ERRORS as e:
            log.error(f"Search failed: {e}")
            return error_envelope(str(e))

        return container_envelope(render_tweets(result.tweets))
