"""
Page request builder.

Turns loosely-typed request parameters into a SearchParams (every recognized
option with its default), then into an immutable SearchRequestTemplate.

Policy:
- Bad optional values (dates, language, type, count, radius) are dropped or
  defaulted. They never fail the request.
- The address is the exception. If the caller asked for location-scoped
  results and the address can't be resolved, the whole operation fails.
"""

import logging
from dataclasses import dataclass

from geo.resolver import LocationResolver
from models import GeoFilter, ResultType, SearchRequestTemplate, Unit
from query.validators import is_valid_date, is_valid_language_code

log = logging.getLogger(__name__)

DEFAULT_COUNT = 15
DEFAULT_RADIUS = 10.0


@dataclass
class SearchParams:
    """Every option the datasource understands, resolved once."""
    query: str
    result_type: str = "mixed"
    lang: str | None = None
    since: str | None = None
    until: str | None = None
    address: str | None = None
    radius: float = 0.0
    unit: str = Unit.MILES.value
    count: int = DEFAULT_COUNT

    @classmethod
    def from_mapping(cls, query: str, parameters: dict | None) -> "SearchParams":
        """
        Build from an envelope's parameter dict. Wrong-typed values fall back
        to their defaults instead of raising. A non-dict is treated as empty.
        """
        p = parameters if isinstance(parameters, dict) else {}
        return cls(
            query=query,
            result_type=_as_str(p.get("type")) or "mixed",
            lang=_as_str(p.get("lang")),
            since=_as_str(p.get("since")),
            until=_as_str(p.get("until")),
            address=_as_str(p.get("address")),
            radius=_as_float(p.get("radius"), 0.0),
            unit=_as_str(p.get("unit")) or Unit.MILES.value,
            count=_as_int(p.get("count"), DEFAULT_COUNT),
        )


def _as_str(value) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _as_int(value, default: int) -> int:
    # bool is an int subclass; "count": true is not a count
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_float(value, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


def parse_result_type(token: str | None) -> ResultType:
    """Value comparison on the token. Unknown tokens mean MIXED."""
    if token:
        normalized = token.strip().lower()
        for rt in ResultType:
            if rt.value == normalized:
                return rt
    return ResultType.MIXED


def parse_unit(token: str | None) -> Unit:
    """Kilometers only when explicitly asked for."""
    if token and token.strip().lower() == Unit.KILOMETERS.value:
        return Unit.KILOMETERS
    return Unit.MILES


def build_template(
    params: SearchParams,
    resolver: LocationResolver | None = None,
    default_radius: float = DEFAULT_RADIUS,
) -> SearchRequestTemplate:
    """
    Build the immutable request template.

    Raises:
        ResolutionError: address given but could not be resolved.
        ValueError: empty query text.
    """
    query = (params.query or "").strip()
    if not query:
        raise ValueError("Query text is required")

    lang = None
    if is_valid_language_code(params.lang):
        lang = params.lang.strip().lower()
    elif params.lang is not None:
        log.debug(f"Ignoring invalid language code {params.lang!r}")

    since = params.since if is_valid_date(params.since) else None
    until = params.until if is_valid_date(params.until) else None
    if params.since is not None and since is None:
        log.debug(f"Ignoring invalid since date {params.since!r}")
    if params.until is not None and until is None:
        log.debug(f"Ignoring invalid until date {params.until!r}")

    geo = None
    if params.address:
        if resolver is None:
            raise ValueError("An address was given but no location resolver is configured")
        radius = params.radius if params.radius > 0 else default_radius
        latitude, longitude = resolver.resolve(params.address)
        geo = GeoFilter(latitude, longitude, radius, parse_unit(params.unit))

    return SearchRequestTemplate(
        query=query,
        result_type=parse_result_type(params.result_type),
        lang=lang,
        since=since,
        until=until,
        geo=geo,
    )
