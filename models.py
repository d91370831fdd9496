"""
Core data types. No behavior, just shapes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class ResultType(Enum):
    MIXED = "mixed"
    POPULAR = "popular"
    RECENT = "recent"


class Unit(Enum):
    MILES = "mi"            # provider's primary unit
    KILOMETERS = "km"


@dataclass(frozen=True)
class GeoFilter:
    latitude: float
    longitude: float
    radius: float
    unit: Unit = Unit.MILES

    def to_param(self) -> str:
        """Provider geocode token, e.g. '40.7128,-74.006,10mi'."""
        return (
            f"{_fixed(self.latitude)},{_fixed(self.longitude)},"
            f"{_fixed(self.radius)}{self.unit.value}"
        )


def _fixed(value: float) -> str:
    """Shortest exact decimal, never scientific: 2500000.0 -> '2500000', 1e-05 -> '0.00001'."""
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True)
class SearchRequestTemplate:
    """
    Semantic filters for one search. Built once, reused for every page.
    Page size and cursor are passed per call and never stored here.
    """
    query: str
    result_type: ResultType = ResultType.MIXED
    lang: str | None = None
    since: str | None = None        # YYYY-MM-DD
    until: str | None = None        # YYYY-MM-DD
    geo: GeoFilter | None = None


@dataclass
class Tweet:
    """One fetched search result."""
    id: int                 # provider id, larger = newer
    created_at: datetime
    screen_name: str
    text: str
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "screen_name": self.screen_name,
            "text": self.text,
            "metadata": self.metadata,
        }

    def __repr__(self) -> str:
        return f"Tweet({self.id}, @{self.screen_name}, {self.text[:40]!r})"


class CollectionOutcome(Enum):
    SUCCESS = "success"             # target count reached
    EXHAUSTED = "exhausted"         # provider stopped yielding new items
    RATE_LIMITED = "rate_limited"   # throttled after some progress
    CANCELLED = "cancelled"         # cancel/deadline after some progress
    EMPTY = "empty"                 # nothing matched at all


@dataclass
class CollectionResult:
    """Output of one paginated collection run."""
    tweets: list[Tweet]
    outcome: CollectionOutcome
    requested: int
    pages: int = 0

    @property
    def partial(self) -> bool:
        return len(self.tweets) < self.requested

    def to_dict(self) -> dict:
        return {
            "tweets": [t.to_dict() for t in self.tweets],
            "count": len(self.tweets),
            "requested": self.requested,
            "pages": self.pages,
            "outcome": self.outcome.value,
            "partial": self.partial,
        }
