"""
Shared fakes. No test here touches the network.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from collectors.base import FailureKind, ProviderError, SearchProvider
from models import SearchRequestTemplate, Tweet


def make_tweet(tweet_id: int, text: str | None = None) -> Tweet:
    return Tweet(
        id=tweet_id,
        created_at=datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc),
        screen_name=f"user{tweet_id}",
        text=text if text is not None else f"tweet number {tweet_id}",
    )


class BacklogProvider(SearchProvider):
    """
    Serves a fixed backlog of ids newest first, honoring max_id the way the
    real endpoint does. Records every call.

    fail_on: {call_number: FailureKind} raises ProviderError on that call (1-based).
    """

    def __init__(self, size: int, top_id: int = 10_000, fail_on: dict | None = None):
        self.backlog = [make_tweet(top_id - i) for i in range(size)]
        self.fail_on = fail_on or {}
        self.calls: list[dict] = []
        self.authenticated = False

    def name(self) -> str:
        return "backlog"

    def authenticate(self):
        self.authenticated = True

    def search(self, template: SearchRequestTemplate, count: int, max_id: int | None = None) -> list[Tweet]:
        self.calls.append({"template": template, "count": count, "max_id": max_id})
        kind = self.fail_on.get(len(self.calls))
        if kind is not None:
            message = "Rate limit exceeded" if kind is FailureKind.RATE_LIMITED else "Internal error"
            raise ProviderError(message, kind=kind)
        eligible = [t for t in self.backlog if max_id is None or t.id <= max_id]
        return eligible[:count]

    @property
    def page_sizes(self) -> list[int]:
        return [c["count"] for c in self.calls]

    @property
    def cursors(self) -> list[int | None]:
        return [c["max_id"] for c in self.calls]


@pytest.fixture
def template():
    return SearchRequestTemplate(query="elections")


@pytest.fixture
def backlog_provider():
    """Factory: backlog_provider(size, fail_on=...)."""
    return BacklogProvider
