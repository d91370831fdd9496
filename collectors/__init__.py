from collectors.base import (
    AuthenticationError,
    FailureKind,
    ProviderError,
    SearchProvider,
)
from collectors.paginator import CollectionCancelled, collect_by_count
from collectors.twitter import TwitterSearchProvider

__all__ = [
    "AuthenticationError",
    "CollectionCancelled",
    "FailureKind",
    "ProviderError",
    "SearchProvider",
    "TwitterSearchProvider",
    "collect_by_count",
]
