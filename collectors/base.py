"""
Search provider interface. The paginator only ever talks to this.
"""

from abc import ABC, abstractmethod
from enum import Enum

from models import SearchRequestTemplate, Tweet


class FailureKind(Enum):
    RATE_LIMITED = "rate_limited"   # transient, provider throttled us
    HARD = "hard"                   # everything else


class ProviderError(Exception):
    """
    A failed page fetch. `kind` says whether it was a throttle or a real
    failure. Callers branch on `kind`, not on exception subclasses.
    """

    def __init__(self, message: str, kind: FailureKind = FailureKind.HARD):
        super().__init__(message)
        self.message = message
        self.kind = kind

    @property
    def rate_limited(self) -> bool:
        return self.kind is FailureKind.RATE_LIMITED


class AuthenticationError(Exception):
    """Raised when the token exchange fails."""
    pass


class SearchProvider(ABC):
    """
    One page of search results per call.

    Contract:
    - search() returns at most `count` items, newest first.
    - max_id is an inclusive upper bound on item id. None means no bound.
    - Failures raise ProviderError with the right FailureKind.
    """

    def authenticate(self):
        """Acquire credentials before the first page. Nothing to do by default."""
        return None

    @abstractmethod
    def search(
        self,
        template: SearchRequestTemplate,
        count: int,
        max_id: int | None = None,
    ) -> list[Tweet]:
        ...

    @abstractmethod
    def name(self) -> str:
        """Provider name, used for logging."""
        ...
