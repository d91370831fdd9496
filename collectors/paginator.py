"""
Bounded paginated collection.

The provider caps every page at `page_ceiling` items and pages by id, not by
offset: each call takes an upper bound (`max_id`) and returns items at or
below it, newest first. To collect N items we keep asking for
min(ceiling, remaining) items below the oldest id seen so far.

Termination:
- target reached                       → SUCCESS
- a page adds nothing new               → EXHAUSTED (EMPTY if nothing at all)
- rate limited after some progress      → RATE_LIMITED, keep what we have
- cancelled/deadline after progress     → CANCELLED, keep what we have
- anything else                         → the ProviderError propagates

Strictly sequential: the cursor for page k+1 depends on all of page k.
"""

import logging
import threading
import time

from collectors.base import FailureKind, ProviderError, SearchProvider
from models import CollectionOutcome, CollectionResult, SearchRequestTemplate, Tweet

log = logging.getLogger(__name__)

DEFAULT_COUNT = 15
PAGE_CEILING = 100


class CollectionCancelled(Exception):
    """Cancelled or timed out before a single item was collected."""
    pass


def _cancelled(cancel: threading.Event | None, deadline: float | None) -> bool:
    if cancel is not None and cancel.is_set():
        return True
    return deadline is not None and time.monotonic() >= deadline


def collect_by_count(
    provider: SearchProvider,
    template: SearchRequestTemplate,
    count: int | None = DEFAULT_COUNT,
    page_ceiling: int = PAGE_CEILING,
    cancel: threading.Event | None = None,
    deadline: float | None = None,
) -> CollectionResult:
    """
    Collect up to `count` items for `template`, one bounded page at a time.

    Args:
        provider: Page source.
        template: Semantic filters, identical for every page.
        count: Target number of items. None or <= 0 means DEFAULT_COUNT.
        page_ceiling: Largest page the provider accepts.
        cancel: Checked before every page. Set it to stop early.
        deadline: time.monotonic() value after which no new page is fetched.

    Returns:
        CollectionResult. Items are in provider order with unique ids.

    Raises:
        ProviderError: Hard failure, or rate limited before any progress.
        CollectionCancelled: Cancelled before any progress.
        ValueError: page_ceiling below 1.
    """
    if page_ceiling < 1:
        raise ValueError(f"page_ceiling must be at least 1, got {page_ceiling}")
    if count is None or count <= 0:
        count = DEFAULT_COUNT

    tweets: list[Tweet] = []
    seen_ids: set[int] = set()
    lowest_id: int | None = None   # None = nothing seen yet (+infinity)
    max_id: int | None = None
    pages = 0

    while True:
        if _cancelled(cancel, deadline):
            if tweets:
                log.warning(
                    f"Collection cancelled after {pages} pages; "
                    f"returning {len(tweets)}/{count} items"
                )
                return CollectionResult(tweets, CollectionOutcome.CANCELLED, count, pages)
            raise CollectionCancelled("Collection cancelled before any results were retrieved")

        page_size = min(page_ceiling, count - len(tweets))
        if page_size <= 0:
            return CollectionResult(tweets, CollectionOutcome.SUCCESS, count, pages)

        size_at_start = len(tweets)
        try:
            page = provider.search(template, page_size, max_id=max_id)
        except ProviderError as e:
            if e.kind is FailureKind.RATE_LIMITED and tweets:
                log.warning(
                    f"{provider.name()} rate limited after {pages} pages; "
                    f"returning {len(tweets)}/{count} items: {e}"
                )
                return CollectionResult(tweets, CollectionOutcome.RATE_LIMITED, count, pages)
            raise
        pages += 1

        for tweet in page:
            if len(tweets) >= count:
                break
            if tweet.id in seen_ids:
                continue
            seen_ids.add(tweet.id)
            tweets.append(tweet)
            if lowest_id is None or tweet.id < lowest_id:
                lowest_id = tweet.id

        log.debug(
            f"Page {pages}: asked {page_size} below {max_id}, got {len(page)}, "
            f"{len(tweets) - size_at_start} new"
        )

        if len(tweets) == size_at_start:
            outcome = CollectionOutcome.EXHAUSTED if tweets else CollectionOutcome.EMPTY
            return CollectionResult(tweets, outcome, count, pages)

        if len(tweets) >= count:
            return CollectionResult(tweets, CollectionOutcome.SUCCESS, count, pages)

        next_max_id = lowest_id - 1
        if max_id is not None and next_max_id >= max_id:
            # New items but none below the cursor: the next page would repeat this one
            log.debug(f"Cursor stalled at {max_id}; treating as exhausted")
            return CollectionResult(tweets, CollectionOutcome.EXHAUSTED, count, pages)
        max_id = next_max_id
