"""
Tests for bounded paginated collection:
- page sizing against the ceiling
- termination (target, exhaustion, empty)
- de-duplication and cursor monotonicity
- rate-limit and cancellation policy
"""

import math
import sys
import threading
import time
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from collectors.base import FailureKind, ProviderError, SearchProvider
from collectors.paginator import CollectionCancelled, collect_by_count
from models import CollectionOutcome
from conftest import make_tweet


class OverlappingProvider(SearchProvider):
    """Re-serves the last `overlap` items of the previous page on every call."""

    def __init__(self, size: int, overlap: int = 5, top_id: int = 1000):
        self.backlog = [make_tweet(top_id - i) for i in range(size)]
        self.overlap = overlap
        self.cursors = []

    def name(self) -> str:
        return "overlapping"

    def search(self, template, count, max_id=None):
        self.cursors.append(max_id)
        start = 0
        if max_id is not None:
            start = next((i for i, t in enumerate(self.backlog) if t.id <= max_id), len(self.backlog))
            start = max(0, start - self.overlap)
        return self.backlog[start:start + count]


class CursorIgnoringProvider(SearchProvider):
    """Always returns the newest items, whatever the cursor says."""

    def __init__(self, size: int):
        self.backlog = [make_tweet(500 - i) for i in range(size)]
        self.calls = 0

    def name(self) -> str:
        return "ignoring"

    def search(self, template, count, max_id=None):
        self.calls += 1
        return self.backlog[:count]


class AscendingProvider(SearchProvider):
    """Returns brand new ids on every page, all above the cursor."""

    def __init__(self):
        self.calls = 0

    def name(self) -> str:
        return "ascending"

    def search(self, template, count, max_id=None):
        self.calls += 1
        base = self.calls * 100
        return [make_tweet(base + i) for i in range(1, count + 1)]


# ──────────────────────────────────────────────
# Page sizing
# ──────────────────────────────────────────────

class TestPageSizing:
    @pytest.mark.parametrize("count", [1, 15, 99, 100, 101, 250, 300])
    def test_full_pages_take_ceil_n_over_c_fetches(self, template, backlog_provider, count):
        provider = backlog_provider(1000)
        result = collect_by_count(provider, template, count=count, page_ceiling=100)

        assert len(provider.calls) == math.ceil(count / 100)
        assert len(result.tweets) == count
        assert result.outcome == CollectionOutcome.SUCCESS
        assert len({t.id for t in result.tweets}) == count

    def test_page_sizes_never_exceed_ceiling(self, template, backlog_provider):
        provider = backlog_provider(1000)
        collect_by_count(provider, template, count=250, page_ceiling=100)
        assert provider.page_sizes == [100, 100, 50]

    def test_items_in_provider_order(self, template, backlog_provider):
        provider = backlog_provider(1000)
        result = collect_by_count(provider, template, count=120)
        ids = [t.id for t in result.tweets]
        assert ids == [t.id for t in provider.backlog[:120]]

    @pytest.mark.parametrize("count", [0, -5, None])
    def test_non_positive_count_defaults_to_15(self, template, backlog_provider, count):
        provider = backlog_provider(100)
        result = collect_by_count(provider, template, count=count)
        assert len(result.tweets) == 15
        assert result.requested == 15
        assert provider.page_sizes == [15]

    @pytest.mark.parametrize("ceiling", [0, -1])
    def test_ceiling_below_one_rejected(self, template, backlog_provider, ceiling):
        provider = backlog_provider(50)
        with pytest.raises(ValueError, match="page_ceiling"):
            collect_by_count(provider, template, count=10, page_ceiling=ceiling)
        assert provider.calls == []

    def test_custom_ceiling(self, template, backlog_provider):
        provider = backlog_provider(100)
        result = collect_by_count(provider, template, count=25, page_ceiling=10)
        assert provider.page_sizes == [10, 10, 5]
        assert result.pages == 3


# ──────────────────────────────────────────────
# Termination
# ──────────────────────────────────────────────

class TestTermination:
    def test_short_backlog_exhausts(self, template, backlog_provider):
        provider = backlog_provider(40)
        result = collect_by_count(provider, template, count=100)

        assert result.outcome == CollectionOutcome.EXHAUSTED
        assert len(result.tweets) == 40
        assert result.partial
        # one page of 40, then one empty page proves exhaustion
        assert provider.page_sizes == [100, 60]

    def test_exhaustion_across_multiple_pages(self, template, backlog_provider):
        provider = backlog_provider(340)
        result = collect_by_count(provider, template, count=500)
        assert len(result.tweets) == 340
        assert result.outcome == CollectionOutcome.EXHAUSTED
        # the fifth page asks for min(100, 160) and comes back empty
        assert provider.page_sizes == [100, 100, 100, 100, 100]

    def test_empty_first_page(self, template, backlog_provider):
        provider = backlog_provider(0)
        result = collect_by_count(provider, template, count=15)
        assert result.outcome == CollectionOutcome.EMPTY
        assert result.tweets == []
        assert len(provider.calls) == 1

    def test_provider_ignoring_cursor_terminates(self, template):
        provider = CursorIgnoringProvider(50)
        result = collect_by_count(provider, template, count=100, page_ceiling=10)
        assert result.outcome == CollectionOutcome.EXHAUSTED
        assert len(result.tweets) == 10
        assert provider.calls == 2

    def test_stalled_cursor_terminates(self, template):
        provider = AscendingProvider()
        result = collect_by_count(provider, template, count=100, page_ceiling=10)
        assert result.outcome == CollectionOutcome.EXHAUSTED
        assert len(result.tweets) == 20
        assert provider.calls == 2

    def test_oversized_page_is_truncated(self, template):
        class Greedy(SearchProvider):
            def name(self):
                return "greedy"

            def search(self, template, count, max_id=None):
                return [make_tweet(900 - i) for i in range(count + 20)]

        result = collect_by_count(Greedy(), template, count=30)
        assert len(result.tweets) == 30
        assert result.outcome == CollectionOutcome.SUCCESS


# ──────────────────────────────────────────────
# De-duplication and cursor
# ──────────────────────────────────────────────

class TestCursor:
    def test_overlapping_pages_are_deduplicated(self, template):
        provider = OverlappingProvider(1000, overlap=5)
        result = collect_by_count(provider, template, count=30, page_ceiling=10)

        # pages yield 10, 5, 5, 5 new ids; the fifth asks for 5 and gets only repeats
        ids = [t.id for t in result.tweets]
        assert len(ids) == 25
        assert len(set(ids)) == 25
        assert ids == sorted(ids, reverse=True)
        assert result.outcome == CollectionOutcome.EXHAUSTED
        assert len(provider.cursors) == 5

    def test_repeats_within_a_page_are_dropped(self, template):
        class Stuttering(SearchProvider):
            def name(self):
                return "stuttering"

            def search(self, template, count, max_id=None):
                top = 800 if max_id is None else max_id
                ids = [top - i // 2 for i in range(2 * count)]
                return [make_tweet(i) for i in ids]

        result = collect_by_count(Stuttering(), template, count=30, page_ceiling=10)
        ids = [t.id for t in result.tweets]
        assert len(ids) == 30
        assert len(set(ids)) == 30
        assert result.outcome == CollectionOutcome.SUCCESS

    def test_cursor_strictly_decreases(self, template, backlog_provider):
        provider = backlog_provider(1000)
        collect_by_count(provider, template, count=450, page_ceiling=100)

        cursors = provider.cursors
        assert cursors[0] is None
        for earlier, later in zip(cursors[1:], cursors[2:]):
            assert later < earlier

    def test_cursor_is_one_below_lowest_seen(self, template, backlog_provider):
        provider = backlog_provider(1000, top_id=10_000)
        collect_by_count(provider, template, count=150, page_ceiling=100)
        # first page covers ids 10000..9901
        assert provider.cursors == [None, 9900]

    def test_cursor_decreases_with_overlap(self, template):
        provider = OverlappingProvider(1000, overlap=5)
        collect_by_count(provider, template, count=30, page_ceiling=10)
        later = provider.cursors[1:]
        assert all(b < a for a, b in zip(later, later[1:]))


# ──────────────────────────────────────────────
# Failure policy
# ──────────────────────────────────────────────

class TestFailurePolicy:
    def test_rate_limit_after_progress_returns_partial(self, template, backlog_provider):
        provider = backlog_provider(1000, fail_on={3: FailureKind.RATE_LIMITED})
        result = collect_by_count(provider, template, count=250)

        assert result.outcome == CollectionOutcome.RATE_LIMITED
        assert len(result.tweets) == 200
        assert result.pages == 2
        assert result.partial

    def test_rate_limit_on_first_call_is_fatal(self, template, backlog_provider):
        provider = backlog_provider(1000, fail_on={1: FailureKind.RATE_LIMITED})
        with pytest.raises(ProviderError) as exc:
            collect_by_count(provider, template, count=50)
        assert exc.value.kind == FailureKind.RATE_LIMITED
        assert "Rate limit" in exc.value.message

    def test_hard_error_after_progress_is_fatal(self, template, backlog_provider):
        provider = backlog_provider(1000, fail_on={2: FailureKind.HARD})
        with pytest.raises(ProviderError, match="Internal error"):
            collect_by_count(provider, template, count=250)

    def test_cancel_before_first_page(self, template, backlog_provider):
        provider = backlog_provider(1000)
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(CollectionCancelled):
            collect_by_count(provider, template, count=50, cancel=cancel)
        assert provider.calls == []

    def test_cancel_mid_collection_keeps_results(self, template, backlog_provider):
        cancel = threading.Event()

        class CancellingProvider(backlog_provider):
            def search(self, template, count, max_id=None):
                page = super().search(template, count, max_id)
                cancel.set()
                return page

        provider = CancellingProvider(1000)
        result = collect_by_count(provider, template, count=250, cancel=cancel)
        assert result.outcome == CollectionOutcome.CANCELLED
        assert len(result.tweets) == 100
        assert len(provider.calls) == 1

    def test_expired_deadline(self, template, backlog_provider):
        provider = backlog_provider(1000)
        with pytest.raises(CollectionCancelled):
            collect_by_count(provider, template, count=50, deadline=time.monotonic() - 1)

    def test_template_is_reused_unchanged(self, template, backlog_provider):
        provider = backlog_provider(1000)
        collect_by_count(provider, template, count=250)
        assert all(c["template"] is template for c in provider.calls)
