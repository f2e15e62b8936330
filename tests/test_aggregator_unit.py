"""Unit tests for the concurrent aggregator."""

import threading
import time
from datetime import UTC, datetime
from unittest.mock import Mock

from activity_feed.aggregator import aggregate, default_timeout
from activity_feed.errors import UpstreamUnreachable
from activity_feed.models import NormalizedItem, SourceKind
from activity_feed.sources.base import SourceFetcher


def item(kind, n):
    return NormalizedItem(
        source_kind=kind,
        title=f"Item {n}",
        description=f"Item {n}",
        link=f"https://example.com/{n}",
        unique_id=f"id-{n}",
        published_at=datetime(2024, 10, 1, tzinfo=UTC),
        extra={"repo": "a/b", "sha": f"sha{n}"},
    )


class StubFetcher(SourceFetcher):
    """Fetcher returning a canned item after an optional delay."""

    def __init__(self, name, result=None, delay=0.0, error=None, timeout=1.0):
        self.name = name
        super().__init__(Mock(), timeout)
        self.result = result
        self.delay = delay
        self.error = error
        self.started = threading.Event()

    def _fetch(self):
        self.started.set()
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


class RaisingFetcher:
    """Fetcher that breaks its own contract by raising from fetch()."""

    name = "broken"
    max_duration = 1.0

    def fetch(self):
        raise RuntimeError("boom")


class TestAggregatorUnit:
    """Unit tests for aggregate()."""

    def test_entries_follow_fetcher_order(self):
        """Slow first fetcher still comes first in the output."""
        fetchers = [
            StubFetcher("slow", item(SourceKind.CODE_COMMIT, 1), delay=0.2),
            StubFetcher("fast", item(SourceKind.PHOTO_UPLOAD, 2)),
        ]
        entries = aggregate(fetchers)

        assert [e.guid for e in entries] == ["id-1", "id-2"]

    def test_failed_source_is_isolated(self):
        fetchers = [
            StubFetcher("a", item(SourceKind.CODE_COMMIT, 1)),
            StubFetcher("b", error=UpstreamUnreachable("b", "request", "down")),
            StubFetcher("c", item(SourceKind.PHOTO_UPLOAD, 3)),
        ]
        entries = aggregate(fetchers)

        assert [e.content_type for e in entries] == ["code-commit", "photo-upload"]

    def test_fetcher_raising_past_boundary_is_isolated(self):
        fetchers = [StubFetcher("a", item(SourceKind.CODE_COMMIT, 1)), RaisingFetcher()]
        entries = aggregate(fetchers)

        assert len(entries) == 1

    def test_hung_source_is_abandoned_at_timeout(self):
        """One hanging fetcher does not hold the cycle past the timeout."""
        fetchers = [
            StubFetcher("a", item(SourceKind.CODE_COMMIT, 1)),
            StubFetcher("hung", item(SourceKind.MOVIE_REVIEW, 2), delay=3.0),
            StubFetcher("c", item(SourceKind.PHOTO_UPLOAD, 3)),
        ]
        started = time.monotonic()
        entries = aggregate(fetchers, timeout=0.5)
        elapsed = time.monotonic() - started

        assert elapsed < 2.0
        assert [e.guid for e in entries] == ["id-1", "id-3"]

    def test_fetchers_run_concurrently(self):
        fetchers = [
            StubFetcher(str(n), item(SourceKind.CODE_COMMIT, n), delay=0.4)
            for n in range(4)
        ]
        started = time.monotonic()
        entries = aggregate(fetchers)
        elapsed = time.monotonic() - started

        assert len(entries) == 4
        assert elapsed < 1.2

    def test_all_sources_failing_returns_empty_list(self):
        fetchers = [StubFetcher("a"), StubFetcher("b")]
        assert aggregate(fetchers) == []

    def test_no_fetchers(self):
        assert aggregate([]) == []

    def test_default_timeout_covers_slowest_fetcher(self):
        fetchers = [StubFetcher("a", timeout=2.0), StubFetcher("b", timeout=10.0)]
        assert default_timeout(fetchers) >= 10.0
