"""Read-side article cache with time-boxed freshness and stale fallback."""

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from article_store.query import (
    ArticleQuery,
    SourceSummary,
    apply_query,
    bias_distribution,
    summarize_sources,
)
from common.datetime import utc_now
from ingest_articles.models import Article, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


@dataclass(frozen=True)
class LoadResult:
    snapshot: Snapshot
    stale: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class QueryResult:
    articles: list[Article] = field(default_factory=list)
    total: int = 0
    fetched_at: Optional[datetime] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class _CacheEntry:
    snapshot: Snapshot
    loaded_at: float


class ArticleStore:
    """Serve queries over the latest snapshot.

    `fetcher` returns a Snapshot or raises; `clock` returns monotonic seconds.
    The cache entry is replaced by a single reference assignment, so readers
    see either the previous snapshot or the new one.
    """

    def __init__(
        self,
        fetcher: Callable[[], Snapshot],
        clock: Callable[[], float] = time.monotonic,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._fetcher = fetcher
        self._clock = clock
        self._ttl = ttl_seconds
        self._cache: Optional[_CacheEntry] = None
        self._lock = threading.Lock()
        self._inflight: Optional[Future] = None

    def _is_fresh(self, entry: Optional[_CacheEntry]) -> bool:
        return entry is not None and self._clock() - entry.loaded_at < self._ttl

    def load(self, force_refresh: bool = False) -> LoadResult:
        """Return the cached snapshot if fresh, otherwise refresh it. Never raises."""
        entry = self._cache
        if not force_refresh and self._is_fresh(entry):
            return LoadResult(snapshot=entry.snapshot)

        with self._lock:
            # A refresh may have completed since the check above
            current = self._cache
            if not force_refresh and self._is_fresh(current):
                return LoadResult(snapshot=current.snapshot)
            future = self._inflight
            leader = future is None
            if leader:
                future = Future()
                self._inflight = future

        if not leader:
            # Another caller is refreshing: serve the old snapshot if there is one
            if entry is not None and not force_refresh:
                return LoadResult(snapshot=entry.snapshot, stale=True)
            return future.result()

        try:
            result = self._refresh()
            future.set_result(result)
        except BaseException as e:
            future.set_exception(e)
            raise
        finally:
            with self._lock:
                self._inflight = None
        return result

    def _refresh(self) -> LoadResult:
        try:
            snapshot = self._fetcher()
        except Exception as e:
            logger.error("Failed to fetch articles: %s", e)
            entry = self._cache
            if entry is not None:
                logger.warning("Using cached articles due to fetch error")
                return LoadResult(snapshot=entry.snapshot, stale=True, error=str(e))
            return LoadResult(snapshot=Snapshot(fetched_at=utc_now()), stale=False, error=str(e))

        self._cache = _CacheEntry(snapshot=snapshot, loaded_at=self._clock())
        logger.info("Loaded snapshot with %d articles (fetched_at=%s)", snapshot.count, snapshot.fetched_at)
        return LoadResult(snapshot=snapshot)

    def query(self, query: ArticleQuery = ArticleQuery(), force_refresh: bool = False) -> QueryResult:
        """Filter, sort and paginate the current snapshot."""
        loaded = self.load(force_refresh)
        articles, total = apply_query(loaded.snapshot.articles, query)
        return QueryResult(
            articles=articles,
            total=total,
            fetched_at=loaded.snapshot.fetched_at,
            error=loaded.error,
        )

    def get_sources(self) -> list[SourceSummary]:
        return summarize_sources(self.load().snapshot.articles)

    def get_bias_distribution(self) -> dict[str, int]:
        return bias_distribution(self.load().snapshot.articles)

    def cache_status(self) -> dict:
        entry = self._cache
        age = self._clock() - entry.loaded_at if entry is not None else None
        return {
            "cached": entry is not None,
            "cache_age_seconds": age,
            "expired": not self._is_fresh(entry),
        }

    def clear_cache(self) -> None:
        self._cache = None
