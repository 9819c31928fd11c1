"""Ingest, normalize and classify articles from all sources into one snapshot."""

import dataclasses
import logging
import threading
import time
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from classify_articles.classify_bias import BiasClassifier
from common.datetime import utc_now
from ingest_articles.fetch_articles.fetch_feed import fetch_feed as default_fetch_feed
from ingest_articles.models import Article, Snapshot, Source
from ingest_articles.normalize_articles.normalize import normalize_feed

logger = logging.getLogger(__name__)


class IngestState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    CLASSIFYING = "classifying"
    AGGREGATING = "aggregating"
    WRITTEN = "written"


@dataclasses.dataclass(frozen=True)
class PacingPolicy:
    """Delays (seconds) that keep the ingester a polite client."""
    source_interval: float = 0.4
    classify_interval: float = 0.1


class IngestionCoordinator:
    """Drive fetch, normalize and classify across sources, one source at a time."""

    def __init__(
        self,
        sources: Iterable[Source],
        fetch_feed: Callable[[Source], Any] = default_fetch_feed,
        classifier: Optional[BiasClassifier] = None,
        pacing: PacingPolicy = PacingPolicy(),
        clock: Callable[[], Any] = utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.sources = list(sources)
        self.fetch_feed = fetch_feed
        self.classifier = classifier
        self.pacing = pacing
        self.clock = clock
        self.sleep = sleep
        self.state = IngestState.IDLE

    def _set_state(self, state: IngestState, detail: str = "") -> None:
        self.state = state
        logger.debug("Ingestion state: %s %s", state.value, detail)

    def _classify(self, article: Article) -> Article:
        try:
            analysis = self.classifier.classify(article.title, article.summary, article.source_id)
        except Exception as e:
            logger.warning("AI analysis failed for %r: %s", article.title[:50], e)
            return article
        self.sleep(self.pacing.classify_interval)
        return dataclasses.replace(article, ai_analysis=analysis)

    def _ingest_source(
        self,
        source: Source,
        ingested_at,
        cancel_event: threading.Event,
    ) -> list[tuple[Article, bool]]:
        self._set_state(IngestState.FETCHING, source.id)
        feed = self.fetch_feed(source)

        self._set_state(IngestState.NORMALIZING, source.id)
        normalized = normalize_feed(feed, source, ingested_at)

        if self.classifier is None:
            return normalized

        self._set_state(IngestState.CLASSIFYING, source.id)
        results = []
        for article, is_placeholder in normalized:
            if not cancel_event.is_set() and self.classifier.should_classify(article.title):
                article = self._classify(article)
            results.append((article, is_placeholder))
        return results

    def run(self, cancel_event: Optional[threading.Event] = None) -> Snapshot:
        """Run one ingestion pass and return the aggregated snapshot.

        Source failures contribute zero articles; they never abort the run.
        Setting `cancel_event` stops new per-source work; articles already
        collected are still aggregated.
        """
        cancel_event = cancel_event or threading.Event()
        ingested_at = self.clock()
        logger.info("Ingesting articles from %d sources", len(self.sources))

        collected: list[tuple[Article, bool]] = []
        failed: list[str] = []

        for index, source in enumerate(self.sources):
            if cancel_event.is_set():
                logger.warning("Ingestion cancelled before %s", source.id)
                break

            try:
                items = self._ingest_source(source, ingested_at, cancel_event)
            except Exception as e:
                logger.error("Failed to fetch %s (%s): %s", source.name, source.id, e)
                failed.append(source.id)
                items = []

            classified = sum(1 for article, _ in items if article.ai_analysis is not None)
            logger.info("  -> %s: %d articles (%d with AI analysis)", source.id, len(items), classified)
            collected.extend(items)

            if index < len(self.sources) - 1:
                self.sleep(self.pacing.source_interval)

        return self._aggregate(collected, failed)

    def _aggregate(self, collected: list[tuple[Article, bool]], failed: list[str]) -> Snapshot:
        self._set_state(IngestState.AGGREGATING)

        seen: set[str] = set()
        articles: list[Article] = []
        placeholders: set[str] = set()
        for article, is_placeholder in collected:
            if article.id in seen:
                continue
            seen.add(article.id)
            articles.append(article)
            if is_placeholder:
                placeholders.add(article.id)

        # Newest first; ties keep fetch order
        articles.sort(key=lambda a: a.publication_date, reverse=True)

        logger.info("Total articles collected: %d (%d sources failed)", len(articles), len(failed))
        return Snapshot(
            fetched_at=self.clock(),
            articles=tuple(articles),
            failed_sources=tuple(failed),
            placeholder_image_ids=frozenset(placeholders),
        )

    def run_and_write(
        self,
        write: Callable[[Snapshot], Any],
        after_write: Iterable[Callable[[Snapshot], Any]] = (),
        cancel_event: Optional[threading.Event] = None,
    ) -> Snapshot:
        """Run, persist the snapshot, then run post-write hooks.

        Errors raised by `write` propagate (the run has failed). Hook failures
        are logged and ignored.
        """
        snapshot = self.run(cancel_event)
        location = write(snapshot)
        self._set_state(IngestState.WRITTEN)
        logger.info("Snapshot with %d articles written to %s", snapshot.count, location)

        for hook in after_write:
            try:
                hook(snapshot)
            except Exception as e:
                logger.warning("Post-write hook %s failed: %s", getattr(hook, "__name__", hook), e)

        return snapshot
