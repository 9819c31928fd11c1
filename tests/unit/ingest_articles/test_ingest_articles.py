"""Tests for ingest_articles.ingest_articles module."""

import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from classify_articles.models import BiasAnalysis
from ingest_articles.ingest_articles import IngestionCoordinator, IngestState, PacingPolicy
from ingest_articles.models import Source

NOW = datetime(2024, 1, 2, 0, 0, 0, tzinfo=timezone.utc)

SOURCE_A = Source(id="a", name="Source A", rss_url="https://a.example/rss", declared_bias="left")
SOURCE_B = Source(id="b", name="Source B", rss_url="https://b.example/rss", declared_bias="center")
SOURCE_C = Source(id="c", name="Source C", rss_url="https://c.example/rss", declared_bias="right")

ANALYSIS = BiasAnalysis("left", 0.9, "neutral", 0.8, "Test analysis.")


def _entry(title: str, link: str, hours_ago: int) -> dict:
    published = NOW - timedelta(hours=hours_ago)
    return {"title": title, "link": link, "published": published.isoformat()}


FEEDS = {
    "a": {"entries": [_entry("Quiet morning in the valley", "https://a/1", 5), _entry("A2 story", "https://a/2", 1)]},
    "c": {"entries": [_entry("C1 story", "https://c/1", 3)]},
}


def _fetch(source):
    if source.id == "b":
        raise ConnectionError("connection refused")
    return FEEDS[source.id]


def _coordinator(sources=(SOURCE_A, SOURCE_B, SOURCE_C), **kwargs) -> IngestionCoordinator:
    kwargs.setdefault("fetch_feed", _fetch)
    kwargs.setdefault("sleep", MagicMock())
    return IngestionCoordinator(sources, clock=lambda: NOW, **kwargs)


class TestRun:
    def test_failing_source_is_isolated(self) -> None:
        snapshot = _coordinator().run()

        assert {a.source_id for a in snapshot.articles} == {"a", "c"}
        assert snapshot.count == 3
        assert snapshot.failed_sources == ("b",)
        assert snapshot.fetched_at == NOW

    def test_articles_sorted_newest_first(self) -> None:
        snapshot = _coordinator().run()
        dates = [a.publication_date for a in snapshot.articles]
        assert dates == sorted(dates, reverse=True)
        assert [a.title for a in snapshot.articles] == ["A2 story", "C1 story", "Quiet morning in the valley"]

    def test_duplicate_ids_are_dropped(self) -> None:
        feeds = {"a": {"entries": [_entry("Same", "https://a/1", 1), _entry("Same", "https://a/1", 2)]}}
        snapshot = _coordinator([SOURCE_A], fetch_feed=lambda s: feeds[s.id]).run()
        assert snapshot.count == 1

    def test_all_sources_failing_yields_empty_snapshot(self) -> None:
        def fail(source):
            raise TimeoutError("timed out")

        snapshot = _coordinator(fetch_feed=fail).run()
        assert snapshot.count == 0
        assert snapshot.failed_sources == ("a", "b", "c")

    def test_sleeps_between_sources_only(self) -> None:
        sleep = MagicMock()
        _coordinator(sleep=sleep, pacing=PacingPolicy(source_interval=0.4, classify_interval=0.1)).run()
        assert [c.args[0] for c in sleep.call_args_list] == [0.4, 0.4]

    def test_placeholder_images_tracked(self) -> None:
        snapshot = _coordinator().run()
        assert snapshot.placeholder_image_ids == {a.id for a in snapshot.articles}

    def test_cancel_before_start_collects_nothing(self) -> None:
        cancel = threading.Event()
        cancel.set()
        snapshot = _coordinator().run(cancel_event=cancel)
        assert snapshot.count == 0
        assert snapshot.failed_sources == ()

    def test_cancel_mid_run_keeps_collected_articles(self) -> None:
        cancel = threading.Event()

        def fetch_then_cancel(source):
            cancel.set()
            return FEEDS[source.id]

        snapshot = _coordinator(fetch_feed=fetch_then_cancel).run(cancel_event=cancel)
        assert {a.source_id for a in snapshot.articles} == {"a"}


class TestClassification:
    def test_classifies_long_titles_only(self) -> None:
        classifier = MagicMock()
        classifier.should_classify.side_effect = lambda title: len(title) > 10
        classifier.classify.return_value = ANALYSIS
        sleep = MagicMock()

        snapshot = _coordinator(classifier=classifier, sleep=sleep).run()

        analysed = {a.title: a.ai_analysis for a in snapshot.articles}
        assert analysed["Quiet morning in the valley"] == ANALYSIS
        assert analysed["A2 story"] is None
        classifier.classify.assert_called_once_with("Quiet morning in the valley", "", "a")
        assert 0.1 in [c.args[0] for c in sleep.call_args_list]

    def test_classifier_error_keeps_article(self) -> None:
        classifier = MagicMock()
        classifier.should_classify.return_value = True
        classifier.classify.side_effect = RuntimeError("boom")

        snapshot = _coordinator(classifier=classifier).run()

        assert snapshot.count == 3
        assert all(a.ai_analysis is None for a in snapshot.articles)


class TestRunAndWrite:
    def test_writes_and_runs_hooks(self) -> None:
        write = MagicMock(return_value="memory")
        hook = MagicMock()
        coordinator = _coordinator()

        snapshot = coordinator.run_and_write(write, after_write=[hook])

        write.assert_called_once_with(snapshot)
        hook.assert_called_once_with(snapshot)
        assert coordinator.state == IngestState.WRITTEN

    def test_hook_failure_is_ignored(self) -> None:
        hook = MagicMock(side_effect=RuntimeError("hook failed"))
        snapshot = _coordinator().run_and_write(MagicMock(), after_write=[hook])
        assert snapshot.count == 3

    def test_write_failure_propagates(self) -> None:
        write = MagicMock(side_effect=OSError("disk full"))
        coordinator = _coordinator()

        with pytest.raises(OSError):
            coordinator.run_and_write(write)
        assert coordinator.state != IngestState.WRITTEN
