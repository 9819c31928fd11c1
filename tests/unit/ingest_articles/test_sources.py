"""Tests for ingest_articles.sources module."""

import pytest

from ingest_articles.models import Source
from ingest_articles.sources import load_sources, parse_source, select_sources

REGISTRY = [
    Source(id="npr", name="NPR", rss_url="https://npr.example/rss", declared_bias="left"),
    Source(id="bbc", name="BBC", rss_url="https://bbc.example/rss", declared_bias="center"),
    Source(id="fox", name="Fox", rss_url="https://fox.example/rss", declared_bias="right"),
]


class TestParseSource:
    def test_accepts_short_keys(self) -> None:
        source = parse_source({"id": "bbc", "name": "BBC", "rss": "https://bbc.example/rss", "bias": "Center"})
        assert source == Source(id="bbc", name="BBC", rss_url="https://bbc.example/rss", declared_bias="center")

    def test_unknown_bias_defaults_to_center(self) -> None:
        source = parse_source({"id": "x", "rss_url": "https://x.example/rss", "bias": "libertarian"})
        assert source.declared_bias == "center"
        assert source.name == "x"

    def test_missing_url_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_source({"id": "x"})


class TestLoadSources:
    def test_skips_invalid_and_duplicate_entries(self) -> None:
        sources = load_sources(
            [
                {"id": "a", "rss_url": "https://a.example/rss", "bias": "left"},
                {"id": "", "rss_url": "https://b.example/rss"},
                {"id": "a", "rss_url": "https://other.example/rss", "bias": "right"},
            ]
        )
        assert [s.id for s in sources] == ["a"]
        assert sources[0].rss_url == "https://a.example/rss"


class TestSelectSources:
    def test_empty_or_all_returns_everything(self) -> None:
        assert select_sources(REGISTRY, []) == REGISTRY
        assert select_sources(REGISTRY, ["all"]) == REGISTRY

    def test_keeps_registry_order(self) -> None:
        result = select_sources(REGISTRY, ["fox", "npr"])
        assert [s.id for s in result] == ["npr", "fox"]

    def test_ignores_invalid_ids_when_some_match(self) -> None:
        result = select_sources(REGISTRY, ["bbc", "nope"])
        assert [s.id for s in result] == ["bbc"]

    def test_no_valid_ids_raises(self) -> None:
        with pytest.raises(ValueError):
            select_sources(REGISTRY, ["nope"])
