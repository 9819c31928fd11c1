"""Data models for ingest_articles pipeline stage."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from classify_articles.models import BiasAnalysis


@dataclass(frozen=True)
class Source:
    """Feed source from the source registry."""
    id: str
    name: str
    rss_url: str
    declared_bias: str


@dataclass(frozen=True)
class Article:
    """Canonical article normalized from a feed entry. Immutable once created."""
    id: str
    title: str
    summary: str
    url: str
    image_url: str
    author: str
    source_id: str
    source_name: str
    publication_date: datetime
    declared_bias: str
    topic: str = "General"
    section: str = "featured"
    ai_analysis: Optional[BiasAnalysis] = None


@dataclass(frozen=True)
class Snapshot:
    """Atomic output of one ingestion run."""
    fetched_at: datetime
    articles: tuple[Article, ...] = ()
    failed_sources: tuple[str, ...] = ()
    placeholder_image_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def count(self) -> int:
        return len(self.articles)
