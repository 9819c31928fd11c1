"""Filter, sort and paginate articles from a snapshot."""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from classify_articles.models import POLITICAL_BIASES
from ingest_articles.models import Article

SORT_OPTIONS = ("date", "title", "source")


@dataclass(frozen=True)
class ArticleQuery:
    """Conjunctive filters plus sort order and a prefix limit."""
    bias: Optional[str] = None
    source: Optional[str] = None
    topic: Optional[str] = None
    section: Optional[str] = None
    search: Optional[str] = None
    sort_by: Optional[str] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class SourceSummary:
    id: str
    name: str
    bias: str
    article_count: int


def _matches(article: Article, query: ArticleQuery, search: Optional[str]) -> bool:
    if query.bias and article.declared_bias != query.bias:
        return False
    if query.source and article.source_id != query.source:
        return False
    if query.topic and article.topic != query.topic:
        return False
    if query.section and article.section != query.section:
        return False
    if search and search not in article.title.lower() and search not in article.summary.lower():
        return False
    return True


def filter_articles(articles: Iterable[Article], query: ArticleQuery) -> list[Article]:
    search = query.search.lower() if query.search else None
    return [article for article in articles if _matches(article, query, search)]


def sort_articles(articles: list[Article], sort_by: Optional[str]) -> list[Article]:
    """Return a sorted copy. Unknown or missing sort keys keep snapshot order."""
    if sort_by == "date":
        return sorted(articles, key=lambda a: a.publication_date, reverse=True)
    if sort_by == "title":
        return sorted(articles, key=lambda a: a.title.casefold())
    if sort_by == "source":
        return sorted(articles, key=lambda a: a.source_name.casefold())
    return list(articles)


def apply_query(articles: Iterable[Article], query: ArticleQuery) -> tuple[list[Article], int]:
    """Apply filters, sort and limit.

    Returns:
        Tuple of (page of articles, number of matches before the limit)
    """
    matched = sort_articles(filter_articles(articles, query), query.sort_by)
    total = len(matched)
    if query.limit is not None and query.limit >= 0:
        matched = matched[: query.limit]
    return matched, total


def summarize_sources(articles: Iterable[Article]) -> list[SourceSummary]:
    """Unique sources with article counts, most prolific first."""
    counts: Counter = Counter()
    first_seen: dict[str, Article] = {}
    for article in articles:
        counts[article.source_id] += 1
        first_seen.setdefault(article.source_id, article)

    summaries = [
        SourceSummary(
            id=source_id,
            name=first_seen[source_id].source_name,
            bias=first_seen[source_id].declared_bias,
            article_count=count,
        )
        for source_id, count in counts.items()
    ]
    return sorted(summaries, key=lambda s: s.article_count, reverse=True)


def bias_distribution(articles: Iterable[Article]) -> dict[str, int]:
    distribution = {bias: 0 for bias in POLITICAL_BIASES}
    for article in articles:
        if article.declared_bias in distribution:
            distribution[article.declared_bias] += 1
    return distribution
