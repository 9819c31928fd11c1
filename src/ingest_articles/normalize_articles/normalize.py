"""Normalize raw feed entries into canonical Article records."""

import calendar
import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

from common.datetime import parse_loose_datetime
from common.hashing import generate_article_id
from common.utils import first_present, get_value
from ingest_articles.models import Article, Source
from ingest_articles.normalize_articles.categorize import categorize_article, determine_section
from ingest_articles.normalize_articles.images import extract_image

logger = logging.getLogger(__name__)

DATE_FIELDS = ["published", "pubDate", "isoDate", "updated", "created"]
PARSED_DATE_FIELDS = ["published_parsed", "updated_parsed", "created_parsed"]


def clean_text(text: Optional[str]) -> str:
    """Clean text by stripping HTML tags and collapsing whitespace."""
    if not text:
        return ""
    # Strip HTML tags (keep text content)
    text = re.sub(r"<[^>]*>", " ", str(text))
    # Collapse whitespace
    return re.sub(r"\s+", " ", text).strip()


def _content_text(entry: Any) -> Optional[str]:
    contents = get_value(entry, "content")
    if isinstance(contents, str):
        return contents
    for part in contents or []:
        value = get_value(part, "value")
        if value:
            return value
    return None


def parse_entry_date(entry: Any, fallback: datetime) -> datetime:
    """Extract the entry's publication date, or `fallback` if none parses."""
    for key in DATE_FIELDS:
        parsed = parse_loose_datetime(get_value(entry, key))
        if parsed is not None:
            return parsed

    for key in PARSED_DATE_FIELDS:
        struct = get_value(entry, key)
        if struct:
            try:
                return datetime.fromtimestamp(calendar.timegm(struct), tz=timezone.utc)
            except (TypeError, ValueError, OverflowError):
                continue

    return fallback


def normalize_entry(
    entry: Any,
    source: Source,
    ingested_at: datetime,
) -> tuple[Article, bool] | None:
    """Normalize one feed entry.

    Returns:
        Tuple of (article, used_placeholder_image), or None if the entry has
        neither a title nor a link.
    """
    title = clean_text(get_value(entry, "title"))
    link = (first_present(entry, ["link", "guid", "id"]) or "").strip()
    if not title and not link:
        return None

    summary = clean_text(
        first_present(entry, ["summary", "description", "contentSnippet"]) or _content_text(entry)
    )
    published_at = parse_entry_date(entry, ingested_at)
    image_url, is_placeholder = extract_image(entry)
    author = clean_text(first_present(entry, ["author", "creator", "dc_creator"])) or source.name

    article = Article(
        id=generate_article_id(source.id, link, title),
        title=title,
        summary=summary,
        url=link,
        image_url=image_url,
        author=author,
        source_id=source.id,
        source_name=source.name,
        publication_date=published_at,
        declared_bias=source.declared_bias,
        topic=categorize_article(title, summary),
        section=determine_section(title, summary, published_at, ingested_at),
    )
    return article, is_placeholder


def normalize_feed(feed: Any, source: Source, ingested_at: datetime) -> list[tuple[Article, bool]]:
    """Normalize every entry of a parsed feed. Bad entries are skipped."""
    results = []
    for entry in get_value(feed, "entries") or []:
        try:
            normalized = normalize_entry(entry, source, ingested_at)
        except Exception as e:
            logger.warning("Failed to parse entry from %s: %s", source.id, e)
            continue
        if normalized is None:
            logger.warning("Skipping entry without title or link from %s", source.id)
            continue
        results.append(normalized)
    return results
