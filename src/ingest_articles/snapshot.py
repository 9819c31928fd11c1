"""Snapshot artifact: the JSON contract between ingestion and serving."""

from __future__ import annotations

import logging
import os
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any

from classify_articles.classify_bias import validate_analysis
from classify_articles.models import POLITICAL_BIASES
from common.aws import upload_json_to_s3
from common.config import StorageConfig
from common.datetime import parse_loose_datetime, utc_now
from common.local_io import write_json_atomic
from common.serialization import serialize_dataclass
from ingest_articles.models import Article, Snapshot

logger = logging.getLogger(__name__)


class SnapshotWriteError(Exception):
    """The snapshot could not be persisted. Fatal for an ingestion run."""


class SnapshotFormatError(ValueError):
    """A snapshot document does not have the expected structure."""


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    """Serialize a snapshot to the artifact's JSON shape."""
    articles = list(snapshot.articles)
    return {
        "fetched_at": snapshot.fetched_at.isoformat(),
        "count": len(articles),
        "articles": [serialize_dataclass(article) for article in articles],
        "categories": dict(Counter(article.topic for article in articles)),
        "breaking_news": [article.id for article in articles if article.section == "breaking"],
        "articles_without_images": [
            {
                "id": article.id,
                "title": article.title,
                "source": article.source_name,
                "url": article.url,
            }
            for article in articles
            if article.id in snapshot.placeholder_image_ids
        ],
        "failed_sources": list(snapshot.failed_sources),
    }


def _text(raw: dict[str, Any], key: str, default: str = "") -> str:
    value = raw.get(key)
    return value if isinstance(value, str) and value else default


def article_from_dict(raw: Any, fallback_date: datetime) -> Article | None:
    """Rebuild an Article from its JSON form, defaulting missing fields.

    Returns None for records without an id.
    """
    if not isinstance(raw, dict) or not raw.get("id"):
        return None

    source_name = _text(raw, "source_name", "Unknown Source")
    bias = _text(raw, "declared_bias") or _text(raw, "political_bias")
    analysis = raw.get("ai_analysis")

    return Article(
        id=str(raw["id"]),
        title=_text(raw, "title", "Untitled"),
        summary=_text(raw, "summary"),
        url=_text(raw, "url"),
        image_url=_text(raw, "image_url"),
        author=_text(raw, "author", source_name),
        source_id=_text(raw, "source_id", "unknown"),
        source_name=source_name,
        publication_date=parse_loose_datetime(raw.get("publication_date")) or fallback_date,
        declared_bias=bias if bias in POLITICAL_BIASES else "center",
        topic=_text(raw, "topic", "General"),
        section=_text(raw, "section", "featured"),
        ai_analysis=validate_analysis(analysis) if isinstance(analysis, dict) else None,
    )


def snapshot_from_dict(data: Any) -> Snapshot:
    """Parse and repair a snapshot document.

    Raises:
        SnapshotFormatError: If the document has no `articles` list.
    """
    if not isinstance(data, dict) or not isinstance(data.get("articles"), list):
        raise SnapshotFormatError("Invalid articles data structure")

    fetched_at = parse_loose_datetime(data.get("fetched_at")) or utc_now()

    articles = []
    for raw in data["articles"]:
        article = article_from_dict(raw, fetched_at)
        if article is None:
            logger.warning("Dropping snapshot record without id")
            continue
        articles.append(article)

    placeholder_ids = frozenset(
        item.get("id") for item in data.get("articles_without_images") or [] if isinstance(item, dict)
    )
    return Snapshot(
        fetched_at=fetched_at,
        articles=tuple(articles),
        failed_sources=tuple(data.get("failed_sources") or ()),
        placeholder_image_ids=placeholder_ids,
    )


def write_snapshot_local(snapshot: Snapshot, path: str | Path) -> Path:
    """Atomically write the snapshot to a local JSON file."""
    target = write_json_atomic(snapshot_to_dict(snapshot), path)
    logger.info("Saved %d articles to %s", snapshot.count, target)
    return target


def write_snapshot_s3(snapshot: Snapshot, bucket: str, key: str) -> None:
    """Write the snapshot to S3 as a single object."""
    upload_json_to_s3(snapshot_to_dict(snapshot), bucket, key)
    logger.info("Uploaded %d articles to s3://%s/%s", snapshot.count, bucket, key)


def write_snapshot(snapshot: Snapshot, storage: StorageConfig) -> str:
    """Write the snapshot to the configured backend.

    Returns:
        Location of the written artifact

    Raises:
        SnapshotWriteError: If the artifact could not be written.
    """
    try:
        if storage.backend == "s3":
            bucket = os.environ["S3_BUCKET_NAME"]
            write_snapshot_s3(snapshot, bucket, storage.s3_key)
            return f"s3://{bucket}/{storage.s3_key}"
        if storage.backend == "local":
            return str(write_snapshot_local(snapshot, storage.local_path))
    except Exception as e:
        raise SnapshotWriteError(f"Failed to write snapshot: {e}") from e

    raise SnapshotWriteError(f"Unknown storage backend: {storage.backend}")
