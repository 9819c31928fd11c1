"""Build an ArticleStore from configuration."""

import os

from article_store.fetchers import LocalSnapshotFetcher, S3SnapshotFetcher
from article_store.store import ArticleStore
from common.config import Config


def build_fetcher(config: Config):
    """Read the snapshot from wherever ingestion writes it."""
    storage = config.storage
    if storage.backend == "s3":
        return S3SnapshotFetcher(os.environ["S3_BUCKET_NAME"], storage.s3_key)
    if storage.backend == "local":
        return LocalSnapshotFetcher(storage.local_path)
    raise ValueError(f"Unknown storage backend: {storage.backend}")


def build_article_store(config: Config) -> ArticleStore:
    return ArticleStore(build_fetcher(config), ttl_seconds=config.cache.ttl_seconds)
