"""Helper functions for ingest_articles CLI."""

from __future__ import annotations

import argparse
import logging
from collections import Counter

from common.cli_helpers import parse_csv_list
from ingest_articles.models import Snapshot, Source
from ingest_articles.sources import select_sources

logger = logging.getLogger(__name__)


def parse_sources(value: str | None, registry: list[Source]) -> list[Source]:
    '''Parse the --sources argument into a list of registry sources.'''
    return select_sources(registry, parse_csv_list(value))


def log_snapshot_summary(snapshot: Snapshot) -> None:
    '''Log the category breakdown and image coverage of a written snapshot.'''
    categories = Counter(article.topic for article in snapshot.articles)
    breaking = sum(1 for article in snapshot.articles if article.section == "breaking")

    logger.info("%d articles without images", len(snapshot.placeholder_image_ids))
    logger.info("Category breakdown: %s", dict(categories))
    logger.info("Breaking news articles: %d", breaking)
    if snapshot.failed_sources:
        logger.warning("Failed sources: %s", ", ".join(snapshot.failed_sources))


def parse_ingest_articles_args(argv: list[str] | None = None) -> argparse.Namespace:
    '''Parse CLI arguments for ingest_articles.'''

    parser = argparse.ArgumentParser(description="Fetch, classify and snapshot news articles.")
    parser.add_argument("--config", default=None, help="Config name in configs/ (default: $CONFIG_ENV or prod)")
    parser.add_argument(
        "--sources",
        default=None,
        help="Comma-separated list of source ids (default: all).",
    )
    parser.add_argument("--no-ai", action="store_true", help="Skip AI bias classification")
    parser.add_argument("--load-local", action="store_true", help="Write the snapshot to a local file")
    parser.add_argument("--load-s3", action="store_true", help="Upload the snapshot to S3")
    parser.add_argument("--output", default=None, help="Local snapshot path (overrides config)")
    return parser.parse_args(argv)
