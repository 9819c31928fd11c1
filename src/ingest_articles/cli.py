"""CLI for ingesting, classifying and snapshotting articles."""

from __future__ import annotations

import dataclasses
import functools
import logging
import os
import sys

from dotenv import load_dotenv

from classify_articles.classify_bias import BiasClassifier
from common.cli_helpers import env_flag, setup_logging
from common.config import Config, load_config
from ingest_articles.fetch_articles.fetch_feed import fetch_feed
from ingest_articles.helpers import log_snapshot_summary, parse_ingest_articles_args, parse_sources
from ingest_articles.ingest_articles import IngestionCoordinator, PacingPolicy
from ingest_articles.models import Snapshot
from ingest_articles.snapshot import SnapshotWriteError, write_snapshot
from ingest_articles.sources import load_sources

load_dotenv()

logger = logging.getLogger(__name__)


def build_classifier(config: Config, disabled: bool = False) -> BiasClassifier | None:
    """Build the bias classifier if AI analysis is enabled and configured."""
    enabled = config.classifier.enabled and env_flag(os.environ.get("ENABLE_AI_ANALYSIS"), default=True)
    if disabled or not enabled:
        logger.info("AI bias analysis disabled")
        return None
    if not os.environ.get("OPENAI_API_KEY"):
        logger.info("AI bias analysis disabled (set OPENAI_API_KEY to enable)")
        return None

    logger.info("AI bias analysis enabled (model=%s)", config.classifier.model)
    return BiasClassifier(
        model=config.classifier.model,
        min_title_length=config.classifier.min_title_length,
        request_timeout=config.classifier.request_timeout,
        max_tokens=config.classifier.max_tokens,
    )


def build_writer(config: Config, load_local: bool, load_s3: bool, output: str | None):
    """Return a callable that writes a snapshot to every requested backend.

    Without --load-local/--load-s3 the configured storage backend is used.
    """
    if load_local or load_s3:
        storages = []
        if load_local:
            storages.append(dataclasses.replace(config.storage, backend="local"))
        if load_s3:
            storages.append(dataclasses.replace(config.storage, backend="s3"))
    else:
        storages = [config.storage]
    if output:
        storages = [dataclasses.replace(storage, local_path=output) for storage in storages]

    def write(snapshot: Snapshot) -> str:
        return ", ".join(write_snapshot(snapshot, storage) for storage in storages)

    return write


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = parse_ingest_articles_args(argv)

    config = load_config(args.config)
    sources = parse_sources(args.sources, load_sources(config.sources))

    coordinator = IngestionCoordinator(
        sources=sources,
        fetch_feed=functools.partial(
            fetch_feed,
            timeout=config.feeds.request_timeout,
            user_agent=config.feeds.user_agent,
        ),
        classifier=build_classifier(config, disabled=args.no_ai),
        pacing=PacingPolicy(
            source_interval=config.pacing.source_interval_seconds,
            classify_interval=config.pacing.classify_interval_seconds,
        ),
    )

    writer = build_writer(config, args.load_local, args.load_s3, args.output)
    try:
        coordinator.run_and_write(writer, after_write=[log_snapshot_summary])
    except SnapshotWriteError as e:
        logger.critical("Fatal error in ingestion: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
