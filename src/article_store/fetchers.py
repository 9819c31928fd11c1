"""Snapshot fetchers for the article store.

Each fetcher is a zero-argument callable returning a parsed Snapshot and
raising SnapshotFetchError on any failure.
"""

import json
import logging
from pathlib import Path

import requests

from common.aws import read_s3_bytes
from common.local_io import read_json
from ingest_articles.models import Snapshot
from ingest_articles.snapshot import snapshot_from_dict

logger = logging.getLogger(__name__)


class SnapshotFetchError(Exception):
    """The latest snapshot could not be fetched or parsed."""


class LocalSnapshotFetcher:
    """Read the snapshot from a local JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __call__(self) -> Snapshot:
        try:
            return snapshot_from_dict(read_json(self.path))
        except (OSError, ValueError) as e:
            raise SnapshotFetchError(f"Failed to read {self.path}: {e}") from e


class S3SnapshotFetcher:
    """Read the snapshot from an S3 object."""

    def __init__(self, bucket: str, key: str) -> None:
        self.bucket = bucket
        self.key = key

    def __call__(self) -> Snapshot:
        try:
            data = read_s3_bytes(self.bucket, self.key)
            return snapshot_from_dict(json.loads(data.decode("utf-8")))
        except Exception as e:
            raise SnapshotFetchError(f"Failed to read s3://{self.bucket}/{self.key}: {e}") from e


class HttpSnapshotFetcher:
    """Fetch the snapshot over HTTP, e.g. from a static file host."""

    def __init__(self, url: str, timeout: float = 15.0, session: requests.Session | None = None) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def __call__(self) -> Snapshot:
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            return snapshot_from_dict(response.json())
        except (requests.RequestException, ValueError) as e:
            raise SnapshotFetchError(f"Failed to fetch {self.url}: {e}") from e
