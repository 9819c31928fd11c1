"""RSS/Atom feed fetching."""

import logging
from typing import Any

import feedparser
import requests

from ingest_articles.models import Source

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "bias-news-ingest/1.0 (RSS reader)"


def fetch_feed(
    source: Source,
    timeout: float = 15.0,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Any:
    """Fetch and parse one source's feed.

    Raises:
        requests.RequestException: On network errors, timeouts or HTTP errors.
        ValueError: If the response is not a parseable feed.
    """
    response = requests.get(
        source.rss_url,
        timeout=timeout,
        headers={"User-Agent": user_agent},
    )
    response.raise_for_status()

    feed = feedparser.parse(response.content)
    if feed.get("bozo") and not feed.get("entries"):
        raise ValueError(f"Malformed feed for {source.id}: {feed.get('bozo_exception')}")

    logger.debug("Fetched %d entries from %s", len(feed.get("entries", [])), source.id)
    return feed
