"""Source registry: the static list of feeds to ingest."""

import logging
from typing import Any, Iterable

from classify_articles.models import POLITICAL_BIASES
from ingest_articles.models import Source

logger = logging.getLogger(__name__)


def parse_source(raw: dict[str, Any]) -> Source:
    """Build a Source from a registry entry.

    Raises:
        ValueError: If the entry has no id or feed URL.
    """
    source_id = (raw.get("id") or "").strip()
    rss_url = (raw.get("rss_url") or raw.get("rss") or "").strip()
    if not source_id or not rss_url:
        raise ValueError(f"Source entry needs an id and rss_url: {raw!r}")

    bias = (raw.get("declared_bias") or raw.get("bias") or "").strip().lower()
    if bias not in POLITICAL_BIASES:
        logger.warning("Unknown bias %r for source %s, using center", bias, source_id)
        bias = "center"

    return Source(
        id=source_id,
        name=(raw.get("name") or source_id).strip(),
        rss_url=rss_url,
        declared_bias=bias,
    )


def load_sources(entries: Iterable[dict[str, Any]]) -> list[Source]:
    """Parse registry entries, skipping invalid ones and duplicate ids."""
    sources: list[Source] = []
    seen: set[str] = set()
    for entry in entries:
        try:
            source = parse_source(entry)
        except ValueError as e:
            logger.warning("Skipping source: %s", e)
            continue
        if source.id in seen:
            logger.warning("Duplicate source id: %s", source.id)
            continue
        seen.add(source.id)
        sources.append(source)
    return sources


def select_sources(sources: list[Source], source_ids: list[str]) -> list[Source]:
    """Keep only the requested sources, in registry order.

    Raises:
        ValueError: If none of the requested ids exist.
    """
    if not source_ids or any(s.lower() == "all" for s in source_ids):
        return list(sources)

    valid = {source.id for source in sources}
    for source_id in source_ids:
        if source_id not in valid:
            logger.warning("Invalid source: %s", source_id)

    selected = [source for source in sources if source.id in set(source_ids)]
    if not selected:
        raise ValueError(f"No valid sources provided. Valid sources: {', '.join(sorted(valid))}")
    return selected
