"""Hashing utilities."""

import hashlib


def generate_article_id(source_id: str, link: str, title: str) -> str:
    """Generate a stable article ID from source, link, and title."""
    seed = f"{source_id}|{link}|{title}"
    digest = hashlib.sha256(seed.encode("utf-8")).hexdigest()[:16]
    return f"{source_id}-{digest}"
