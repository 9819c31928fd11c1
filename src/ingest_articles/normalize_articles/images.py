"""Image resolution for feed entries."""

import random
import re
from typing import Any, Callable, Optional

from common.utils import get_value

PLACEHOLDER_IMAGES = (
    "https://picsum.photos/seed/news-1/800/450",
    "https://picsum.photos/seed/news-2/800/450",
    "https://picsum.photos/seed/news-3/800/450",
    "https://picsum.photos/seed/news-4/800/450",
    "https://picsum.photos/seed/news-5/800/450",
)

_IMG_SRC_RE = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"']", re.IGNORECASE)


def _is_http_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(("http://", "https://"))


def _url_from(value: Any, keys: tuple[str, ...] = ("url", "href")) -> Optional[str]:
    """Pull a URL out of a string, a dict, or a list of dicts."""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        for item in value:
            url = _url_from(item, keys)
            if url:
                return url
        return None
    for key in keys:
        url = get_value(value, key)
        if isinstance(url, str) and url:
            return url
    return None


def _enclosure_url(entry: Any) -> Optional[str]:
    url = _url_from(get_value(entry, "enclosure"))
    if url:
        return url
    for enclosure in get_value(entry, "enclosures") or []:
        url = _url_from(enclosure)
        if url:
            return url
    for link in get_value(entry, "links") or []:
        if get_value(link, "rel") == "enclosure" and str(get_value(link, "type") or "").startswith("image"):
            return _url_from(link)
    return None


def _content_image_url(entry: Any) -> Optional[str]:
    contents = get_value(entry, "content")
    if isinstance(contents, str):
        html = contents
    else:
        html = " ".join(str(get_value(part, "value") or "") for part in contents or [])
    html = html or str(get_value(entry, "summary") or "")
    match = _IMG_SRC_RE.search(html)
    return match.group(1) if match else None


def find_image(entry: Any) -> Optional[str]:
    """Return the first http(s) image URL declared on a feed entry, if any.

    Order: enclosure, media:content, media:thumbnail, image, itunes:image,
    then the first <img> in the entry's HTML.
    """
    candidates = (
        _enclosure_url(entry),
        _url_from(get_value(entry, "media_content")),
        _url_from(get_value(entry, "media_thumbnail")),
        _url_from(get_value(entry, "image")),
        _url_from(get_value(entry, "itunes_image")),
        _content_image_url(entry),
    )
    for url in candidates:
        if _is_http_url(url):
            return url
    return None


def extract_image(entry: Any, choose: Callable = random.choice) -> tuple[str, bool]:
    """Resolve an image for the entry, falling back to a placeholder.

    Returns:
        Tuple of (image_url, is_placeholder)
    """
    url = find_image(entry)
    if url:
        return url, False
    return choose(PLACEHOLDER_IMAGES), True
