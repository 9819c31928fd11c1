"""Tests for ingest_articles.fetch_articles.fetch_feed module."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from ingest_articles.fetch_articles.fetch_feed import fetch_feed
from ingest_articles.models import Source

SOURCE = Source(id="bbc", name="BBC", rss_url="https://bbc.example/rss", declared_bias="center")

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>BBC</title>
    <item>
      <title>First story</title>
      <link>https://bbc.example/1</link>
      <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""


def _response(content: bytes, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.content = content
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return response


class TestFetchFeed:
    @patch("ingest_articles.fetch_articles.fetch_feed.requests.get")
    def test_parses_entries(self, mock_get) -> None:
        mock_get.return_value = _response(RSS)

        feed = fetch_feed(SOURCE, timeout=5.0, user_agent="test-agent")

        assert len(feed.entries) == 1
        assert feed.entries[0].title == "First story"
        mock_get.assert_called_once_with(
            "https://bbc.example/rss", timeout=5.0, headers={"User-Agent": "test-agent"}
        )

    @patch("ingest_articles.fetch_articles.fetch_feed.requests.get")
    def test_http_error_raises(self, mock_get) -> None:
        mock_get.return_value = _response(b"", status=503)

        with pytest.raises(requests.HTTPError):
            fetch_feed(SOURCE)

    @patch("ingest_articles.fetch_articles.fetch_feed.feedparser.parse")
    @patch("ingest_articles.fetch_articles.fetch_feed.requests.get")
    def test_malformed_feed_without_entries_raises(self, mock_get, mock_parse) -> None:
        mock_get.return_value = _response(b"<html>not a feed")
        mock_parse.return_value = {"bozo": 1, "bozo_exception": "syntax error", "entries": []}

        with pytest.raises(ValueError):
            fetch_feed(SOURCE)
