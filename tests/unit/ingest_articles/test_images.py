"""Tests for ingest_articles.normalize_articles.images module."""

from ingest_articles.normalize_articles.images import PLACEHOLDER_IMAGES, extract_image, find_image


class TestFindImage:
    def test_enclosure_first(self) -> None:
        entry = {
            "enclosure": {"url": "https://img.example/enclosure.jpg"},
            "media_content": [{"url": "https://img.example/media.jpg"}],
        }
        assert find_image(entry) == "https://img.example/enclosure.jpg"

    def test_image_enclosure_link(self) -> None:
        entry = {"links": [{"rel": "enclosure", "type": "image/jpeg", "href": "https://img.example/a.jpg"}]}
        assert find_image(entry) == "https://img.example/a.jpg"

    def test_media_thumbnail(self) -> None:
        entry = {"media_thumbnail": [{"url": "https://img.example/thumb.jpg"}]}
        assert find_image(entry) == "https://img.example/thumb.jpg"

    def test_image_in_html_content(self) -> None:
        entry = {"summary": '<p>Text <img alt="x" src="https://img.example/inline.png"></p>'}
        assert find_image(entry) == "https://img.example/inline.png"

    def test_non_http_urls_ignored(self) -> None:
        entry = {"media_content": [{"url": "data:image/png;base64,AAAA"}]}
        assert find_image(entry) is None


class TestExtractImage:
    def test_found_image_is_not_placeholder(self) -> None:
        entry = {"media_thumbnail": [{"url": "https://img.example/thumb.jpg"}]}
        assert extract_image(entry) == ("https://img.example/thumb.jpg", False)

    def test_placeholder_when_missing(self) -> None:
        url, is_placeholder = extract_image({}, choose=lambda options: options[0])
        assert url == PLACEHOLDER_IMAGES[0]
        assert is_placeholder is True
