"""Tests for scraper.web_crawler module."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from scraper import ScrapeError, WebCrawler

from tests.conftest import SAMPLE_HTML


def mock_response(text=SAMPLE_HTML):
    response = MagicMock()
    response.text = text
    response.raise_for_status = MagicMock()
    return response


@pytest.fixture()
def crawler():
    return WebCrawler(user_agent="ListlyTest/1.0", timeout=5)


class TestScrape:
    def test_sends_user_agent_and_timeout(self, crawler):
        with patch("scraper.web_crawler.requests.get", return_value=mock_response()) as mock_get:
            crawler.scrape("https://acme.test/page")

        mock_get.assert_called_once()
        kwargs = mock_get.call_args.kwargs
        assert kwargs["headers"]["User-Agent"] == "ListlyTest/1.0"
        assert kwargs["timeout"] == 5

    def test_links_are_absolute_unique_and_filtered(self, crawler):
        with patch("scraper.web_crawler.requests.get", return_value=mock_response()):
            result = crawler.scrape("https://acme.test/page")

        assert result.links == [
            {"url": "https://acme.test/home", "text": "Home"},
            {"url": "https://example.com/docs", "text": "a link"},
        ]

    def test_headings_images_and_metadata(self, crawler):
        with patch("scraper.web_crawler.requests.get", return_value=mock_response()):
            result = crawler.scrape("https://acme.test/page")

        assert result.headings == ["# Hello World", "## Contact"]
        assert result.images == [{"src": "https://acme.test/img/logo.png", "alt": "Logo"}]
        assert result.metadata == {
            "title": "Acme Store",
            "description": "Widgets and more",
            "keywords": "widgets, gadgets",
            "language": "en",
        }

    def test_markdown_contains_page_text(self, crawler):
        with patch("scraper.web_crawler.requests.get", return_value=mock_response()):
            result = crawler.scrape("https://acme.test/page")

        assert result.markdown
        assert "var x = 1" not in result.markdown

    def test_falls_back_to_soup_markdown(self, crawler):
        with patch("scraper.web_crawler.requests.get", return_value=mock_response()), \
                patch("scraper.web_crawler.trafilatura.extract", return_value=None):
            result = crawler.scrape("https://acme.test/page")

        blocks = result.markdown.split("\n\n")
        assert blocks[0] == "# Hello World"
        assert blocks[1].startswith("This is a test page with")
        assert blocks[2] == "## Contact"
        assert blocks[3] == "Write to sales@acme.test for a quote."
        assert "Copyright" not in result.markdown

    def test_request_failure_raises_scrape_error(self, crawler):
        with patch(
            "scraper.web_crawler.requests.get",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            with pytest.raises(ScrapeError, match="Request failed"):
                crawler.scrape("https://acme.test/page")

    def test_http_error_raises_scrape_error(self, crawler):
        response = mock_response()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
        with patch("scraper.web_crawler.requests.get", return_value=response):
            with pytest.raises(ScrapeError, match="404"):
                crawler.scrape("https://acme.test/missing")

    def test_invalid_url_is_not_fetched(self, crawler):
        with patch("scraper.web_crawler.requests.get") as mock_get:
            with pytest.raises(ScrapeError, match="Invalid URL"):
                crawler.scrape("ftp://acme.test")
        mock_get.assert_not_called()
