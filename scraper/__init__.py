"""
Scraping package

- WebCrawler: fetches one page and reads markdown, metadata, links and headings
- RemoteScraper: the same call served by a hosted scrape API
- ContentAnalyzer: turns a scrape result into rows for the selected data types
"""

from flask import current_app

from .results import ScrapeError, ScrapeResult
from .web_crawler import WebCrawler
from .remote import RemoteScraper
from .content_analyzer import ContentAnalyzer

EXTENSION_KEY = 'listly.scraper'


def build_scraper(config):
    if config.get('SCRAPER_API_URL'):
        return RemoteScraper(
            config['SCRAPER_API_URL'],
            api_key=config.get('SCRAPER_API_KEY'),
            timeout=config.get('SCRAPER_TIMEOUT', 15),
        )
    return WebCrawler(
        user_agent=config.get('SCRAPER_USER_AGENT', 'Mozilla/5.0 (compatible; Listly/1.0)'),
        timeout=config.get('SCRAPER_TIMEOUT', 15),
    )


def get_scraper():
    """The scrape service registered on the current app"""
    scraper = current_app.extensions.get(EXTENSION_KEY)
    if scraper is None:
        scraper = build_scraper(current_app.config)
        current_app.extensions[EXTENSION_KEY] = scraper
    return scraper


__all__ = [
    'ScrapeError', 'ScrapeResult', 'WebCrawler', 'RemoteScraper',
    'ContentAnalyzer', 'build_scraper', 'get_scraper', 'EXTENSION_KEY',
]
