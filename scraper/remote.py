import logging

import requests

from scraper.results import ScrapeError, ScrapeResult

logger = logging.getLogger(__name__)


class RemoteScraper:
    """Client for a hosted scrape API returning {markdown, metadata, links, extract}"""

    def __init__(self, api_url, api_key=None, timeout=15):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self):
        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f"Bearer {self.api_key}"
        return headers

    def scrape(self, url):
        logger.info(f"Requesting remote scrape of {url}")
        try:
            response = requests.post(
                self.api_url,
                json={'url': url},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Scrape API request failed for {url}: {str(e)}")
            raise ScrapeError(f"Scrape API request failed: {str(e)}") from e
        except ValueError as e:
            logger.error(f"Scrape API returned invalid JSON for {url}")
            raise ScrapeError("Scrape API returned invalid JSON") from e

        # Some deployments wrap the result in a data envelope
        if isinstance(payload, dict) and isinstance(payload.get('data'), dict):
            payload = payload['data']
        return ScrapeResult.from_dict(payload)
