import trafilatura
import requests
from bs4 import BeautifulSoup
from urllib.parse import urljoin
import logging

from scraper.results import ScrapeError, ScrapeResult
from utils.validation import is_valid_url

logger = logging.getLogger(__name__)

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']


class WebCrawler:
    """Fetches a single page and reads it into a ScrapeResult.

    Only the requested URL is downloaded; links found on the page are
    reported, never followed.
    """

    def __init__(self, user_agent='Mozilla/5.0 (compatible; Listly/1.0)', timeout=15):
        self.headers = {
            'User-Agent': user_agent
        }
        self.timeout = timeout

    def fetch(self, url):
        """Download the raw HTML for url"""
        if not is_valid_url(url):
            raise ScrapeError(f"Invalid URL format: {url}")
        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed for {url}: {str(e)}")
            raise ScrapeError(f"Request failed for {url}: {str(e)}") from e
        return response.text

    def scrape(self, url):
        logger.info(f"Starting to scrape: {url}")
        html = self.fetch(url)
        soup = BeautifulSoup(html, 'html.parser')

        # Links, headings and images are read before the page is stripped
        links = self._extract_links(soup, url)
        headings = self._extract_headings(soup)
        images = self._extract_images(soup, url)
        metadata = self._extract_metadata(soup)

        markdown = self._extract_markdown(html, url)
        if not markdown:
            logger.info(f"Trafilatura extraction failed, falling back to BeautifulSoup for {url}")
            markdown = self.extract_text_content(soup)

        logger.info(
            f"Scraped {url}: {len(markdown)} chars, {len(links)} links, "
            f"{len(headings)} headings, {len(images)} images"
        )
        return ScrapeResult(
            markdown=markdown,
            metadata=metadata,
            links=links,
            extract={'headings': headings, 'images': images},
        )

    def _extract_markdown(self, html, url):
        try:
            return trafilatura.extract(
                html,
                url=url,
                output_format='markdown',
                include_formatting=True,
                include_links=False,
                include_images=False,
            ) or ''
        except Exception as e:
            logger.warning(f"Trafilatura failed on {url}: {str(e)}")
            return ''

    def extract_text_content(self, soup):
        """Render headings and paragraphs as markdown blocks"""
        for element in soup(['script', 'style', 'nav', 'footer', 'header', 'iframe', 'noscript']):
            element.decompose()

        blocks = []
        for element in soup.find_all(HEADING_TAGS + ['p']):
            text = element.get_text(' ', strip=True)
            if not text:
                continue
            if element.name in HEADING_TAGS:
                blocks.append(f"{'#' * int(element.name[1])} {text}")
            else:
                blocks.append(text)
        return '\n\n'.join(blocks)

    def _extract_headings(self, soup):
        headings = []
        for element in soup.find_all(HEADING_TAGS):
            text = element.get_text(' ', strip=True)
            if text:
                headings.append(f"{'#' * int(element.name[1])} {text}")
        return headings

    def _normalize_url(self, base_url, relative_url):
        """Normalize relative URLs to absolute URLs"""
        try:
            return urljoin(base_url, relative_url)
        except ValueError as e:
            logger.error(f"Error normalizing URL {relative_url} with base {base_url}: {str(e)}")
            return None

    def _extract_links(self, soup, base_url):
        """Extract absolute links with their anchor text, in page order"""
        links = []
        seen = set()
        for anchor in soup.find_all('a', href=True):
            href = anchor['href'].strip()
            if href.startswith('#') or href.startswith('javascript:') or href.startswith('mailto:'):
                continue

            absolute_url = self._normalize_url(base_url, href)
            if not absolute_url or not is_valid_url(absolute_url) or absolute_url in seen:
                continue
            seen.add(absolute_url)
            links.append({
                'url': absolute_url,
                'text': anchor.get_text(' ', strip=True),
            })

        logger.info(f"Found {len(links)} valid links on {base_url}")
        return links

    def _extract_images(self, soup, base_url):
        images = []
        seen = set()
        for img in soup.find_all('img'):
            src = img.get('src')
            if not src or src.startswith('data:'):
                continue
            img_url = self._normalize_url(base_url, src)
            if not img_url or img_url in seen:
                continue
            seen.add(img_url)
            images.append({'src': img_url, 'alt': img.get('alt', '')})
        return images

    def _extract_metadata(self, soup):
        metadata = {
            'title': soup.title.get_text(strip=True) if soup.title else '',
            'description': self._meta_content(soup, name='description')
            or self._meta_content(soup, prop='og:description'),
            'keywords': self._meta_content(soup, name='keywords'),
            'image': self._meta_content(soup, prop='og:image'),
            'language': soup.html.get('lang', '') if soup.html else '',
        }
        return {key: value for key, value in metadata.items() if value}

    def _meta_content(self, soup, name=None, prop=None):
        attrs = {'name': name} if name else {'property': prop}
        tag = soup.find('meta', attrs=attrs)
        return (tag.get('content') or '').strip() if tag else ''
