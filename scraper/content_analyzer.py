import json
import logging
import re
import uuid

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b')
PHONE_PATTERN = re.compile(r'(\+?\d{1,4}[-.\s]?)?\(?\d{1,4}\)?[-.\s]?\d{1,4}[-.\s]?\d{1,9}')
PRICE_PATTERN = re.compile(
    r'\$\d+(?:,\d{3})*(?:\.\d{2})?|\d+(?:,\d{3})*(?:\.\d{2})?\s*(?:USD|EUR|GBP|\$)'
)
HEADING_PREFIX = re.compile(r'^#+\s*')

MAX_PARAGRAPHS = 10
MAX_LINKS = 20
MAX_MATCHES = 10
MIN_PHONE_LENGTH = 10
TITLE_LENGTH = 100


def unique(values):
    """Drop duplicates, keeping first-seen order"""
    return list(dict.fromkeys(values))


def find_emails(text):
    return unique(match.group(0) for match in EMAIL_PATTERN.finditer(text or ''))


def find_phones(text):
    phones = unique(match.group(0) for match in PHONE_PATTERN.finditer(text or ''))
    return [phone for phone in phones if len(phone) >= MIN_PHONE_LENGTH]


def find_prices(text):
    return unique(match.group(0) for match in PRICE_PATTERN.finditer(text or ''))


def split_paragraphs(markdown):
    return [
        block for block in (markdown or '').split('\n\n')
        if block.strip() and not block.startswith('#')
    ]


def truncate(text, length=TITLE_LENGTH):
    return text[:length] + ('...' if len(text) > length else '')


class ContentAnalyzer:
    """Builds scraped_data rows from one scrape result"""

    def build_items(self, project_id, user_id, url, result, data_types):
        selected = set(data_types)
        base = {
            'project_id': project_id,
            'user_id': user_id,
            'url': url,
        }

        items = []
        if 'text' in selected:
            items.extend(self._text_items(base, result))
        if 'links' in selected:
            items.extend(self._link_items(base, result))
        if 'images' in selected:
            items.extend(self._image_items(base, result))
        if 'emails' in selected:
            items.extend(self._email_items(base, result))
        if 'phones' in selected:
            items.extend(self._phone_items(base, result))
        if 'prices' in selected:
            items.extend(self._price_items(base, result))
        if result.metadata:
            items.append(self._metadata_item(base, result))

        logger.info(f"Built {len(items)} items for project {project_id} from {url}")
        return items

    def _item(self, base, kind, title, description, custom_data, **fields):
        item = {
            'id': f"{kind}_{uuid.uuid4().hex[:12]}",
            **base,
            'title': title,
            'description': description,
            'image_url': None,
            'price': None,
            'email': None,
            'phone': None,
            'links': None,
            'custom_data': json.dumps(custom_data),
        }
        item.update(fields)
        return item

    def _text_items(self, base, result):
        items = []
        for heading in result.headings:
            if not heading or not heading.strip():
                continue
            items.append(self._item(
                base, 'text',
                HEADING_PREFIX.sub('', heading),
                'Text content extracted from webpage',
                {'type': 'text', 'content': heading, 'source': 'heading'},
            ))

        for paragraph in split_paragraphs(result.markdown)[:MAX_PARAGRAPHS]:
            items.append(self._item(
                base, 'para',
                truncate(paragraph),
                'Paragraph content extracted from webpage',
                {'type': 'text', 'content': paragraph, 'source': 'paragraph'},
            ))
        return items

    def _link_items(self, base, result):
        items = []
        for link in result.links[:MAX_LINKS]:
            href, text = link.get('url'), link.get('text')
            if not href or not text:
                continue
            items.append(self._item(
                base, 'link',
                text,
                f"Link to: {href}",
                {'type': 'link', 'href': href, 'text': text},
                links=json.dumps([link]),
            ))
        return items

    def _image_items(self, base, result):
        images = [image for image in result.images if image.get('src')]
        return [
            self._item(
                base, 'image',
                image.get('alt') or 'Untitled Image',
                'Image found on webpage',
                {'type': 'image', 'src': image['src'], 'alt': image.get('alt') or ''},
                image_url=image['src'],
            )
            for image in images[:MAX_MATCHES]
        ]

    def _email_items(self, base, result):
        return [
            self._item(
                base, 'email', email, 'Email address found on webpage',
                {'type': 'email', 'email': email},
                email=email,
            )
            for email in find_emails(result.markdown)[:MAX_MATCHES]
        ]

    def _phone_items(self, base, result):
        return [
            self._item(
                base, 'phone', phone, 'Phone number found on webpage',
                {'type': 'phone', 'phone': phone},
                phone=phone,
            )
            for phone in find_phones(result.markdown)[:MAX_MATCHES]
        ]

    def _price_items(self, base, result):
        return [
            self._item(
                base, 'price', price, 'Price information found on webpage',
                {'type': 'price', 'price': price},
                price=price,
            )
            for price in find_prices(result.markdown)[:MAX_MATCHES]
        ]

    def _metadata_item(self, base, result):
        metadata = result.metadata
        return self._item(
            base, 'meta',
            metadata.get('title') or 'Page Metadata',
            metadata.get('description') or 'Page metadata information',
            {'type': 'metadata', 'metadata': metadata},
        )
