from dataclasses import asdict, dataclass, field


class ScrapeError(Exception):
    pass


def _as_list(value):
    return value if isinstance(value, list) else []


def _images(raw):
    """Image entries as {src, alt}; bare strings are taken as the src"""
    images = []
    for image in _as_list(raw):
        if isinstance(image, str):
            image = {'src': image, 'alt': ''}
        if not isinstance(image, dict) or not isinstance(image.get('src'), str):
            continue
        alt = image.get('alt')
        images.append({'src': image['src'], 'alt': alt if isinstance(alt, str) else ''})
    return images


@dataclass
class ScrapeResult:
    """What one scrape call returns for a single URL"""
    markdown: str = ''
    metadata: dict = field(default_factory=dict)
    links: list = field(default_factory=list)
    extract: dict = field(default_factory=dict)

    @property
    def headings(self):
        return self.extract.get('headings') or []

    @property
    def images(self):
        return self.extract.get('images') or []

    @classmethod
    def from_dict(cls, payload):
        if not isinstance(payload, dict):
            raise ScrapeError(f"Unexpected scrape payload: {type(payload).__name__}")

        links = []
        for link in _as_list(payload.get('links')):
            # Some scrape APIs return bare hrefs
            if isinstance(link, str):
                link = {'url': link, 'text': ''}
            if isinstance(link, dict):
                links.append({
                    'url': link.get('url') or link.get('href') or '',
                    'text': link.get('text') or '',
                })

        extract = payload.get('extract') or {}
        if not isinstance(extract, dict):
            extract = {}
        extract = dict(extract)
        extract['headings'] = [
            heading for heading in _as_list(extract.get('headings'))
            if isinstance(heading, str)
        ]
        extract['images'] = _images(extract.get('images'))

        metadata = payload.get('metadata')
        markdown = payload.get('markdown')
        return cls(
            markdown=markdown if isinstance(markdown, str) else '',
            metadata=metadata if isinstance(metadata, dict) else {},
            links=links,
            extract=extract,
        )

    def to_dict(self):
        return asdict(self)
