from dataclasses import dataclass, field
from urllib.parse import urlparse

DATA_TYPES = {
    'text': ('Text Content', 'Extract headings, paragraphs, and text content'),
    'links': ('Links', 'Extract all internal and external links'),
    'images': ('Images', 'Extract image URLs and alt text'),
    'prices': ('Prices', 'Detect and extract price information'),
    'emails': ('Email Addresses', 'Find and extract email addresses'),
    'phones': ('Phone Numbers', 'Detect and extract phone numbers'),
}
DEFAULT_DATA_TYPES = ['text', 'links']

DEFAULT_MAX_PAGES = 10
MAX_PAGES_RANGE = (1, 1000)
DEFAULT_DELAY_MS = 1000
DELAY_RANGE = (500, 10000)


class ValidationError(ValueError):
    pass


def is_valid_url(url):
    """Check if URL is valid and has proper scheme"""
    try:
        result = urlparse(url)
        return all([result.scheme in ['http', 'https'], result.netloc])
    except ValueError:
        return False


def _parse_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _get_list(data, key):
    # Werkzeug MultiDict carries repeated checkbox fields
    if hasattr(data, 'getlist'):
        return data.getlist(key)
    value = data.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


@dataclass
class ProjectForm:
    name: str = ''
    description: str = ''
    target_url: str = ''
    max_pages: int = DEFAULT_MAX_PAGES
    delay_ms: int = DEFAULT_DELAY_MS
    data_types: list = field(default_factory=lambda: list(DEFAULT_DATA_TYPES))
    unknown_data_types: list = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data):
        """Build a form from submitted fields (form post or JSON body)"""
        data_types = _get_list(data, 'data_types')
        # Preserve the canonical ordering of the checkboxes
        selected = [dt for dt in DATA_TYPES if dt in data_types]
        unknown = [dt for dt in data_types if dt not in DATA_TYPES]
        return cls(
            name=str(data.get('name') or '').strip(),
            description=str(data.get('description') or '').strip(),
            target_url=str(data.get('target_url') or '').strip(),
            max_pages=_parse_int(data.get('max_pages'), DEFAULT_MAX_PAGES),
            delay_ms=_parse_int(data.get('delay_ms'), DEFAULT_DELAY_MS),
            data_types=selected,
            unknown_data_types=unknown,
        )

    def validate(self):
        if not self.name:
            raise ValidationError('Please enter a project name')
        if not self.target_url:
            raise ValidationError('Please enter a target URL')
        if not is_valid_url(self.target_url):
            raise ValidationError('Please enter a valid URL')
        if self.unknown_data_types:
            raise ValidationError(f"Unknown data type: {self.unknown_data_types[0]}")
        if not self.data_types:
            raise ValidationError('Please select at least one data type to extract')
        low, high = MAX_PAGES_RANGE
        if not low <= self.max_pages <= high:
            raise ValidationError(f'Max pages must be between {low} and {high}')
        low, high = DELAY_RANGE
        if not low <= self.delay_ms <= high:
            raise ValidationError(f'Delay must be between {low} and {high} ms')
        return self
