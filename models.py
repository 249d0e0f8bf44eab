import json
from datetime import datetime, timezone

from database import db

PROJECT_STATUSES = ('pending', 'running', 'completed', 'failed')


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def decode_json(raw, default):
    """Decode a JSON column, falling back to default on bad or empty input"""
    if not raw:
        return default
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return default
    return value if isinstance(value, type(default)) else default


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    display_name = db.Column(db.String(120))
    avatar = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=utcnow)

    @property
    def short_name(self):
        return self.display_name or self.email.split('@')[0]

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'displayName': self.display_name,
            'avatar': self.avatar,
        }


class ScrapingProject(db.Model):
    __tablename__ = 'scraping_projects'

    id = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default='')
    target_url = db.Column(db.String(2000), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending')
    total_items = db.Column(db.Integer, nullable=False, default=0)
    scraped_items = db.Column(db.Integer, nullable=False, default=0)
    max_pages = db.Column(db.Integer, default=10)
    delay_ms = db.Column(db.Integer, default=1000)
    data_types = db.Column(db.JSON, default=list)
    error_message = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    items = db.relationship(
        'ScrapedItem',
        backref='project',
        cascade='all, delete-orphan',
    )

    @property
    def status_label(self):
        return self.status.capitalize() if self.status else ''

    @property
    def progress(self):
        if not self.total_items:
            return 0
        return round(self.scraped_items / self.total_items * 100)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'description': self.description or '',
            'target_url': self.target_url,
            'status': self.status,
            'total_items': self.total_items,
            'scraped_items': self.scraped_items,
            'max_pages': self.max_pages,
            'delay_ms': self.delay_ms,
            'data_types': self.data_types or [],
            'error_message': self.error_message,
            'progress': self.progress,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class ScrapedItem(db.Model):
    __tablename__ = 'scraped_data'

    id = db.Column(db.String(64), primary_key=True)
    project_id = db.Column(
        db.String(64),
        db.ForeignKey('scraping_projects.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    user_id = db.Column(db.String(64), nullable=False, index=True)
    url = db.Column(db.String(2000), nullable=False)
    title = db.Column(db.Text, nullable=False, default='')
    description = db.Column(db.Text, default='')
    image_url = db.Column(db.String(2000))
    price = db.Column(db.String(100))
    email = db.Column(db.String(255))
    phone = db.Column(db.String(100))
    links = db.Column(db.Text)
    custom_data = db.Column(db.Text)
    position = db.Column(db.Integer, nullable=False, default=0)
    scraped_at = db.Column(db.DateTime, default=utcnow, index=True)

    def custom_data_dict(self):
        return decode_json(self.custom_data, {})

    def link_list(self):
        return decode_json(self.links, [])

    def link_urls(self):
        """Link targets as plain URLs; stored entries may be strings or {url, text}"""
        urls = []
        for link in self.link_list():
            if isinstance(link, dict):
                link = link.get('url')
            if link:
                urls.append(str(link))
        return urls

    def to_dict(self, decoded=False):
        data = {
            'id': self.id,
            'project_id': self.project_id,
            'url': self.url,
            'title': self.title,
            'description': self.description or '',
            'image_url': self.image_url,
            'price': self.price,
            'email': self.email,
            'phone': self.phone,
            'links': self.links,
            'custom_data': self.custom_data,
            'scraped_at': self.scraped_at.isoformat() if self.scraped_at else None,
        }
        if decoded:
            data['links'] = self.link_list()
            data['custom_data'] = self.custom_data_dict()
        return data


class ExportRecord(db.Model):
    __tablename__ = 'export_records'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    # Survives project deletion, so no foreign key
    project_id = db.Column(db.String(64), nullable=False)
    project_name = db.Column(db.String(200))
    format = db.Column(db.String(10), nullable=False)
    item_count = db.Column(db.Integer, default=0)
    filename = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'project_name': self.project_name,
            'format': self.format,
            'item_count': self.item_count,
            'filename': self.filename,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
