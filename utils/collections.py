import logging

from sqlalchemy.exc import SQLAlchemyError

from database import db
from models import ExportRecord, ScrapedItem, ScrapingProject

logger = logging.getLogger(__name__)


class Collection:
    """CRUD access to one model, queried with where/order_by dicts"""

    def __init__(self, model):
        self.model = model
        self.name = model.__tablename__

    def _column(self, field):
        column = getattr(self.model, field, None)
        if column is None or field not in self.model.__table__.columns:
            raise ValueError(f"Unknown field for {self.name}: {field}")
        return column

    def list(self, where=None, order_by=None, limit=None):
        query = db.select(self.model)
        for field, value in (where or {}).items():
            query = query.where(self._column(field) == value)
        for field, direction in (order_by or {}).items():
            column = self._column(field)
            if direction not in ('asc', 'desc'):
                raise ValueError(f"Invalid sort direction for {field}: {direction}")
            query = query.order_by(column.desc() if direction == 'desc' else column.asc())
        if limit:
            query = query.limit(limit)
        return list(db.session.execute(query).scalars())

    def get(self, record_id):
        return db.session.get(self.model, record_id)

    def first(self, where):
        records = self.list(where=where, limit=1)
        return records[0] if records else None

    def create(self, fields):
        for field in fields:
            self._column(field)
        record = self.model(**fields)
        db.session.add(record)
        self._commit(f"create in {self.name}")
        return record

    def create_many(self, rows):
        records = []
        for fields in rows:
            for field in fields:
                self._column(field)
            records.append(self.model(**fields))
        db.session.add_all(records)
        self._commit(f"create {len(records)} rows in {self.name}")
        return records

    def update(self, record_id, fields):
        record = self.get(record_id)
        if record is None:
            raise LookupError(f"{self.name} record not found: {record_id}")
        for field, value in fields.items():
            self._column(field)
            setattr(record, field, value)
        self._commit(f"update {self.name} {record_id}")
        return record

    def delete(self, record_id):
        record = self.get(record_id)
        if record is None:
            return False
        db.session.delete(record)
        self._commit(f"delete {self.name} {record_id}")
        return True

    def _commit(self, action):
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to {action}: {str(e)}", exc_info=True)
            raise


class Database:
    """Named collections for the application's tables"""

    def __init__(self):
        self.scraping_projects = Collection(ScrapingProject)
        self.scraped_data = Collection(ScrapedItem)
        self.export_records = Collection(ExportRecord)


database = Database()
