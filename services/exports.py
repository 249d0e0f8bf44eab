import io
import json
import logging
import re
from datetime import datetime

import pandas as pd
from flask import current_app

from models import utcnow
from utils.collections import database
from utils.file_manager import FileManager

logger = logging.getLogger(__name__)

EXPORT_FORMATS = {
    'csv': {
        'label': 'CSV Export',
        'description': 'Export data as comma-separated values for Excel and other tools',
        'mimetype': 'text/csv',
    },
    'json': {
        'label': 'JSON Export',
        'description': 'Export structured data in JSON format for developers',
        'mimetype': 'application/json',
    },
    'xlsx': {
        'label': 'Excel Export',
        'description': 'Export data as Excel spreadsheet with formatting',
        'mimetype': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    },
}
FORMAT_ALIASES = {'excel': 'xlsx', 'xls': 'xlsx'}

EXPORT_COLUMNS = [
    'id', 'url', 'title', 'description', 'image_url', 'price',
    'email', 'phone', 'links', 'custom_data', 'scraped_at',
]


class ExportError(Exception):
    pass


def normalize_format(fmt):
    fmt = (fmt or '').strip().lower()
    fmt = FORMAT_ALIASES.get(fmt, fmt)
    if fmt not in EXPORT_FORMATS:
        raise ExportError(f"Unsupported export format: {fmt or 'none'}")
    return fmt


def slugify(name):
    slug = re.sub(r'[^A-Za-z0-9]+', '-', name or '').strip('-').lower()
    return slug or 'export'


def items_dataframe(items):
    rows = [item.to_dict() for item in items]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def render_csv(project, items):
    return items_dataframe(items).to_csv(index=False).encode('utf-8')


def render_json(project, items):
    document = {
        'project': project.to_dict(),
        'exported_at': utcnow().isoformat(),
        'items': [item.to_dict(decoded=True) for item in items],
    }
    return json.dumps(document, ensure_ascii=False, indent=2).encode('utf-8')


def render_xlsx(project, items):
    excel_buffer = io.BytesIO()
    with pd.ExcelWriter(excel_buffer, engine='openpyxl') as writer:
        items_dataframe(items).to_excel(writer, index=False, sheet_name='Scraped Data')
        worksheet = writer.sheets['Scraped Data']
        worksheet.freeze_panes = 'A2'
        for column_cells in worksheet.columns:
            width = max(len(str(cell.value or '')) for cell in column_cells)
            worksheet.column_dimensions[column_cells[0].column_letter].width = min(max(width, 10), 60)
    return excel_buffer.getvalue()


RENDERERS = {
    'csv': render_csv,
    'json': render_json,
    'xlsx': render_xlsx,
}


class ExportService:
    """Writes a project's rows to an export file and records the export"""

    def __init__(self, db=database, file_manager=None):
        self.db = db
        self._file_manager = file_manager

    @property
    def file_manager(self):
        return self._file_manager or FileManager(current_app.config['EXPORT_DIR'])

    def exportable_projects(self, user):
        return self.db.scraping_projects.list(
            where={'user_id': user.id, 'status': 'completed'},
            order_by={'created_at': 'desc'},
        )

    def export_project(self, user, project_id, fmt):
        """Render the export; returns (path, download name, mimetype)"""
        fmt = normalize_format(fmt)
        project = self.db.scraping_projects.first({'id': project_id, 'user_id': user.id})
        if project is None:
            raise LookupError('Project not found')
        if project.status != 'completed':
            raise ExportError('Only completed projects can be exported')

        items = self.db.scraped_data.list(
            where={'project_id': project.id, 'user_id': user.id},
            order_by={'scraped_at': 'asc', 'position': 'asc'},
        )
        content = RENDERERS[fmt](project, items)

        retention = current_app.config.get('EXPORT_RETENTION_HOURS', 24)
        self.file_manager.cleanup_old_files(max_age_hours=retention)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
        filename = f"{project.id}_{timestamp}.{fmt}"
        path = self.file_manager.save_content(filename, content)

        self.db.export_records.create({
            'user_id': user.id,
            'project_id': project.id,
            'project_name': project.name,
            'format': fmt,
            'item_count': len(items),
            'filename': filename,
        })
        logger.info(f"Exported {len(items)} items from project {project.id} as {fmt}")
        return path, f"{slugify(project.name)}.{fmt}", EXPORT_FORMATS[fmt]['mimetype']
