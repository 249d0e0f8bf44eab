import logging
import random
import string
import time
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from models import utcnow
from scraper import ContentAnalyzer, get_scraper
from utils.collections import database
from utils.validation import ValidationError

logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_lowercase + string.digits


def new_project_id():
    suffix = ''.join(random.choices(ID_ALPHABET, k=9))
    return f"proj_{int(time.time() * 1000)}_{suffix}"


@dataclass
class ScrapeOutcome:
    status: str
    item_count: int = 0
    error: str = None

    @property
    def succeeded(self):
        return self.status == 'completed'


def filter_projects(projects, query):
    """Case-insensitive match on project name or target URL"""
    query = (query or '').strip().lower()
    if not query:
        return list(projects)
    return [
        project for project in projects
        if query in (project.name or '').lower() or query in (project.target_url or '').lower()
    ]


def filter_items(items, query):
    query = (query or '').strip().lower()
    if not query:
        return list(items)
    return [
        item for item in items
        if query in (item.title or '').lower()
        or query in (item.description or '').lower()
        or query in (item.url or '').lower()
    ]


def project_stats(projects):
    return {
        'total_projects': len(projects),
        'completed': sum(1 for p in projects if p.status == 'completed'),
        'total_scraped_items': sum(p.scraped_items or 0 for p in projects),
        'running': sum(1 for p in projects if p.status == 'running'),
    }


class ProjectService:
    """Project lifecycle: create, scrape, list, preview and delete"""

    def __init__(self, db=database, scraper=None, analyzer=None):
        self.db = db
        self._scraper = scraper
        self.analyzer = analyzer or ContentAnalyzer()

    @property
    def scraper(self):
        return self._scraper or get_scraper()

    def create_project(self, user, form):
        if user is None:
            raise ValidationError('Please sign in to create a project')
        form.validate()

        project = self.db.scraping_projects.create({
            'id': new_project_id(),
            'user_id': user.id,
            'name': form.name,
            'description': form.description,
            'target_url': form.target_url,
            'status': 'pending',
            'total_items': 0,
            'scraped_items': 0,
            'max_pages': form.max_pages,
            'delay_ms': form.delay_ms,
            'data_types': list(form.data_types),
        })
        logger.info(f"Created project {project.id} for {form.target_url}")
        return project

    def run_scrape(self, project, data_types):
        """Scrape the project's target URL and store the extracted rows.

        Failures leave the project in the failed state and are reported
        through the returned outcome instead of being raised.
        """
        try:
            self.db.scraping_projects.update(project.id, {
                'status': 'running',
                'total_items': 0,
                'error_message': None,
            })

            result = self.scraper.scrape(project.target_url)
            items = self.analyzer.build_items(
                project.id, project.user_id, project.target_url, result, data_types
            )
            if items:
                # One timestamp per batch; position keeps extraction order
                scraped_at = utcnow()
                for position, item in enumerate(items):
                    item.update(position=position, scraped_at=scraped_at)
                self.db.scraped_data.create_many(items)
            else:
                logger.warning(f"No data found for project {project.id}")

            self.db.scraping_projects.update(project.id, {
                'status': 'completed',
                'scraped_items': len(items),
                'total_items': len(items),
            })
            logger.info(f"Project {project.id} completed with {len(items)} items")
            return ScrapeOutcome(status='completed', item_count=len(items))

        except Exception as e:
            error_msg = str(e) or type(e).__name__
            logger.error(f"Web scraping failed for project {project.id}: {error_msg}", exc_info=True)
            try:
                self.db.scraping_projects.update(project.id, {
                    'status': 'failed',
                    'error_message': error_msg,
                })
            except (LookupError, SQLAlchemyError) as update_error:
                logger.error(
                    f"Could not mark project {project.id} as failed: {str(update_error)}",
                    exc_info=True,
                )
            return ScrapeOutcome(status='failed', error=error_msg)

    def create_and_scrape(self, user, form):
        project = self.create_project(user, form)
        outcome = self.run_scrape(project, form.data_types)
        return project, outcome

    def list_projects(self, user, query=''):
        projects = self.db.scraping_projects.list(
            where={'user_id': user.id},
            order_by={'created_at': 'desc'},
        )
        return projects, filter_projects(projects, query)

    def get_project(self, user, project_id):
        return self.db.scraping_projects.first({'id': project_id, 'user_id': user.id})

    def list_items(self, user, project_id, query=''):
        items = self.db.scraped_data.list(
            where={'project_id': project_id, 'user_id': user.id},
            order_by={'scraped_at': 'desc', 'position': 'asc'},
        )
        return filter_items(items, query)

    def delete_project(self, user, project_id):
        """Delete a project owned by user along with its rows"""
        project = self.get_project(user, project_id)
        if project is None:
            return False
        self.db.scraping_projects.delete(project.id)
        logger.info(f"Deleted project {project_id}")
        return True

    def history(self, user, limit=100):
        projects = self.db.scraping_projects.list(
            where={'user_id': user.id},
            order_by={'created_at': 'desc'},
            limit=limit,
        )
        exports = self.db.export_records.list(
            where={'user_id': user.id},
            order_by={'created_at': 'desc'},
            limit=limit,
        )
        return projects, exports
