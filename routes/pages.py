import logging

from flask import (
    Blueprint, abort, flash, g, redirect, render_template, request, send_file, url_for,
)

from services import EXPORT_FORMATS, ExportError, ExportService, ProjectService
from services.projects import project_stats
from utils import auth
from utils.auth import AuthError, login_required
from utils.validation import DATA_TYPES, DEFAULT_DATA_TYPES, ProjectForm, ValidationError

logger = logging.getLogger(__name__)

pages = Blueprint('pages', __name__)

project_service = ProjectService()
export_service = ExportService()

STATUS_COLORS = {
    'completed': 'status-completed',
    'running': 'status-running',
    'failed': 'status-failed',
}

FEATURES = [
    ('Extract from Any Website',
     'Scrape data from any website with our powerful extraction engine. No coding required.'),
    ('Smart Pattern Detection',
     'Automatically detect and extract repeated patterns like product listings, contact info, and more.'),
    ('Multiple Export Formats',
     'Export your scraped data to CSV, Excel, JSON, or integrate directly with your tools.'),
    ('Ethical Scraping',
     'One page per project, fetched once, with a bounded request timeout.'),
    ('Project Tracking',
     'Follow every project from pending to completed, with failures explained in your history.'),
]
STEPS = [
    ('1', 'Enter URL', 'Paste the website URL you want to scrape data from'),
    ('2', 'Select Data', 'Choose what data to extract - text, images, links, prices, etc.'),
    ('3', 'Extract & Export', 'Let us extract the data and export it in your preferred format'),
]
USE_CASES = [
    'E-commerce product data',
    'Lead generation & contact info',
    'Real estate listings',
    'Job postings & recruitment',
    'News & content aggregation',
    'Market research & pricing',
    'Social media monitoring',
    'Academic research data',
]


@pages.app_template_filter('status_color')
def status_color(status):
    return STATUS_COLORS.get(status, 'status-default')


@pages.route('/')
def landing():
    """Render the landing page"""
    return render_template('landing.html', features=FEATURES, steps=STEPS, use_cases=USE_CASES)


@pages.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'POST':
        try:
            auth.login(request.form.get('email'), request.form.get('password'))
        except AuthError as e:
            flash(str(e), 'error')
            return render_template('login.html', email=request.form.get('email', '')), 401
        return redirect(_safe_next() or url_for('pages.dashboard'))
    return render_template('login.html', email='')


@pages.route('/register', methods=['GET', 'POST'])
def register():
    if request.method == 'POST':
        try:
            auth.register(
                request.form.get('email'),
                request.form.get('password'),
                display_name=request.form.get('display_name'),
            )
        except AuthError as e:
            flash(str(e), 'error')
            return render_template('register.html', email=request.form.get('email', '')), 400
        flash('Welcome to Listly!', 'success')
        return redirect(url_for('pages.dashboard'))
    return render_template('register.html', email='')


@pages.route('/logout', methods=['POST'])
def logout():
    auth.logout()
    return redirect(url_for('pages.landing'))


def _safe_next():
    target = request.args.get('next', '')
    # Only same-site paths
    if target.startswith('/') and not target.startswith('//'):
        return target
    return None


@pages.route('/dashboard')
def dashboard():
    user = g.user
    if user is None:
        return render_template('welcome.html')

    query = request.args.get('q', '')
    projects, filtered = [], []
    try:
        projects, filtered = project_service.list_projects(user, query)
    except Exception as e:
        logger.error(f"Failed to load projects: {str(e)}", exc_info=True)
        flash('Failed to load projects', 'error')

    return render_template(
        'dashboard.html',
        projects=filtered,
        stats=project_stats(projects),
        query=query,
    )


@pages.route('/projects/<project_id>/delete', methods=['POST'])
@login_required
def delete_project(project_id):
    try:
        if project_service.delete_project(g.user, project_id):
            flash('Project deleted successfully', 'success')
        else:
            flash('Failed to delete project', 'error')
    except Exception as e:
        logger.error(f"Failed to delete project {project_id}: {str(e)}", exc_info=True)
        flash('Failed to delete project', 'error')
    return redirect(url_for('pages.dashboard'))


@pages.route('/scrape', methods=['GET', 'POST'])
def scrape():
    """Project creation form; submitting it runs the scrape"""
    if request.method == 'GET':
        return _render_scrape_form(ProjectForm(data_types=list(DEFAULT_DATA_TYPES)))

    form = ProjectForm.from_mapping(request.form)
    try:
        project = project_service.create_project(g.user, form)
    except ValidationError as e:
        flash(str(e), 'error')
        return _render_scrape_form(form), 400
    except Exception as e:
        logger.error(f"Failed to create project: {str(e)}", exc_info=True)
        flash('Failed to create project', 'error')
        return _render_scrape_form(form), 500

    flash('Starting web scraping...', 'info')
    outcome = project_service.run_scrape(project, form.data_types)
    if not outcome.succeeded:
        flash(f"Failed to scrape website: {outcome.error}", 'error')
    elif outcome.item_count:
        flash(f"Successfully extracted {outcome.item_count} items!", 'success')
    else:
        flash('No data found matching your selected criteria', 'warning')

    flash('Scraping project created successfully!', 'success')
    return redirect(url_for('pages.dashboard'))


def _render_scrape_form(form):
    return render_template('scrape.html', form=form, data_types=DATA_TYPES)


@pages.route('/preview/<project_id>')
@login_required
def preview(project_id):
    query = request.args.get('q', '')
    try:
        project = project_service.get_project(g.user, project_id)
        if project is None:
            flash('Project not found', 'error')
            return render_template('not_found.html'), 404
        items = project_service.list_items(g.user, project_id, query)
    except Exception as e:
        logger.error(f"Failed to load project data: {str(e)}", exc_info=True)
        flash('Failed to load project data', 'error')
        return render_template('not_found.html'), 500

    return render_template('preview.html', project=project, items=items, query=query)


@pages.route('/export')
@login_required
def export_center():
    project_id = request.args.get('project')
    project = None
    if project_id:
        project = project_service.get_project(g.user, project_id)
        if project is None:
            flash('Project not found', 'error')
    return render_template(
        'export.html',
        project=project,
        projects=export_service.exportable_projects(g.user),
        formats=EXPORT_FORMATS,
    )


@pages.route('/export/<project_id>/<fmt>')
@login_required
def export_download(project_id, fmt):
    try:
        path, download_name, mimetype = export_service.export_project(g.user, project_id, fmt)
    except LookupError:
        abort(404)
    except ExportError as e:
        flash(str(e), 'error')
        return redirect(url_for('pages.export_center', project=project_id))
    except Exception as e:
        logger.error(f"Export failed for {project_id}: {str(e)}", exc_info=True)
        flash('Export failed', 'error')
        return redirect(url_for('pages.export_center', project=project_id))
    return send_file(path, mimetype=mimetype, as_attachment=True, download_name=download_name)


@pages.route('/history')
@login_required
def history():
    projects, exports = project_service.history(g.user)
    return render_template('history.html', projects=projects, exports=exports)
