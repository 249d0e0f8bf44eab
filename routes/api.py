import logging

from flask import Blueprint, g, jsonify, request, send_file

from services import ExportError, ExportService, ProjectService
from services.projects import project_stats
from utils.auth import auth_state, login_required
from utils.validation import ProjectForm, ValidationError

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__)

project_service = ProjectService()
export_service = ExportService()


def error_response(error, details, status):
    return jsonify({'error': error, 'details': details}), status


@api.route('/auth/state')
def get_auth_state():
    return jsonify(auth_state())


@api.route('/projects', methods=['GET'])
@login_required
def list_projects():
    """List the user's projects with dashboard stats"""
    try:
        projects, filtered = project_service.list_projects(g.user, request.args.get('q', ''))
    except Exception as e:
        logger.error(f"Failed to load projects: {str(e)}", exc_info=True)
        return error_response('Failed to load projects', str(e), 500)
    return jsonify({
        'projects': [project.to_dict() for project in filtered],
        'stats': project_stats(projects),
    })


@api.route('/projects', methods=['POST'])
@login_required
def create_project():
    """Create a project and scrape its target URL"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        logger.warning("Project creation request without a JSON object body")
        return error_response('Invalid request', 'A JSON object body is required', 400)

    form = ProjectForm.from_mapping(data)
    try:
        project = project_service.create_project(g.user, form)
    except ValidationError as e:
        return error_response('Validation failed', str(e), 400)
    except Exception as e:
        logger.error(f"Failed to create project: {str(e)}", exc_info=True)
        return error_response('Failed to create project', str(e), 500)

    outcome = project_service.run_scrape(project, form.data_types)
    if not outcome.succeeded:
        message = f"Failed to scrape website: {outcome.error}"
    elif outcome.item_count:
        message = f"Successfully extracted {outcome.item_count} items!"
    else:
        message = 'No data found matching your selected criteria'

    project = project_service.get_project(g.user, project.id)
    return jsonify({
        'project': project.to_dict(),
        'outcome': {
            'status': outcome.status,
            'item_count': outcome.item_count,
            'error': outcome.error,
        },
        'message': message,
    }), 201


@api.route('/projects/<project_id>', methods=['GET'])
@login_required
def get_project(project_id):
    project = project_service.get_project(g.user, project_id)
    if project is None:
        return error_response('Project not found', f"No project with id {project_id}", 404)
    return jsonify({'project': project.to_dict()})


@api.route('/projects/<project_id>', methods=['DELETE'])
@login_required
def delete_project(project_id):
    try:
        deleted = project_service.delete_project(g.user, project_id)
    except Exception as e:
        logger.error(f"Failed to delete project {project_id}: {str(e)}", exc_info=True)
        return error_response('Failed to delete project', str(e), 500)
    if not deleted:
        return error_response('Project not found', f"No project with id {project_id}", 404)
    return jsonify({'message': 'Project deleted successfully'})


@api.route('/projects/<project_id>/items')
@login_required
def list_items(project_id):
    project = project_service.get_project(g.user, project_id)
    if project is None:
        return error_response('Project not found', f"No project with id {project_id}", 404)
    items = project_service.list_items(g.user, project_id, request.args.get('q', ''))
    return jsonify({
        'project': project.to_dict(),
        'items': [item.to_dict(decoded=True) for item in items],
    })


@api.route('/projects/<project_id>/export')
@login_required
def export_project(project_id):
    fmt = request.args.get('format', 'csv')
    try:
        path, download_name, mimetype = export_service.export_project(g.user, project_id, fmt)
    except LookupError as e:
        return error_response('Project not found', str(e), 404)
    except ExportError as e:
        return error_response('Export failed', str(e), 400)
    except Exception as e:
        logger.error(f"Export failed for {project_id}: {str(e)}", exc_info=True)
        return error_response('Export failed', str(e), 500)
    return send_file(path, mimetype=mimetype, as_attachment=True, download_name=download_name)


@api.route('/history')
@login_required
def history():
    projects, exports = project_service.history(g.user)
    return jsonify({
        'projects': [project.to_dict() for project in projects],
        'exports': [record.to_dict() for record in exports],
    })
