"""Project blueprint: tenant-scoped project CRUD."""

from flask import Blueprint, g, request

from tenantboard.database import get_session
from tenantboard.decorators.permissions import require_tenant_match
from tenantboard.middleware import require_login
from tenantboard.services import project_service
from tenantboard.utils.responses import get_pagination_args, success_response
from tenantboard.utils.validation import validate_create_project, validate_update_project

projects_bp = Blueprint('projects', __name__, url_prefix='/api/tenants/<tenant_id>/projects')


@projects_bp.route('', methods=['POST'])
@require_login
@require_tenant_match
def create_project(tenant_id):
    data = validate_create_project(request.get_json(silent=True))
    result = project_service.create_project(get_session(), tenant_id, data, g.principal.id)
    return success_response(result, 'Project created successfully', 201)


@projects_bp.route('', methods=['GET'])
@require_login
@require_tenant_match
def list_projects(tenant_id):
    page, limit = get_pagination_args()
    filters = {
        'status': request.args.get('status'),
        'search': request.args.get('search'),
    }
    result = project_service.list_projects(get_session(), tenant_id, page, limit, filters)
    return success_response(result, 'Projects retrieved successfully')


@projects_bp.route('/<project_id>', methods=['GET'])
@require_login
@require_tenant_match
def get_project(tenant_id, project_id):
    result = project_service.get_project(get_session(), tenant_id, project_id)
    return success_response(result, 'Project retrieved successfully')


@projects_bp.route('/<project_id>', methods=['PUT'])
@require_login
@require_tenant_match
def update_project(tenant_id, project_id):
    data = validate_update_project(request.get_json(silent=True))
    result = project_service.update_project(get_session(), tenant_id, project_id, data, g.principal.id)
    return success_response(result, 'Project updated successfully')


@projects_bp.route('/<project_id>', methods=['DELETE'])
@require_login
@require_tenant_match
def delete_project(tenant_id, project_id):
    result = project_service.delete_project(get_session(), tenant_id, project_id, g.principal.id)
    return success_response(result, 'Project deleted successfully')
