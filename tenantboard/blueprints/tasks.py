"""
Task blueprint.
Tasks are created and listed under their project, and addressed directly
by id within the tenant for updates and deletion.
"""

from flask import Blueprint, g, request

from tenantboard.database import get_session
from tenantboard.decorators.permissions import require_tenant_match
from tenantboard.middleware import require_login
from tenantboard.services import task_service
from tenantboard.utils.responses import get_pagination_args, success_response
from tenantboard.utils.validation import (
    validate_create_task, validate_task_status, validate_update_task,
)

tasks_bp = Blueprint('tasks', __name__, url_prefix='/api/tenants/<tenant_id>')


@tasks_bp.route('/projects/<project_id>/tasks', methods=['POST'])
@require_login
@require_tenant_match
def create_task(tenant_id, project_id):
    data = validate_create_task(request.get_json(silent=True))
    result = task_service.create_task(get_session(), tenant_id, project_id, data, g.principal.id)
    return success_response(result, 'Task created successfully', 201)


@tasks_bp.route('/projects/<project_id>/tasks', methods=['GET'])
@require_login
@require_tenant_match
def list_tasks(tenant_id, project_id):
    page, limit = get_pagination_args()
    filters = {
        'status': request.args.get('status'),
        'priority': request.args.get('priority'),
        'assignedTo': request.args.get('assignedTo'),
        'search': request.args.get('search'),
    }
    result = task_service.list_tasks(get_session(), tenant_id, project_id, page, limit, filters)
    return success_response(result, 'Tasks retrieved successfully')


@tasks_bp.route('/tasks/<task_id>', methods=['GET'])
@require_login
@require_tenant_match
def get_task(tenant_id, task_id):
    result = task_service.get_task(get_session(), tenant_id, task_id)
    return success_response(result, 'Task retrieved successfully')


@tasks_bp.route('/tasks/<task_id>/status', methods=['PATCH'])
@require_login
@require_tenant_match
def update_task_status(tenant_id, task_id):
    data = validate_task_status(request.get_json(silent=True))
    result = task_service.update_task_status(get_session(), tenant_id, task_id, data['status'], g.principal.id)
    return success_response(result, 'Task status updated successfully')


@tasks_bp.route('/tasks/<task_id>', methods=['PUT'])
@require_login
@require_tenant_match
def update_task(tenant_id, task_id):
    data = validate_update_task(request.get_json(silent=True))
    result = task_service.update_task(get_session(), tenant_id, task_id, data, g.principal.id)
    return success_response(result, 'Task updated successfully')


@tasks_bp.route('/tasks/<task_id>', methods=['DELETE'])
@require_login
@require_tenant_match
def delete_task(tenant_id, task_id):
    result = task_service.delete_task(get_session(), tenant_id, task_id, g.principal.id)
    return success_response(result, 'Task deleted successfully')
