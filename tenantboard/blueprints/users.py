"""
User management blueprint for a tenant.
Any member may list and view users; tenant admins add, update and remove them.
"""

from flask import Blueprint, g, request

from tenantboard.database import get_session
from tenantboard.decorators.permissions import require_tenant_match, tenant_admin_or_higher
from tenantboard.middleware import require_login
from tenantboard.services import user_service
from tenantboard.utils.responses import get_pagination_args, success_response
from tenantboard.utils.validation import validate_create_user, validate_update_user

users_bp = Blueprint('users', __name__, url_prefix='/api/tenants/<tenant_id>/users')


@users_bp.route('', methods=['POST'])
@require_login
@tenant_admin_or_higher
@require_tenant_match
def add_user(tenant_id):
    data = validate_create_user(request.get_json(silent=True))
    result = user_service.add_user(get_session(), tenant_id, data, actor_id=g.principal.id)
    return success_response(result, 'User created successfully', 201)


@users_bp.route('', methods=['GET'])
@require_login
@require_tenant_match
def list_users(tenant_id):
    page, limit = get_pagination_args()
    filters = {
        'role': request.args.get('role'),
        'search': request.args.get('search'),
    }
    result = user_service.list_users(get_session(), tenant_id, page, limit, filters)
    return success_response(result, 'Users retrieved successfully')


@users_bp.route('/<user_id>', methods=['GET'])
@require_login
@require_tenant_match
def get_user(tenant_id, user_id):
    result = user_service.get_user(get_session(), tenant_id, user_id)
    return success_response(result, 'User retrieved successfully')


@users_bp.route('/<user_id>', methods=['PUT'])
@require_login
@tenant_admin_or_higher
@require_tenant_match
def update_user(tenant_id, user_id):
    data = validate_update_user(request.get_json(silent=True))
    result = user_service.update_user(get_session(), tenant_id, user_id, data, actor_id=g.principal.id)
    return success_response(result, 'User updated successfully')


@users_bp.route('/<user_id>', methods=['DELETE'])
@require_login
@tenant_admin_or_higher
@require_tenant_match
def delete_user(tenant_id, user_id):
    result = user_service.delete_user(get_session(), tenant_id, user_id, actor_id=g.principal.id)
    return success_response(result, 'User deleted successfully')
