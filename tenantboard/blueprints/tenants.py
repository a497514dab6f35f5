"""
Tenant blueprint.
Super admins list every tenant; members read their own tenant, tenant
admins update it and read its audit trail.
"""

from flask import Blueprint, g, request

from tenantboard.database import get_session
from tenantboard.decorators.permissions import (
    require_tenant_match, super_admin_only, tenant_admin_or_higher,
)
from tenantboard.middleware import require_login
from tenantboard.services import audit_service, tenant_service
from tenantboard.utils.responses import get_pagination_args, success_response
from tenantboard.utils.validation import validate_update_tenant

tenants_bp = Blueprint('tenants', __name__, url_prefix='/api/tenants')


@tenants_bp.route('', methods=['GET'])
@require_login
@super_admin_only
def list_all_tenants():
    page, limit = get_pagination_args()
    filters = {
        'status': request.args.get('status'),
        'subscriptionPlan': request.args.get('subscriptionPlan'),
    }
    result = tenant_service.list_all_tenants(get_session(), page, limit, filters)
    return success_response(result, 'Tenants retrieved successfully')


@tenants_bp.route('/<tenant_id>', methods=['GET'])
@require_login
@require_tenant_match
def get_tenant(tenant_id):
    result = tenant_service.get_tenant_details(get_session(), tenant_id)
    return success_response(result, 'Tenant retrieved successfully')


@tenants_bp.route('/<tenant_id>', methods=['PUT'])
@require_login
@tenant_admin_or_higher
@require_tenant_match
def update_tenant(tenant_id):
    data = validate_update_tenant(request.get_json(silent=True))
    result = tenant_service.update_tenant(get_session(), tenant_id, data, g.principal)
    return success_response(result, 'Tenant updated successfully')


@tenants_bp.route('/<tenant_id>/audit-logs', methods=['GET'])
@require_login
@tenant_admin_or_higher
@require_tenant_match
def list_audit_logs(tenant_id):
    page, limit = get_pagination_args()
    result = audit_service.get_audit_logs(
        get_session(),
        tenant_id,
        page=page,
        limit=limit,
        action_filter=request.args.get('action'),
        user_id_filter=request.args.get('userId'),
        entity_type_filter=request.args.get('entityType'),
    )
    return success_response(result, 'Audit logs retrieved successfully')
