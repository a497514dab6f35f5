"""
Tenant service: details with live statistics, updates and the super-admin
listing of every tenant.
"""
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from tenantboard.database import violates_unique
from tenantboard.exceptions import ConflictError, ForbiddenError, NotFoundError
from tenantboard.models import AuditAction, Project, Task, Tenant, User
from tenantboard.services import audit_service
from tenantboard.utils.responses import paginate

logger = logging.getLogger(__name__)

# Request key -> Tenant attribute
UPDATABLE_FIELDS = {
    'name': 'name',
    'subdomain': 'subdomain',
    'status': 'status',
    'subscriptionPlan': 'subscription_plan',
    'maxUsers': 'max_users',
    'maxProjects': 'max_projects',
}

# Changing these alters plan or quota, which only a super admin may do
SUPER_ADMIN_FIELDS = {'status', 'subscriptionPlan', 'maxUsers', 'maxProjects'}


def get_tenant_or_404(session, tenant_id):
    tenant = session.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError('Tenant not found', code='TENANT_NOT_FOUND')
    return tenant


def count_users(session, tenant_id):
    return session.query(func.count(User.id)).filter(User.tenant_id == tenant_id).scalar()


def count_projects(session, tenant_id):
    return session.query(func.count(Project.id)).filter(Project.tenant_id == tenant_id).scalar()


def count_tasks(session, tenant_id):
    return session.query(func.count(Task.id)).filter(Task.tenant_id == tenant_id).scalar()


def get_tenant_details(session, tenant_id):
    """Tenant record plus user/project/task counts computed on every call."""
    tenant = get_tenant_or_404(session, tenant_id)

    details = tenant.to_dict()
    details['stats'] = {
        'totalUsers': count_users(session, tenant_id),
        'totalProjects': count_projects(session, tenant_id),
        'totalTasks': count_tasks(session, tenant_id),
    }
    return details


def update_tenant(session, tenant_id, data, principal):
    """
    Apply a partial update to a tenant.

    Raises:
        NotFoundError: tenant absent
        ForbiddenError: a non super admin touched plan/status/quota fields
        ConflictError: new subdomain already taken
    """
    tenant = get_tenant_or_404(session, tenant_id)

    restricted = SUPER_ADMIN_FIELDS.intersection(data)
    if restricted and not principal.is_super_admin():
        raise ForbiddenError(
            'Only a super admin can change plan, status or limits',
            code='TENANT_FIELDS_FORBIDDEN',
            payload={'fields': sorted(restricted)},
        )

    new_subdomain = data.get('subdomain')
    if new_subdomain and new_subdomain != tenant.subdomain:
        taken = session.query(Tenant).filter(
            Tenant.subdomain == new_subdomain,
            Tenant.id != tenant.id,
        ).first()
        if taken:
            raise ConflictError('Subdomain is already registered', code='SUBDOMAIN_EXISTS')

    changes = []
    for key, attr in UPDATABLE_FIELDS.items():
        if key in data:
            setattr(tenant, attr, data[key])
            changes.append(key)

    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if violates_unique(e, 'subdomain'):
            raise ConflictError('Subdomain is already registered', code='SUBDOMAIN_EXISTS')
        raise

    result = tenant.to_dict()
    audit_service.log_action(
        session,
        AuditAction.UPDATE_TENANT,
        tenant_id=tenant.id,
        user_id=principal.id,
        entity_type='tenant',
        entity_id=tenant.id,
        metadata={'changes': changes},
    )
    return result


def list_all_tenants(session, page=1, limit=50, filters=None):
    """
    Paginated list of every tenant, newest first.

    Each row carries live user and project counts (one pair of count queries
    per tenant on the page).
    """
    filters = filters or {}
    query = session.query(Tenant)

    if filters.get('status'):
        query = query.filter(Tenant.status == filters['status'])
    if filters.get('subscriptionPlan'):
        query = query.filter(Tenant.subscription_plan == filters['subscriptionPlan'])

    query = query.order_by(Tenant.created_at.desc(), Tenant.id)
    tenants, total, pagination = paginate(query, page, limit)

    rows = []
    for tenant in tenants:
        row = tenant.to_dict()
        row['totalUsers'] = count_users(session, tenant.id)
        row['totalProjects'] = count_projects(session, tenant.id)
        rows.append(row)

    return {
        'tenants': rows,
        'pagination': pagination,
        'total': total,
    }
