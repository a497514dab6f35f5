"""
User management service for tenant members.

Enforces the per-tenant user quota, email uniqueness and the rule that a
tenant always keeps at least one tenant_admin.
"""
import logging

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from tenantboard.blueprints.metrics import quota_rejections_total
from tenantboard.exceptions import ConflictError, NotFoundError
from tenantboard.models import AuditAction, Project, Task, User, UserRole
from tenantboard.services import audit_service
from tenantboard.services.auth_service import weak_password_error
from tenantboard.services.tenant_service import count_users, get_tenant_or_404
from tenantboard.utils.responses import paginate
from tenantboard.utils.security import validate_password_strength

logger = logging.getLogger(__name__)

# Request key -> User attribute
UPDATABLE_FIELDS = {
    'fullName': 'full_name',
    'role': 'role',
    'isActive': 'is_active',
}


def get_user_in_tenant(session, tenant_id, user_id):
    """Fetch a user of the given tenant; other tenants' users look absent."""
    user = session.query(User).filter(
        User.id == user_id,
        User.tenant_id == tenant_id,
    ).first()
    if user is None:
        raise NotFoundError('User not found', code='USER_NOT_FOUND')
    return user


def add_user(session, tenant_id, data, actor_id=None):
    """
    Add a user to a tenant.

    Raises:
        NotFoundError: tenant absent
        ConflictError: quota reached, or email already used
        BadRequestError: password fails the strength policy
    """
    tenant = get_tenant_or_404(session, tenant_id)

    if count_users(session, tenant_id) >= tenant.max_users:
        quota_rejections_total.labels(resource='users').inc()
        raise ConflictError(
            'Tenant has reached its user limit',
            code='TENANT_USER_LIMIT_EXCEEDED',
            payload={'maxUsers': tenant.max_users},
        )

    email = data['email'].lower()
    in_tenant = session.query(User).filter(User.email == email, User.tenant_id == tenant_id).first()
    if in_tenant:
        raise ConflictError('Email already exists in this tenant', code='EMAIL_EXISTS_IN_TENANT')

    # Login looks users up by email alone, so it must be unique system-wide
    if session.query(User).filter(User.email == email).first():
        raise ConflictError('Email is already registered', code='EMAIL_EXISTS')

    problems = validate_password_strength(data['password'])
    if problems:
        raise weak_password_error(problems)

    user = User(
        tenant_id=tenant_id,
        email=email,
        full_name=data['fullName'],
        role=data.get('role') or UserRole.USER.value,
        is_active=True,
    )
    user.set_password(data['password'])
    session.add(user)

    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"User creation conflict for {email}: {e.orig}")
        raise ConflictError('Email is already registered', code='EMAIL_EXISTS')

    result = user.to_dict()
    audit_service.log_action(
        session,
        AuditAction.CREATE_USER,
        tenant_id=tenant_id,
        user_id=actor_id,
        entity_type='user',
        entity_id=user.id,
        metadata={'role': user.role},
    )
    return result


def list_users(session, tenant_id, page=1, limit=50, filters=None):
    """
    Paginated users of a tenant, newest first.

    filters: role (exact) and search (case-insensitive, email OR full name).
    """
    filters = filters or {}
    query = session.query(User).filter(User.tenant_id == tenant_id)

    if filters.get('role'):
        query = query.filter(User.role == filters['role'])

    if filters.get('search'):
        search = filters['search']
        query = query.filter(or_(
            User.email.icontains(search, autoescape=True),
            User.full_name.icontains(search, autoescape=True),
        ))

    query = query.order_by(User.created_at.desc(), User.id)
    users, total, pagination = paginate(query, page, limit)

    return {
        'users': [u.to_dict() for u in users],
        'pagination': pagination,
        'total': total,
    }


def get_user(session, tenant_id, user_id):
    return get_user_in_tenant(session, tenant_id, user_id).to_dict()


def update_user(session, tenant_id, user_id, data, actor_id=None):
    """
    Partial update of fullName, role, isActive and password.

    Raises:
        NotFoundError: user absent or belongs to another tenant
        ConflictError: the change would leave the tenant without a tenant_admin
    """
    user = get_user_in_tenant(session, tenant_id, user_id)

    demoted = 'role' in data and data['role'] != UserRole.TENANT_ADMIN.value
    deactivated = data.get('isActive') is False
    if (demoted or deactivated) and user.is_tenant_admin() \
            and count_tenant_admins(session, tenant_id) == 1:
        raise ConflictError(
            'Cannot demote or deactivate the last tenant admin',
            code='CANNOT_DEMOTE_LAST_ADMIN',
        )

    if 'password' in data:
        problems = validate_password_strength(data['password'])
        if problems:
            raise weak_password_error(problems)

    changes = []
    for key, attr in UPDATABLE_FIELDS.items():
        if key in data:
            setattr(user, attr, data[key])
            changes.append(key)

    if 'password' in data:
        user.set_password(data['password'])
        changes.append('password')

    session.commit()

    result = user.to_dict()
    audit_service.log_action(
        session,
        AuditAction.UPDATE_USER,
        tenant_id=tenant_id,
        user_id=actor_id,
        entity_type='user',
        entity_id=user.id,
        metadata={'changes': changes},
    )
    return result


def count_tenant_admins(session, tenant_id):
    return session.query(func.count(User.id)).filter(
        User.tenant_id == tenant_id,
        User.role == UserRole.TENANT_ADMIN.value,
    ).scalar()


def delete_user(session, tenant_id, user_id, actor_id=None):
    """
    Delete a user from a tenant.

    Raises:
        NotFoundError: user absent or belongs to another tenant
        ConflictError: user is the tenant's only tenant_admin
    """
    user = get_user_in_tenant(session, tenant_id, user_id)

    if user.is_tenant_admin() and count_tenant_admins(session, tenant_id) == 1:
        raise ConflictError(
            'Cannot delete the last tenant admin',
            code='CANNOT_DELETE_LAST_ADMIN',
        )

    email = user.email

    # Keep tasks and projects; drop their references to the user
    session.query(Task).filter(Task.assigned_to == user.id).update(
        {Task.assigned_to: None}, synchronize_session='fetch'
    )
    session.query(Project).filter(Project.created_by == user.id).update(
        {Project.created_by: None}, synchronize_session='fetch'
    )
    session.delete(user)
    session.commit()

    audit_service.log_action(
        session,
        AuditAction.DELETE_USER,
        tenant_id=tenant_id,
        user_id=actor_id,
        entity_type='user',
        entity_id=user_id,
        metadata={'email': email},
    )
    return {'success': True}
