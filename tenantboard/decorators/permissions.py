"""
Permission decorators for role-based access control.

Roles are ordered user < tenant_admin < super_admin; guards are expressed
through role_at_least() instead of repeated allow-lists. Must be used AFTER
require_login.
"""

from functools import wraps

from flask import g, request

from tenantboard.exceptions import UnauthorizedError, ForbiddenError
from tenantboard.models import UserRole

ROLE_HIERARCHY = {
    UserRole.USER.value: 1,
    UserRole.TENANT_ADMIN.value: 2,
    UserRole.SUPER_ADMIN.value: 3,
}


def role_level(role):
    """Numeric level for a role (0 when unknown)."""
    if isinstance(role, UserRole):
        role = role.value
    return ROLE_HIERARCHY.get(role, 0)


def role_at_least(principal, required_role):
    """True when the principal's role is at or above required_role."""
    if principal is None:
        return False
    return role_level(principal.role) >= role_level(required_role)


def can_access_tenant(principal, tenant_id):
    """Super admins reach every tenant; everyone else only their own."""
    if principal is None:
        return False
    if principal.is_super_admin():
        return True
    return tenant_id is not None and principal.tenant_id == tenant_id


def target_tenant_id():
    """
    Tenant id the request is aimed at.

    Precedence: path parameter, then JSON body tenantId, then query tenantId.
    """
    view_args = request.view_args or {}
    if view_args.get('tenant_id'):
        return view_args['tenant_id']
    body = request.get_json(silent=True)
    if isinstance(body, dict) and body.get('tenantId'):
        return body['tenantId']
    return request.args.get('tenantId') or None


def _require_principal():
    principal = g.get('principal')
    if principal is None:
        raise UnauthorizedError('Authentication required')
    return principal


def require_role(*allowed_roles):
    """
    Decorator to restrict access to an explicit set of roles.

    Usage:
        @require_role('tenant_admin', 'super_admin')
    """
    allowed = {r.value if isinstance(r, UserRole) else r for r in allowed_roles}

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            principal = _require_principal()
            if principal.role not in allowed:
                raise ForbiddenError()
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def require_min_role(required_role):
    """Decorator to restrict access to required_role or anything above it."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            principal = _require_principal()
            if not role_at_least(principal, required_role):
                raise ForbiddenError()
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def require_tenant_match(f):
    """Decorator: the principal must belong to the targeted tenant (super admins bypass)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        principal = _require_principal()
        if not can_access_tenant(principal, target_tenant_id()):
            raise ForbiddenError('You do not have access to this tenant', code='TENANT_FORBIDDEN')
        return f(*args, **kwargs)
    return decorated_function


def super_admin_only(f):
    """
    Shortcut decorator for super-admin-only routes.

    Usage:
        @super_admin_only
        def list_all_tenants():
            ...
    """
    return require_min_role(UserRole.SUPER_ADMIN)(f)


def tenant_admin_or_higher(f):
    """Shortcut decorator for tenant_admin or super_admin access."""
    return require_min_role(UserRole.TENANT_ADMIN)(f)
