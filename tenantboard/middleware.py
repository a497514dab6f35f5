"""Middleware for authentication and tenant context."""
import logging
from functools import wraps

import jwt
from flask import g, request
from sqlalchemy.exc import SQLAlchemyError

from tenantboard.blueprints.metrics import auth_failures_total
from tenantboard.database import get_session
from tenantboard.exceptions import UnauthorizedError, ForbiddenError
from tenantboard.models import User, UserRole
from tenantboard.utils.security import decode_token, extract_bearer_token

logger = logging.getLogger(__name__)


class Principal:
    """Snapshot of the authenticated user attached to the request."""

    def __init__(self, id, email, full_name, role, tenant_id, tenant=None):
        self.id = id
        self.email = email
        self.full_name = full_name
        self.role = role
        self.tenant_id = tenant_id
        self.tenant = tenant

    @classmethod
    def from_user(cls, user):
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            tenant_id=user.tenant_id,
            tenant=user.tenant,
        )

    def is_super_admin(self):
        return self.role == UserRole.SUPER_ADMIN.value

    def __repr__(self):
        return f"<Principal(id={self.id}, role='{self.role}', tenant_id={self.tenant_id})>"


def resolve_principal(auth_header):
    """
    Resolve an Authorization header to a Principal.

    Raises:
        UnauthorizedError: header absent or malformed, bad signature,
            expired token, or unknown user
        ForbiddenError: the user is inactive
    """
    token = extract_bearer_token(auth_header)
    if not token:
        raise UnauthorizedError('Missing or invalid authorization token', code='TOKEN_MISSING')

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError('Token expired', code='TOKEN_EXPIRED')
    except jwt.InvalidTokenError:
        raise UnauthorizedError('Invalid token', code='TOKEN_INVALID')

    user_id = payload.get('userId') or payload.get('sub')
    user = get_session().get(User, user_id) if user_id else None
    if user is None:
        raise UnauthorizedError('User not found', code='USER_NOT_FOUND')
    if not user.is_active:
        raise ForbiddenError('User account is inactive', code='USER_INACTIVE')

    return Principal.from_user(user)


def load_principal():
    """
    Load the current principal into g (Flask's per-request global).

    Called before each request. Never fails: on any problem the caller is
    treated as anonymous and the reason is kept in g.auth_error for
    require_login to report.
    """
    g.principal = None
    g.auth_error = None

    auth_header = request.headers.get('Authorization')
    if not auth_header:
        return

    try:
        g.principal = resolve_principal(auth_header)
    except (UnauthorizedError, ForbiddenError) as e:
        g.auth_error = e
    except SQLAlchemyError as e:
        logger.error(f"Error resolving principal: {e}")
        g.auth_error = UnauthorizedError('Missing or invalid authorization token')


def require_login(f):
    """
    Decorator: Require a valid bearer token.

    Raises 401 (or 403 for inactive accounts) when no principal was resolved.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('principal') is None:
            error = g.get('auth_error') or UnauthorizedError(
                'Missing or invalid authorization token', code='TOKEN_MISSING'
            )
            logger.info(f"Rejected {request.method} {request.path}: {error.message}")
            auth_failures_total.labels(code=error.code).inc()
            raise error
        return f(*args, **kwargs)
    return decorated_function
