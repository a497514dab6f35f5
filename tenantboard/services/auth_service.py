"""
Authentication service.

Handles tenant registration (tenant + first admin in one transaction),
credential login and the current-user profile.
"""
import logging

from sqlalchemy.exc import IntegrityError

from tenantboard.blueprints.metrics import auth_failures_total
from tenantboard.database import transaction, violates_unique
from tenantboard.exceptions import (
    BadRequestError, ConflictError, ForbiddenError, NotFoundError, UnauthorizedError,
)
from tenantboard.models import (
    AuditAction, SubscriptionPlan, Tenant, TenantStatus, User, UserRole,
)
from tenantboard.services import audit_service
from tenantboard.utils.security import issue_token, validate_password_strength

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = 'Invalid email or password'


def weak_password_error(problems):
    return BadRequestError(
        f"PASSWORD_WEAK: {'; '.join(problems)}",
        code='PASSWORD_WEAK',
        errors=[{'path': 'password', 'message': p} for p in problems],
    )


def register_tenant(session, data, default_max_users=10, default_max_projects=5):
    """
    Register a new tenant together with its first tenant_admin.

    Args:
        session: Database session
        data: Validated dict with tenantName, subdomain, adminEmail,
            adminPassword, adminFullName

    Returns:
        dict: {tenantId, tenant, user, token}

    Raises:
        ConflictError: subdomain or email already registered
        BadRequestError: password fails the strength policy
    """
    subdomain = data['subdomain']
    email = data['adminEmail'].lower()

    if session.query(Tenant).filter(Tenant.subdomain == subdomain).first():
        raise ConflictError('Subdomain is already registered', code='SUBDOMAIN_EXISTS')

    # Email is unique across the whole system, not just the new tenant
    if session.query(User).filter(User.email == email).first():
        raise ConflictError('Email is already registered', code='EMAIL_EXISTS')

    problems = validate_password_strength(data['adminPassword'])
    if problems:
        raise weak_password_error(problems)

    try:
        with transaction(session):
            tenant = Tenant(
                name=data['tenantName'],
                subdomain=subdomain,
                status=TenantStatus.ACTIVE.value,
                subscription_plan=SubscriptionPlan.FREE.value,
                max_users=default_max_users,
                max_projects=default_max_projects,
            )
            session.add(tenant)
            session.flush()  # assign tenant.id, surface subdomain race early

            admin = User(
                tenant_id=tenant.id,
                email=email,
                full_name=data['adminFullName'],
                role=UserRole.TENANT_ADMIN.value,
                is_active=True,
            )
            admin.set_password(data['adminPassword'])
            session.add(admin)
            session.flush()
    except IntegrityError as e:
        # Lost a race against a concurrent registration
        logger.warning(f"Registration conflict for subdomain={subdomain}: {e.orig}")
        if violates_unique(e, 'subdomain'):
            raise ConflictError('Subdomain is already registered', code='SUBDOMAIN_EXISTS')
        raise ConflictError('Email is already registered', code='EMAIL_EXISTS')

    logger.info(f"Registered tenant {tenant.id} ({subdomain}) with admin {admin.id}")

    result = {
        'tenantId': tenant.id,
        'tenant': tenant.to_summary(),
        'user': admin.to_summary(),
        'token': issue_token(admin.id, tenant.id, admin.role, admin.email),
    }

    audit_service.log_action(
        session,
        AuditAction.REGISTER_TENANT,
        tenant_id=tenant.id,
        user_id=admin.id,
        entity_type='tenant',
        entity_id=tenant.id,
        metadata={'subdomain': subdomain},
    )
    return result


def login(session, email, password):
    """
    Authenticate by email and password.

    Unknown email and wrong password raise the same error so callers cannot
    probe which emails exist.
    """
    user = session.query(User).filter(User.email == email.lower()).first()

    if user is None or not user.check_password(password):
        logger.info(f"Failed login attempt for {email}")
        auth_failures_total.labels(code='INVALID_CREDENTIALS').inc()
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE, code='INVALID_CREDENTIALS')

    if not user.is_active:
        auth_failures_total.labels(code='USER_INACTIVE').inc()
        raise ForbiddenError('User account is inactive', code='USER_INACTIVE')

    return {
        'token': issue_token(user.id, user.tenant_id, user.role, user.email),
        'user': {
            'id': user.id,
            'email': user.email,
            'fullName': user.full_name,
            'role': user.role,
            'tenantId': user.tenant_id,
        },
    }


def get_current_user(session, user_id):
    user = session.get(User, user_id)

    if user is None:
        raise NotFoundError('User not found', code='USER_NOT_FOUND')

    if not user.is_active:
        raise ForbiddenError('User account is inactive', code='USER_INACTIVE')

    profile = user.to_dict()
    profile['tenant'] = user.tenant.to_dict() if user.tenant else None
    return profile


def logout(user_id):
    # Tokens are stateless; the client discards its copy
    logger.info(f"User {user_id} logged out")
    return {'success': True}
