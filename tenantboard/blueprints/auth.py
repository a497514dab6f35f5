"""
Authentication blueprint.
Handles tenant registration, login, current user and logout.
"""

from flask import Blueprint, current_app, g, request

from tenantboard.database import get_session
from tenantboard.middleware import require_login
from tenantboard.services import auth_service
from tenantboard.utils.responses import success_response
from tenantboard.utils.validation import validate_login, validate_register_tenant

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/register-tenant', methods=['POST'])
def register_tenant():
    """Create a tenant and its first admin; returns a token for the admin."""
    data = validate_register_tenant(request.get_json(silent=True))
    result = auth_service.register_tenant(
        get_session(),
        data,
        default_max_users=current_app.config['DEFAULT_MAX_USERS'],
        default_max_projects=current_app.config['DEFAULT_MAX_PROJECTS'],
    )
    return success_response(result, 'Tenant registered successfully', 201)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = validate_login(request.get_json(silent=True))
    result = auth_service.login(get_session(), data['email'], data['password'])
    return success_response(result, 'Login successful')


@auth_bp.route('/me', methods=['GET'])
@require_login
def me():
    result = auth_service.get_current_user(get_session(), g.principal.id)
    return success_response(result, 'User retrieved successfully')


@auth_bp.route('/logout', methods=['POST'])
@require_login
def logout():
    return success_response(auth_service.logout(g.principal.id), 'Logout successful')
