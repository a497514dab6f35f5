"""
Unit tests for request body validation.
"""

import pytest

from tenantboard.exceptions import ValidationError
from tenantboard.utils.validation import (
    is_valid_email, validate_register_tenant, validate_login, validate_create_user,
    validate_update_tenant, validate_create_project, validate_create_task,
    validate_update_task, validate_task_status,
)


def error_paths(excinfo):
    return {e['path'] for e in excinfo.value.errors}


REGISTRATION = {
    'tenantName': 'Acme',
    'subdomain': 'acme-co',
    'adminEmail': 'Admin@Acme.com',
    'adminPassword': 'Password123',
    'adminFullName': 'Ada Admin',
}


class TestEmail:

    @pytest.mark.parametrize('email', ['a@b.co', 'first.last+tag@example.org'])
    def test_valid(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize('email', ['', 'plain', 'a@b', '@b.com', None])
    def test_invalid(self, email):
        assert not is_valid_email(email)


class TestRegisterTenant:

    def test_valid_body_is_cleaned(self):
        data = validate_register_tenant(dict(REGISTRATION))
        assert data['adminEmail'] == 'admin@acme.com'
        assert data['subdomain'] == 'acme-co'

    def test_missing_body_reports_every_field(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_register_tenant(None)
        assert error_paths(excinfo) == {
            'tenantName', 'subdomain', 'adminEmail', 'adminPassword', 'adminFullName',
        }

    @pytest.mark.parametrize('subdomain', ['ab', 'Acme', 'acme_co', 'a' * 64])
    def test_bad_subdomain(self, subdomain):
        with pytest.raises(ValidationError) as excinfo:
            validate_register_tenant(dict(REGISTRATION, subdomain=subdomain))
        assert error_paths(excinfo) == {'subdomain'}

    def test_short_password(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_register_tenant(dict(REGISTRATION, adminPassword='Ab1'))
        assert error_paths(excinfo) == {'adminPassword'}

    def test_non_object_body(self):
        with pytest.raises(ValidationError):
            validate_register_tenant(['not', 'an', 'object'])


class TestLogin:

    def test_missing_password(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_login({'email': 'a@b.co'})
        assert error_paths(excinfo) == {'password'}


class TestUsers:

    def test_role_defaults_to_user(self):
        data = validate_create_user({'email': 'x@y.co', 'password': 'Password123', 'fullName': 'X'})
        assert data['role'] == 'user'

    def test_super_admin_role_cannot_be_assigned(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_create_user({
                'email': 'x@y.co', 'password': 'Password123', 'fullName': 'X', 'role': 'super_admin',
            })
        assert error_paths(excinfo) == {'role'}


class TestTenantUpdate:

    def test_only_present_keys_returned(self):
        assert validate_update_tenant({'name': 'New'}) == {'name': 'New'}

    @pytest.mark.parametrize('value', [0, -1, 'ten', True])
    def test_limits_must_be_positive_integers(self, value):
        with pytest.raises(ValidationError):
            validate_update_tenant({'maxUsers': value})


class TestProjectsAndTasks:

    def test_project_name_required(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_create_project({'description': 'no name'})
        assert error_paths(excinfo) == {'name'}

    def test_project_status_not_accepted_on_create(self):
        data = validate_create_project({'name': 'X', 'status': 'archived'})
        assert 'status' not in data

    def test_task_defaults(self):
        data = validate_create_task({'title': 'Write docs'})
        assert data == {'title': 'Write docs', 'priority': 'medium'}

    def test_task_due_date_parsed(self):
        data = validate_create_task({'title': 'T', 'dueDate': '2025-01-01T00:00:00Z'})
        assert data['dueDate'].year == 2025
        assert data['dueDate'].tzinfo is not None

    def test_task_bad_due_date(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_create_task({'title': 'T', 'dueDate': 'tomorrow'})
        assert error_paths(excinfo) == {'dueDate'}

    def test_update_can_clear_assignee(self):
        assert validate_update_task({'assignedTo': None}) == {'assignedTo': None}

    def test_status_must_be_known(self):
        with pytest.raises(ValidationError):
            validate_task_status({'status': 'blocked'})
        assert validate_task_status({'status': 'in_progress'}) == {'status': 'in_progress'}
