"""
Request body validation.

Each validate_* function takes the decoded JSON body and returns a cleaned
dict holding only the recognised keys that were present (so services can
apply partial-update semantics), or raises ValidationError with a list of
{path, message} entries.
"""
import re

from tenantboard.exceptions import ValidationError
from tenantboard.models import (
    TenantStatus, SubscriptionPlan, UserRole, ProjectStatus, TaskStatus, TaskPriority,
)
from tenantboard.utils.formatters import parse_iso_datetime

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
SUBDOMAIN_PATTERN = re.compile(r'^[a-z0-9-]+$')

_MISSING = object()

TENANT_STATUSES = [s.value for s in TenantStatus]
SUBSCRIPTION_PLANS = [p.value for p in SubscriptionPlan]
ASSIGNABLE_ROLES = [UserRole.USER.value, UserRole.TENANT_ADMIN.value]
PROJECT_STATUSES = [s.value for s in ProjectStatus]
TASK_STATUSES = [s.value for s in TaskStatus]
TASK_PRIORITIES = [p.value for p in TaskPriority]


def is_valid_email(email: str) -> bool:
    """Validate email format."""
    return isinstance(email, str) and EMAIL_PATTERN.match(email) is not None


class _Checker:
    """Collects field errors while copying accepted values into `data`."""

    def __init__(self, body):
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ValidationError([{'path': '', 'message': 'Request body must be a JSON object'}])
        self.body = body
        self.data = {}
        self.errors = []

    def error(self, path, message):
        self.errors.append({'path': path, 'message': message})

    def string(self, key, required=False, min_length=1, max_length=255, nullable=False,
               pattern=None, pattern_message=None, required_message=None):
        value = self.body.get(key, _MISSING)
        if value is _MISSING:
            if required:
                self.error(key, required_message or f'{key} is required')
            return
        if value is None:
            if nullable:
                self.data[key] = None
            else:
                self.error(key, f'{key} is required' if required else f'{key} cannot be null')
            return
        if not isinstance(value, str):
            self.error(key, f'{key} must be a string')
            return
        value = value.strip()
        if len(value) < min_length:
            self.error(key, required_message or f'{key} must be at least {min_length} characters')
            return
        if len(value) > max_length:
            self.error(key, f'{key} must be at most {max_length} characters')
            return
        if pattern is not None and not pattern.match(value):
            self.error(key, pattern_message or f'{key} has an invalid format')
            return
        self.data[key] = value

    def email(self, key, required=False):
        value = self.body.get(key, _MISSING)
        if value is _MISSING:
            if required:
                self.error(key, f'{key} is required')
            return
        if not isinstance(value, str) or not is_valid_email(value.strip()):
            self.error(key, 'Invalid email format')
            return
        self.data[key] = value.strip().lower()

    def password(self, key, required=False):
        value = self.body.get(key, _MISSING)
        if value is _MISSING:
            if required:
                self.error(key, f'{key} is required')
            return
        if not isinstance(value, str) or len(value) < 8:
            self.error(key, 'Password must be at least 8 characters')
            return
        self.data[key] = value

    def choice(self, key, choices, required=False, default=_MISSING):
        value = self.body.get(key, _MISSING)
        if value is _MISSING:
            if required:
                self.error(key, f'{key} is required')
            elif default is not _MISSING:
                self.data[key] = default
            return
        if value not in choices:
            self.error(key, f"{key} must be one of: {', '.join(choices)}")
            return
        self.data[key] = value

    def boolean(self, key):
        value = self.body.get(key, _MISSING)
        if value is _MISSING:
            return
        if not isinstance(value, bool):
            self.error(key, f'{key} must be a boolean')
            return
        self.data[key] = value

    def positive_int(self, key):
        value = self.body.get(key, _MISSING)
        if value is _MISSING:
            return
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            self.error(key, f'{key} must be a positive integer')
            return
        self.data[key] = value

    def identifier(self, key, nullable=False):
        value = self.body.get(key, _MISSING)
        if value is _MISSING:
            return
        if value is None:
            if nullable:
                self.data[key] = None
            else:
                self.error(key, f'{key} cannot be null')
            return
        if not isinstance(value, str) or not value.strip():
            self.error(key, f'{key} must be an id string')
            return
        self.data[key] = value.strip()

    def datetime(self, key, nullable=False):
        value = self.body.get(key, _MISSING)
        if value is _MISSING:
            return
        if value is None:
            if nullable:
                self.data[key] = None
            else:
                self.error(key, f'{key} cannot be null')
            return
        try:
            self.data[key] = parse_iso_datetime(value)
        except ValueError:
            self.error(key, f'{key} must be an ISO-8601 datetime')

    def result(self):
        if self.errors:
            raise ValidationError(self.errors)
        return self.data


def validate_register_tenant(body):
    c = _Checker(body)
    c.string('tenantName', required=True, required_message='Tenant name is required')
    c.string(
        'subdomain', required=True, min_length=3, max_length=63,
        pattern=SUBDOMAIN_PATTERN,
        pattern_message='Subdomain can only contain lowercase letters, numbers, and hyphens',
    )
    c.email('adminEmail', required=True)
    c.password('adminPassword', required=True)
    c.string('adminFullName', required=True, required_message='Full name is required')
    return c.result()


def validate_login(body):
    c = _Checker(body)
    c.email('email', required=True)
    value = c.body.get('password')
    if not isinstance(value, str) or not value:
        c.error('password', 'Password is required')
    else:
        c.data['password'] = value
    return c.result()


def validate_create_user(body):
    c = _Checker(body)
    c.email('email', required=True)
    c.password('password', required=True)
    c.string('fullName', required=True, required_message='Full name is required')
    c.choice('role', ASSIGNABLE_ROLES, default=UserRole.USER.value)
    return c.result()


def validate_update_user(body):
    c = _Checker(body)
    c.string('fullName')
    c.choice('role', ASSIGNABLE_ROLES)
    c.boolean('isActive')
    c.password('password')
    return c.result()


def validate_update_tenant(body):
    c = _Checker(body)
    c.string('name')
    c.string(
        'subdomain', min_length=3, max_length=63, pattern=SUBDOMAIN_PATTERN,
        pattern_message='Subdomain can only contain lowercase letters, numbers, and hyphens',
    )
    c.choice('status', TENANT_STATUSES)
    c.choice('subscriptionPlan', SUBSCRIPTION_PLANS)
    c.positive_int('maxUsers')
    c.positive_int('maxProjects')
    return c.result()


def validate_create_project(body):
    c = _Checker(body)
    c.string('name', required=True, required_message='Project name is required')
    c.string('description', min_length=0, max_length=2000, nullable=True)
    return c.result()


def validate_update_project(body):
    c = _Checker(body)
    c.string('name')
    c.string('description', min_length=0, max_length=2000, nullable=True)
    c.choice('status', PROJECT_STATUSES)
    return c.result()


def validate_create_task(body):
    c = _Checker(body)
    c.string('title', required=True, required_message='Task title is required')
    c.string('description', min_length=0, max_length=2000, nullable=True)
    c.identifier('assignedTo', nullable=True)
    c.choice('priority', TASK_PRIORITIES, default=TaskPriority.MEDIUM.value)
    c.datetime('dueDate', nullable=True)
    return c.result()


def validate_update_task(body):
    c = _Checker(body)
    c.string('title')
    c.string('description', min_length=0, max_length=2000, nullable=True)
    c.choice('status', TASK_STATUSES)
    c.choice('priority', TASK_PRIORITIES)
    c.identifier('assignedTo', nullable=True)
    c.datetime('dueDate', nullable=True)
    return c.result()


def validate_task_status(body):
    c = _Checker(body)
    c.choice('status', TASK_STATUSES, required=True)
    return c.result()
