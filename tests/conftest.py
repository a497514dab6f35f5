import uuid

import pytest

from config import TestingConfig
from tenantboard import create_app
from tenantboard.models import Tenant, User, UserRole, Project, Task
from tenantboard.utils.security import issue_token

DEFAULT_PASSWORD = 'Password123'


@pytest.fixture(scope='function')
def app():
    """Create an application bound to a fresh in-memory database."""
    app = create_app(TestingConfig)
    database = app.extensions['database']
    database.create_all()
    yield app
    database.session.remove()
    database.drop_all()
    database.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Database session shared with the application under test."""
    session = app.extensions['database'].session
    yield session
    session.rollback()


@pytest.fixture
def make_tenant(session):
    """Factory for tenants with a unique subdomain."""
    def _make_tenant(**overrides):
        suffix = str(uuid.uuid4())[:8]
        values = {
            'name': f'Test Tenant {suffix}',
            'subdomain': f'test-{suffix}',
            'max_users': 10,
            'max_projects': 5,
        }
        values.update(overrides)
        tenant = Tenant(**values)
        session.add(tenant)
        session.commit()
        return tenant
    return _make_tenant


@pytest.fixture
def make_user(session):
    """Factory for users; role defaults to a plain member."""
    def _make_user(tenant=None, role=UserRole.USER.value, **overrides):
        suffix = str(uuid.uuid4())[:8]
        values = {
            'tenant_id': tenant.id if tenant is not None else None,
            'email': f'user-{suffix}@test.com',
            'full_name': f'User {suffix}',
            'role': role,
            'is_active': True,
        }
        values.update(overrides)
        user = User(**values)
        user.set_password(DEFAULT_PASSWORD)
        session.add(user)
        session.commit()
        return user
    return _make_user


@pytest.fixture
def tenant1(make_tenant):
    return make_tenant(name='Tenant One')


@pytest.fixture
def tenant2(make_tenant):
    return make_tenant(name='Tenant Two')


@pytest.fixture
def admin1(make_user, tenant1):
    """tenant_admin of tenant1."""
    return make_user(tenant1, role=UserRole.TENANT_ADMIN.value, full_name='Admin One')


@pytest.fixture
def member1(make_user, tenant1):
    """Plain user of tenant1."""
    return make_user(tenant1, full_name='Member One')


@pytest.fixture
def admin2(make_user, tenant2):
    """tenant_admin of tenant2."""
    return make_user(tenant2, role=UserRole.TENANT_ADMIN.value, full_name='Admin Two')


@pytest.fixture
def super_admin(make_user):
    return make_user(None, role=UserRole.SUPER_ADMIN.value, full_name='Root')


@pytest.fixture
def auth_headers(app):
    """Build an Authorization header carrying a token for the given user."""
    def _auth_headers(user):
        with app.app_context():
            token = issue_token(user.id, user.tenant_id, user.role, user.email)
        return {'Authorization': f'Bearer {token}'}
    return _auth_headers


@pytest.fixture
def make_project(session):
    def _make_project(tenant, creator=None, **overrides):
        values = {
            'tenant_id': tenant.id,
            'name': 'Project',
            'created_by': creator.id if creator is not None else None,
        }
        values.update(overrides)
        project = Project(**values)
        session.add(project)
        session.commit()
        return project
    return _make_project


@pytest.fixture
def make_task(session):
    def _make_task(project, **overrides):
        values = {
            'tenant_id': project.tenant_id,
            'project_id': project.id,
            'title': 'Task',
        }
        values.update(overrides)
        task = Task(**values)
        session.add(task)
        session.commit()
        return task
    return _make_task


@pytest.fixture
def project1(make_project, tenant1, admin1):
    return make_project(tenant1, admin1, name='Project One', description='First project')
