"""
Unit tests for SQLAlchemy models.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from tenantboard.models import Tenant, User, Project, Task, TaskPriority


class TestTenantModel:
    """Tests for Tenant model."""

    def test_defaults(self, session):
        tenant = Tenant(name='Acme', subdomain='acme')
        session.add(tenant)
        session.commit()

        assert tenant.id is not None
        assert tenant.status == 'active'
        assert tenant.subscription_plan == 'free'
        assert tenant.max_users == 10
        assert tenant.max_projects == 5

    def test_to_dict_uses_camel_case(self, session, tenant1):
        data = tenant1.to_dict()
        assert set(data) == {
            'id', 'name', 'subdomain', 'status', 'subscriptionPlan',
            'maxUsers', 'maxProjects', 'createdAt', 'updatedAt',
        }
        assert data['createdAt'] is not None

    def test_subdomain_unique(self, session, tenant1):
        session.add(Tenant(name='Duplicate', subdomain=tenant1.subdomain))
        with pytest.raises(IntegrityError):
            session.commit()


class TestUserModel:
    """Tests for User model."""

    def test_password_is_hashed(self, session, tenant1):
        user = User(tenant_id=tenant1.id, email='a@test.com', full_name='A')
        user.set_password('Password123')
        session.add(user)
        session.commit()

        assert user.password_hash != 'Password123'
        assert user.check_password('Password123')
        assert not user.check_password('wrong')

    def test_role_helpers(self, admin1, member1, super_admin):
        assert admin1.is_tenant_admin()
        assert not member1.is_tenant_admin()
        assert super_admin.tenant_id is None

    def test_to_dict_hides_password(self, member1):
        data = member1.to_dict()
        assert 'passwordHash' not in data
        assert 'password_hash' not in data
        assert data['fullName'] == 'Member One'
        assert data['isActive'] is True

    def test_email_unique_across_tenants(self, session, tenant2, member1):
        duplicate = User(tenant_id=tenant2.id, email=member1.email, full_name='Copy')
        duplicate.set_password('Password123')
        session.add(duplicate)
        with pytest.raises(IntegrityError):
            session.commit()


class TestProjectModel:

    def test_deleting_project_deletes_tasks(self, session, project1, make_task):
        make_task(project1, title='One')
        make_task(project1, title='Two')

        session.delete(project1)
        session.commit()

        assert session.query(Task).count() == 0

    def test_default_status(self, session, tenant1):
        project = Project(tenant_id=tenant1.id, name='P')
        session.add(project)
        session.commit()
        assert project.status == 'active'


class TestTaskModel:

    def test_defaults(self, project1, make_task):
        task = make_task(project1)
        assert task.status == 'todo'
        assert task.priority == TaskPriority.MEDIUM.value
        assert task.assigned_to is None

    def test_to_dict_includes_assignee(self, project1, member1, make_task):
        due = datetime(2025, 1, 1, tzinfo=timezone.utc)
        task = make_task(project1, assigned_to=member1.id, due_date=due)

        data = task.to_dict(include_assignee=True)
        assert data['assignee'] == {
            'id': member1.id, 'fullName': member1.full_name, 'email': member1.email,
        }
        assert data['dueDate'].startswith('2025-01-01T00:00:00')

    def test_unassigned_task_has_null_assignee(self, project1, make_task):
        assert make_task(project1).to_dict(include_assignee=True)['assignee'] is None
