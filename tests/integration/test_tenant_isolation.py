"""
Critical integration tests for tenant isolation.
These tests ensure that data is properly isolated between tenants.
"""

import pytest


class TestTenantRouteGuard:
    """A tenant id in the path must match the caller's tenant."""

    @pytest.mark.parametrize('path', [
        '/api/tenants/{tenant}',
        '/api/tenants/{tenant}/users',
        '/api/tenants/{tenant}/projects',
    ])
    def test_other_tenant_is_forbidden(self, client, tenant2, admin1, auth_headers, path):
        response = client.get(path.format(tenant=tenant2.id), headers=auth_headers(admin1))

        assert response.status_code == 403
        assert response.get_json()['code'] == 'TENANT_FORBIDDEN'

    def test_super_admin_reaches_any_tenant(self, client, tenant2, admin2, super_admin, auth_headers):
        response = client.get(f'/api/tenants/{tenant2.id}/users', headers=auth_headers(super_admin))

        assert response.status_code == 200
        assert [u['id'] for u in response.get_json()['data']['users']] == [admin2.id]

    def test_cannot_create_project_in_other_tenant(self, client, session, tenant2, admin1, auth_headers):
        response = client.post(
            f'/api/tenants/{tenant2.id}/projects',
            json={'name': 'Intrusion'},
            headers=auth_headers(admin1),
        )
        assert response.status_code == 403


class TestResourceIsolation:
    """Ids from another tenant behave exactly like ids that do not exist."""

    def test_project_of_other_tenant_is_not_found(self, client, tenant1, tenant2, admin1, admin2,
                                                  make_project, auth_headers):
        foreign = make_project(tenant2, admin2, name='Secret')

        response = client.get(f'/api/tenants/{tenant1.id}/projects/{foreign.id}', headers=auth_headers(admin1))
        missing = client.get(f'/api/tenants/{tenant1.id}/projects/does-not-exist', headers=auth_headers(admin1))

        assert response.status_code == missing.status_code == 404
        assert response.get_json() == missing.get_json()

    def test_task_of_other_tenant_is_not_found(self, client, tenant1, tenant2, admin1, admin2,
                                               make_project, make_task, auth_headers):
        foreign_task = make_task(make_project(tenant2, admin2))

        for method in ('get', 'put', 'delete'):
            response = getattr(client, method)(
                f'/api/tenants/{tenant1.id}/tasks/{foreign_task.id}',
                json={'title': 'Hijack'} if method == 'put' else None,
                headers=auth_headers(admin1),
            )
            assert response.status_code == 404

    def test_user_of_other_tenant_is_not_found(self, client, tenant1, admin1, admin2, auth_headers):
        response = client.get(f'/api/tenants/{tenant1.id}/users/{admin2.id}', headers=auth_headers(admin1))
        assert response.status_code == 404

    def test_cross_tenant_assignment_is_not_found(self, client, session, tenant1, admin1, admin2,
                                                  project1, auth_headers):
        response = client.post(
            f'/api/tenants/{tenant1.id}/projects/{project1.id}/tasks',
            json={'title': 'Outsourced', 'assignedTo': admin2.id},
            headers=auth_headers(admin1),
        )

        assert response.status_code == 404
        assert response.get_json()['code'] == 'USER_NOT_FOUND'

    def test_cross_tenant_reassignment_is_not_found(self, client, tenant1, admin1, admin2, member1,
                                                    project1, make_task, auth_headers):
        task = make_task(project1, assigned_to=member1.id)

        response = client.put(
            f'/api/tenants/{tenant1.id}/tasks/{task.id}',
            json={'assignedTo': admin2.id},
            headers=auth_headers(admin1),
        )
        assert response.status_code == 404

        current = client.get(f'/api/tenants/{tenant1.id}/tasks/{task.id}', headers=auth_headers(admin1))
        assert current.get_json()['data']['assignedTo'] == member1.id

    def test_project_lists_are_scoped(self, client, tenant1, tenant2, admin1, admin2, make_project, auth_headers):
        make_project(tenant1, admin1, name='Mine')
        make_project(tenant2, admin2, name='Theirs')

        response = client.get(f'/api/tenants/{tenant1.id}/projects', headers=auth_headers(admin1))

        names = [p['name'] for p in response.get_json()['data']['projects']]
        assert names == ['Mine']
