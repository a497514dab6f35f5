"""
Project service.

Projects are tenant-scoped; creating one counts against the tenant's
max_projects quota. Deleting a project deletes its tasks.
"""
import logging

from sqlalchemy import case, func

from tenantboard.blueprints.metrics import quota_rejections_total
from tenantboard.exceptions import ConflictError, NotFoundError
from tenantboard.models import AuditAction, Project, ProjectStatus, Task, TaskStatus
from tenantboard.services import audit_service
from tenantboard.services.tenant_service import count_projects, get_tenant_or_404
from tenantboard.utils.responses import paginate

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('name', 'description', 'status')


def get_project_in_tenant(session, tenant_id, project_id):
    """Fetch a project of the given tenant; other tenants' projects look absent."""
    project = session.query(Project).filter(
        Project.id == project_id,
        Project.tenant_id == tenant_id,
    ).first()
    if project is None:
        raise NotFoundError('Project not found', code='PROJECT_NOT_FOUND')
    return project


def _task_counts(session, project_ids):
    """Map project id -> (task count, completed task count)."""
    if not project_ids:
        return {}
    completed = func.sum(case((Task.status == TaskStatus.COMPLETED.value, 1), else_=0))
    rows = session.query(Task.project_id, func.count(Task.id), completed).filter(
        Task.project_id.in_(project_ids)
    ).group_by(Task.project_id).all()
    return {project_id: (total, int(done or 0)) for project_id, total, done in rows}


def _with_counts(project, counts):
    data = project.to_dict()
    total, done = counts.get(project.id, (0, 0))
    data['taskCount'] = total
    data['completedTaskCount'] = done
    return data


def create_project(session, tenant_id, data, actor_id):
    """
    Create a project in a tenant.

    Raises:
        NotFoundError: tenant absent
        ConflictError: tenant already holds max_projects projects
    """
    tenant = get_tenant_or_404(session, tenant_id)

    if count_projects(session, tenant_id) >= tenant.max_projects:
        quota_rejections_total.labels(resource='projects').inc()
        raise ConflictError(
            'Tenant has reached its project limit',
            code='TENANT_PROJECT_LIMIT_EXCEEDED',
            payload={'maxProjects': tenant.max_projects},
        )

    project = Project(
        tenant_id=tenant_id,
        name=data['name'],
        description=data.get('description'),
        status=ProjectStatus.ACTIVE.value,
        created_by=actor_id,
    )
    session.add(project)
    session.commit()

    result = project.to_dict()
    audit_service.log_action(
        session,
        AuditAction.CREATE_PROJECT,
        tenant_id=tenant_id,
        user_id=actor_id,
        entity_type='project',
        entity_id=project.id,
    )
    return result


def list_projects(session, tenant_id, page=1, limit=50, filters=None):
    """
    Paginated projects of a tenant, newest first.

    filters: status (exact) and search (case-insensitive substring of name).
    """
    filters = filters or {}
    query = session.query(Project).filter(Project.tenant_id == tenant_id)

    if filters.get('status'):
        query = query.filter(Project.status == filters['status'])

    if filters.get('search'):
        query = query.filter(Project.name.icontains(filters['search'], autoescape=True))

    query = query.order_by(Project.created_at.desc(), Project.id)
    projects, total, pagination = paginate(query, page, limit)
    counts = _task_counts(session, [p.id for p in projects])

    return {
        'projects': [_with_counts(p, counts) for p in projects],
        'pagination': pagination,
        'total': total,
    }


def get_project(session, tenant_id, project_id):
    project = get_project_in_tenant(session, tenant_id, project_id)
    data = _with_counts(project, _task_counts(session, [project.id]))
    data['creator'] = None
    if project.creator is not None:
        data['creator'] = {'id': project.creator.id, 'fullName': project.creator.full_name}
    return data


def update_project(session, tenant_id, project_id, data, actor_id):
    """Apply only the fields present in data (description may be set to null)."""
    project = get_project_in_tenant(session, tenant_id, project_id)

    changes = [key for key in UPDATABLE_FIELDS if key in data]
    for key in changes:
        setattr(project, key, data[key])
    session.commit()

    result = project.to_dict()
    audit_service.log_action(
        session,
        AuditAction.UPDATE_PROJECT,
        tenant_id=tenant_id,
        user_id=actor_id,
        entity_type='project',
        entity_id=project.id,
        metadata={'changes': changes},
    )
    return result


def delete_project(session, tenant_id, project_id, actor_id):
    project = get_project_in_tenant(session, tenant_id, project_id)

    task_count = session.query(func.count(Task.id)).filter(Task.project_id == project.id).scalar()
    session.delete(project)
    session.commit()
    logger.info(f"Deleted project {project_id} of tenant {tenant_id} with {task_count} tasks")

    audit_service.log_action(
        session,
        AuditAction.DELETE_PROJECT,
        tenant_id=tenant_id,
        user_id=actor_id,
        entity_type='project',
        entity_id=project_id,
        metadata={'deletedTasks': task_count},
    )
    return {'success': True}
