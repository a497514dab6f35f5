"""
Task service.

Tasks live inside a project and share its tenant. An assignee must be a
user of that same tenant; any other id is reported as not found.
"""
import logging

from tenantboard.exceptions import NotFoundError
from tenantboard.models import AuditAction, Task, TaskPriority, TaskStatus, User
from tenantboard.services import audit_service
from tenantboard.services.project_service import get_project_in_tenant
from tenantboard.utils.formatters import iso
from tenantboard.utils.responses import paginate

logger = logging.getLogger(__name__)

# Request key -> Task attribute
UPDATABLE_FIELDS = {
    'title': 'title',
    'description': 'description',
    'status': 'status',
    'priority': 'priority',
    'assignedTo': 'assigned_to',
    'dueDate': 'due_date',
}


def get_task_in_tenant(session, tenant_id, task_id):
    task = session.query(Task).filter(
        Task.id == task_id,
        Task.tenant_id == tenant_id,
    ).first()
    if task is None:
        raise NotFoundError('Task not found', code='TASK_NOT_FOUND')
    return task


def ensure_assignee_in_tenant(session, tenant_id, user_id):
    """Cross-tenant assignment is impossible: foreign users look absent."""
    user = session.query(User).filter(User.id == user_id, User.tenant_id == tenant_id).first()
    if user is None:
        raise NotFoundError('User not found', code='USER_NOT_FOUND')
    return user


def create_task(session, tenant_id, project_id, data, actor_id):
    """
    Create a task in a project.

    Raises:
        NotFoundError: project not in tenant, or assignee not in tenant
    """
    project = get_project_in_tenant(session, tenant_id, project_id)

    assigned_to = data.get('assignedTo')
    if assigned_to:
        ensure_assignee_in_tenant(session, tenant_id, assigned_to)

    task = Task(
        tenant_id=tenant_id,
        project_id=project.id,
        title=data['title'],
        description=data.get('description'),
        status=TaskStatus.TODO.value,
        priority=data.get('priority') or TaskPriority.MEDIUM.value,
        due_date=data.get('dueDate'),
        assigned_to=assigned_to or None,
    )
    session.add(task)
    session.commit()

    result = task.to_dict()
    audit_service.log_action(
        session,
        AuditAction.CREATE_TASK,
        tenant_id=tenant_id,
        user_id=actor_id,
        entity_type='task',
        entity_id=task.id,
        metadata={'projectId': project.id},
    )
    return result


def list_tasks(session, tenant_id, project_id, page=1, limit=50, filters=None):
    """
    Paginated tasks of a project.

    filters: status, priority, assignedTo (exact) and search (title
    substring, case-insensitive). Ordered by priority high to low, then due
    date soonest first with undated tasks last.
    """
    get_project_in_tenant(session, tenant_id, project_id)
    filters = filters or {}

    query = session.query(Task).filter(
        Task.project_id == project_id,
        Task.tenant_id == tenant_id,
    )
    if filters.get('status'):
        query = query.filter(Task.status == filters['status'])
    if filters.get('priority'):
        query = query.filter(Task.priority == filters['priority'])
    if filters.get('assignedTo'):
        query = query.filter(Task.assigned_to == filters['assignedTo'])
    if filters.get('search'):
        query = query.filter(Task.title.icontains(filters['search'], autoescape=True))

    query = query.order_by(
        Task.priority_rank().desc(),
        Task.due_date.is_(None),
        Task.due_date.asc(),
        Task.id,
    )
    tasks, total, pagination = paginate(query, page, limit)

    return {
        'tasks': [t.to_dict(include_assignee=True) for t in tasks],
        'pagination': pagination,
        'total': total,
    }


def get_task(session, tenant_id, task_id):
    return get_task_in_tenant(session, tenant_id, task_id).to_dict(include_assignee=True)


def update_task_status(session, tenant_id, task_id, new_status, actor_id):
    """Move a task to any status; there is no enforced workflow order."""
    task = get_task_in_tenant(session, tenant_id, task_id)

    previous = task.status
    task.status = new_status
    session.commit()

    result = {'id': task.id, 'status': task.status, 'updatedAt': iso(task.updated_at)}
    audit_service.log_action(
        session,
        AuditAction.UPDATE_TASK_STATUS,
        tenant_id=tenant_id,
        user_id=actor_id,
        entity_type='task',
        entity_id=task.id,
        metadata={'from': previous, 'to': new_status},
    )
    return result


def update_task(session, tenant_id, task_id, data, actor_id):
    """Apply only the fields present in data; assignedTo/dueDate may be null."""
    task = get_task_in_tenant(session, tenant_id, task_id)

    if data.get('assignedTo') is not None:
        ensure_assignee_in_tenant(session, tenant_id, data['assignedTo'])

    changes = []
    for key, attr in UPDATABLE_FIELDS.items():
        if key in data:
            setattr(task, attr, data[key])
            changes.append(key)
    session.commit()

    result = task.to_dict()
    audit_service.log_action(
        session,
        AuditAction.UPDATE_TASK,
        tenant_id=tenant_id,
        user_id=actor_id,
        entity_type='task',
        entity_id=task.id,
        metadata={'changes': changes},
    )
    return result


def delete_task(session, tenant_id, task_id, actor_id):
    task = get_task_in_tenant(session, tenant_id, task_id)

    session.delete(task)
    session.commit()

    audit_service.log_action(
        session,
        AuditAction.DELETE_TASK,
        tenant_id=tenant_id,
        user_id=actor_id,
        entity_type='task',
        entity_id=task_id,
    )
    return {'success': True}
