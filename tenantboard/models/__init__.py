"""Models package - exports all SQLAlchemy models."""
from tenantboard.models.tenant import Tenant, TenantStatus, SubscriptionPlan
from tenantboard.models.user import User, UserRole
from tenantboard.models.project import Project, ProjectStatus
from tenantboard.models.task import Task, TaskStatus, TaskPriority
from tenantboard.models.audit_log import AuditLog, AuditAction

__all__ = [
    'Tenant', 'TenantStatus', 'SubscriptionPlan',
    'User', 'UserRole',
    'Project', 'ProjectStatus',
    'Task', 'TaskStatus', 'TaskPriority',
    'AuditLog', 'AuditAction',
]
