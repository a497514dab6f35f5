"""Task model - unit of work inside a project."""
import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, case
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tenantboard.database import Base
from tenantboard.utils.formatters import iso


class TaskStatus(enum.Enum):
    TODO = 'todo'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


class TaskPriority(enum.Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


PRIORITY_RANK = {
    TaskPriority.LOW.value: 1,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.HIGH.value: 3,
}


class Task(Base):
    """Task model - shares its project's tenant."""

    __tablename__ = 'tasks'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), ForeignKey('tenants.id'), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=TaskStatus.TODO.value)
    priority = Column(String(10), nullable=False, default=TaskPriority.MEDIUM.value)
    assigned_to = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    project = relationship('Project', back_populates='tasks')
    assignee = relationship('User', foreign_keys=[assigned_to])

    @classmethod
    def priority_rank(cls):
        """SQL expression ranking priorities so that high sorts above low."""
        return case(PRIORITY_RANK, value=cls.priority, else_=0)

    def __repr__(self):
        return f"<Task(id={self.id}, project_id={self.project_id}, title='{self.title}')>"

    def to_dict(self, include_assignee=False):
        data = {
            'id': self.id,
            'tenantId': self.tenant_id,
            'projectId': self.project_id,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'priority': self.priority,
            'dueDate': iso(self.due_date),
            'assignedTo': self.assigned_to,
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at),
        }
        if include_assignee:
            data['assignee'] = None
            if self.assignee is not None:
                data['assignee'] = {
                    'id': self.assignee.id,
                    'fullName': self.assignee.full_name,
                    'email': self.assignee.email,
                }
        return data
