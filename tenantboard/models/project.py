"""Project model - tenant-owned container of tasks."""
import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tenantboard.database import Base
from tenantboard.utils.formatters import iso


class ProjectStatus(enum.Enum):
    ACTIVE = 'active'
    ARCHIVED = 'archived'
    COMPLETED = 'completed'


class Project(Base):
    """Project model - belongs to exactly one tenant."""

    __tablename__ = 'projects'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), ForeignKey('tenants.id'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=ProjectStatus.ACTIVE.value)
    created_by = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    tenant = relationship('Tenant', back_populates='projects')
    creator = relationship('User', foreign_keys=[created_by])
    # Deleting a project deletes its tasks
    tasks = relationship(
        'Task',
        back_populates='project',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Project(id={self.id}, tenant_id={self.tenant_id}, name='{self.name}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'tenantId': self.tenant_id,
            'name': self.name,
            'description': self.description,
            'status': self.status,
            'createdBy': self.created_by,
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at),
        }
