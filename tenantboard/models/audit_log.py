"""
Audit Log model for tracking mutating actions in the system.

Append-only: rows are written by the audit service and never updated or
deleted by application code. tenant_id/user_id are plain columns so the
history outlives the rows it refers to.
"""
import enum
import json
import uuid

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func

from tenantboard.database import Base
from tenantboard.utils.formatters import iso


class AuditAction(enum.Enum):
    """Enumeration of auditable actions."""
    # Tenants
    REGISTER_TENANT = "REGISTER_TENANT"
    UPDATE_TENANT = "UPDATE_TENANT"

    # User management
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    DELETE_USER = "DELETE_USER"

    # Projects
    CREATE_PROJECT = "CREATE_PROJECT"
    UPDATE_PROJECT = "UPDATE_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"

    # Tasks
    CREATE_TASK = "CREATE_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    UPDATE_TASK_STATUS = "UPDATE_TASK_STATUS"
    DELETE_TASK = "DELETE_TASK"


class AuditLog(Base):
    """
    Audit log entry.
    Multi-tenant: filtered by tenant_id; system-wide events use a null tenant.
    """
    __tablename__ = 'audit_logs'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), nullable=True, index=True)
    user_id = Column(String(36), nullable=True)
    action = Column(String(50), nullable=False, index=True)
    entity_type = Column(String(50))  # e.g., 'project', 'task', 'user'
    entity_id = Column(String(36))
    ip_address = Column(String(45))  # IPv4 or IPv6
    details = Column('metadata', Text)  # JSON encoded
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    def __repr__(self):
        return f"<AuditLog {self.action} by user {self.user_id} at {self.created_at}>"

    def metadata_dict(self):
        """Decoded metadata; values that are not JSON come back as the raw string."""
        if not self.details:
            return None
        try:
            return json.loads(self.details)
        except ValueError:
            return self.details

    def to_dict(self):
        return {
            'id': self.id,
            'tenantId': self.tenant_id,
            'userId': self.user_id,
            'action': self.action,
            'entityType': self.entity_type,
            'entityId': self.entity_id,
            'ipAddress': self.ip_address,
            'metadata': self.metadata_dict(),
            'createdAt': iso(self.created_at),
        }
