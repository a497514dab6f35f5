"""Tenant model - an isolated customer organization (unit of data partitioning)."""
import enum
import uuid

from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tenantboard.database import Base
from tenantboard.utils.formatters import iso


class TenantStatus(enum.Enum):
    """Lifecycle status of a tenant."""
    ACTIVE = 'active'
    SUSPENDED = 'suspended'
    TRIAL = 'trial'


class SubscriptionPlan(enum.Enum):
    """Subscription tiers."""
    FREE = 'free'
    PRO = 'pro'
    ENTERPRISE = 'enterprise'


class Tenant(Base):
    """Tenant model - each customer organization."""

    __tablename__ = 'tenants'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    subdomain = Column(String(63), nullable=False, unique=True)
    status = Column(String(20), nullable=False, default=TenantStatus.ACTIVE.value)
    subscription_plan = Column(String(20), nullable=False, default=SubscriptionPlan.FREE.value)
    max_users = Column(Integer, nullable=False, default=10)
    max_projects = Column(Integer, nullable=False, default=5)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    users = relationship('User', back_populates='tenant')
    projects = relationship('Project', back_populates='tenant')

    def __repr__(self):
        return f"<Tenant(id={self.id}, subdomain='{self.subdomain}', name='{self.name}')>"

    def to_summary(self):
        """Short representation embedded in auth responses."""
        return {
            'id': self.id,
            'name': self.name,
            'subdomain': self.subdomain,
            'subscriptionPlan': self.subscription_plan,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'subdomain': self.subdomain,
            'status': self.status,
            'subscriptionPlan': self.subscription_plan,
            'maxUsers': self.max_users,
            'maxProjects': self.max_projects,
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at),
        }
