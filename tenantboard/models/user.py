"""User model - tenant members and the tenantless super administrator."""
import enum
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tenantboard.database import Base
from tenantboard.utils.formatters import iso
from tenantboard.utils.security import hash_password, verify_password


class UserRole(enum.Enum):
    """User roles, lowest privilege first."""
    USER = 'user'
    TENANT_ADMIN = 'tenant_admin'
    SUPER_ADMIN = 'super_admin'


class User(Base):
    """User model - belongs to one tenant (or none, for super_admin)."""

    __tablename__ = 'users'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'email', name='uq_users_tenant_email'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), ForeignKey('tenants.id'), nullable=True, index=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    tenant = relationship('Tenant', back_populates='users')

    def set_password(self, password):
        """Set password hash."""
        self.password_hash = hash_password(password)

    def check_password(self, password):
        """Check password against hash."""
        if not self.password_hash:
            return False
        return verify_password(password, self.password_hash)

    def is_tenant_admin(self):
        return self.role == UserRole.TENANT_ADMIN.value

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

    def to_summary(self):
        return {
            'id': self.id,
            'email': self.email,
            'fullName': self.full_name,
            'role': self.role,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'tenantId': self.tenant_id,
            'email': self.email,
            'fullName': self.full_name,
            'role': self.role,
            'isActive': self.is_active,
            'createdAt': iso(self.created_at),
        }
