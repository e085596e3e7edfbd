"""
Tenant and user models.

Just the data structure - no business logic or class methods.
"""

from sqlalchemy import Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from .db_base import TimestampMixin, UUIDMixin
from .db_config import Base


class Tenant(Base, UUIDMixin, TimestampMixin):
    """An isolated organization; owns users, categories and tickets."""

    __tablename__ = "tenant"

    name = Column(String(200), nullable=False)

    users = relationship("User", back_populates="tenant")


class User(Base, UUIDMixin, TimestampMixin):
    """A tenant member. Email is unique across all tenants."""

    __tablename__ = "app_user"

    email = Column(String(320), nullable=False, unique=True)
    name = Column(String(200), nullable=True)
    password_hash = Column(String(255), nullable=False)
    tenant_id = Column(String(36), ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False)

    tenant = relationship("Tenant", back_populates="users")

    __table_args__ = (Index("ix_app_user_tenant", "tenant_id"),)

    @property
    def display_name(self) -> str:
        return self.name or self.email

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', email='{self.email}', tenant_id='{self.tenant_id}')>"
