"""
Tenant models - the multi-tenancy boundary for products and carts.
"""

import uuid

from sqlalchemy import Column, String, Uuid, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin, SoftDeleteMixin

DEFAULT_TENANT_TYPE = "default"
SIGNUP_TENANT_TYPE = "storefront"


class Tenant(TimestampMixin, SoftDeleteMixin, Base):
    """
    Logical partition of data (one storefront/account).

    Created on signup, or on first login when the user has none.
    """

    __tablename__ = "tenants"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Owner
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    tenant_type = Column(String(50), nullable=False, default=DEFAULT_TENANT_TYPE)

    # Relationships
    members = relationship("TenantUser", back_populates="tenant", lazy="dynamic")

    def __repr__(self):
        return f"<Tenant(id={self.id}, type='{self.tenant_type}')>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id) if self.user_id else None,
            "tenant_type": self.tenant_type,
            "dt_created": self.dt_created.isoformat() if self.dt_created else None,
        }


class TenantUser(TimestampMixin, Base):
    """Membership link between a user and a tenant."""

    __tablename__ = "tenant_users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    tenant = relationship("Tenant", back_populates="members")

    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", name="uq_tenant_users_tenant_user"),
    )

    def __repr__(self):
        return f"<TenantUser(tenant_id={self.tenant_id}, user_id={self.user_id})>"
