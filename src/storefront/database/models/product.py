"""
Product model - tenant-scoped catalog item.
"""

import uuid

from sqlalchemy import Column, String, Integer, Boolean, Text, Uuid, JSON, ForeignKey, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import JSONB

from .base import Base, TimestampMixin, SoftDeleteMixin


class Product(TimestampMixin, SoftDeleteMixin, Base):
    """
    Catalog item owned by a tenant.

    Prices are integer cents. stock_quantity caps how many units a cart
    may hold.
    """

    __tablename__ = "products"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Tenant
    tenant_id = Column(Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)

    # Catalog data
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    short_description = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    price_cents = Column(Integer, nullable=False, default=0)
    stock_quantity = Column(Integer, nullable=False, default=0)
    attributes = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        Index("ix_products_tenant_created", "tenant_id", "dt_created"),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price_cents={self.price_cents})>"
