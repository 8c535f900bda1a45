"""
Cart models - a tenant's shopping cart and its line items.

Money columns are integer cents. Totals are recomputed from the
non-deleted items whenever an item changes.
"""

import enum
import uuid

from sqlalchemy import (
    Column, String, Integer, DateTime, Uuid, JSON, ForeignKey, Index, Enum as SQLEnum, text
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin, SoftDeleteMixin

ACTIVE_CART_CONDITION = "status = 'ACTIVE' AND dt_deleted IS NULL"


class CartStatus(str, enum.Enum):
    """Lifecycle states of a cart."""
    ACTIVE = "ACTIVE"
    CHECKOUT_IN_PROGRESS = "CHECKOUT_IN_PROGRESS"
    CONVERTED_TO_ORDER = "CONVERTED_TO_ORDER"
    ABANDONED = "ABANDONED"
    CANCELLED = "CANCELLED"


class Cart(TimestampMixin, SoftDeleteMixin, Base):
    """
    Shopping cart. A tenant has at most one ACTIVE cart.

    ``version`` is the optimistic lock counter: a concurrent writer that
    loaded an older version fails with StaleDataError on flush.
    """

    __tablename__ = "carts"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Ownership
    tenant_id = Column(Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    status = Column(SQLEnum(CartStatus, name="cart_status"), nullable=False, default=CartStatus.ACTIVE)
    currency = Column(String(3), nullable=False, default="BRL")

    # Totals (cents)
    subtotal_cents = Column(Integer, nullable=False, default=0)
    discount_total_cents = Column(Integer, nullable=False, default=0)
    tax_total_cents = Column(Integer, nullable=False, default=0)
    shipping_total_cents = Column(Integer, nullable=False, default=0)
    grand_total_cents = Column(Integer, nullable=False, default=0)

    version = Column(Integer, nullable=False)
    expires_at = Column(DateTime, nullable=True)

    # Relationships
    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.dt_created",
    )

    __table_args__ = (
        Index("ix_carts_tenant_status", "tenant_id", "status"),
        # One live ACTIVE cart per tenant
        Index(
            "uq_carts_tenant_active",
            "tenant_id",
            unique=True,
            postgresql_where=text(ACTIVE_CART_CONDITION),
            sqlite_where=text(ACTIVE_CART_CONDITION),
        ),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Cart(id={self.id}, tenant_id={self.tenant_id}, status={self.status.value})>"

    @property
    def active_items(self):
        return [item for item in self.items if item.dt_deleted is None]


class CartItem(TimestampMixin, SoftDeleteMixin, Base):
    """
    Line item: a product snapshot, a quantity and the computed line total.

    Items are keyed inside a cart by (product_id, variant_id,
    attributes_hash); adding the same key again increases the quantity.
    """

    __tablename__ = "cart_items"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    cart_id = Column(Uuid, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("products.id"), nullable=False, index=True)
    variant_id = Column(Uuid, nullable=True)

    # Pricing (cents)
    unit_price_cents = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    line_discount_total_cents = Column(Integer, nullable=False, default=0)
    line_tax_total_cents = Column(Integer, nullable=False, default=0)
    line_total_cents = Column(Integer, nullable=False, default=0)

    # Snapshot of the product at the time it was added
    attributes_snapshot = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)
    attributes_hash = Column(String(64), nullable=False)

    # Relationships
    cart = relationship("Cart", back_populates="items")

    __table_args__ = (
        Index("ix_cart_items_key", "cart_id", "product_id", "variant_id", "attributes_hash"),
    )

    def __repr__(self):
        return f"<CartItem(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"

    def compute_line_total(self) -> int:
        """unit_price * quantity - line discount + line tax."""
        self.line_total_cents = (
            self.unit_price_cents * self.quantity
            - (self.line_discount_total_cents or 0)
            + (self.line_tax_total_cents or 0)
        )
        return self.line_total_cents
