"""
Product catalog queries.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import uuid

from sqlalchemy import desc
from sqlalchemy.orm import Session

from storefront.database.models import Product


def escape_like(value: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class ProductFilters:
    """Optional catalog filters. Prices are in cents."""
    name: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    is_active: Optional[bool] = None
    tenant_id: Optional[uuid.UUID] = None


class ProductRepository:

    def __init__(self, db: Session):
        self.db = db

    def _not_deleted(self):
        return self.db.query(Product).filter(Product.dt_deleted.is_(None))

    def find_available(self, product_id: uuid.UUID) -> Optional[Product]:
        """Active, non-deleted product (what shoppers may see and buy)."""
        return (
            self._not_deleted()
            .filter(Product.id == product_id, Product.is_active.is_(True))
            .first()
        )

    def find_for_tenant(self, product_id: uuid.UUID, tenant_id: uuid.UUID) -> Optional[Product]:
        """Non-deleted product owned by the tenant, active or not."""
        return (
            self._not_deleted()
            .filter(Product.id == product_id, Product.tenant_id == tenant_id)
            .first()
        )

    def list(self, filters: ProductFilters, limit: int, offset: int) -> Tuple[List[Product], int]:
        query = self._not_deleted()

        if filters.name:
            query = query.filter(Product.name.ilike(f"%{escape_like(filters.name)}%", escape="\\"))
        if filters.min_price is not None:
            query = query.filter(Product.price_cents >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(Product.price_cents <= filters.max_price)
        if filters.is_active is not None:
            query = query.filter(Product.is_active.is_(filters.is_active))
        if filters.tenant_id is not None:
            query = query.filter(Product.tenant_id == filters.tenant_id)

        total = query.count()
        products = (
            query.order_by(desc(Product.dt_created), desc(Product.id))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return products, total

    def add(self, product: Product) -> Product:
        self.db.add(product)
        self.db.flush()
        return product
