"""
Product catalog service.

Reads are open to every authenticated caller; writes are limited to
products owned by the caller's tenant.
"""

from typing import Any, Dict, List, Tuple
import uuid

from sqlalchemy.orm import Session

from storefront.database.models import Product
from storefront.repositories import ProductRepository, ProductFilters
from storefront.utils.exceptions import NotFoundError, ValidationError
from storefront.utils.formatter import slugify
from storefront.utils.logger import get_logger
from storefront.utils.pagination import clamp
from storefront.utils.transaction import transaction_scope

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

UPDATABLE_FIELDS = (
    "name", "short_description", "description", "price_cents",
    "stock_quantity", "attributes", "is_active",
)


class ProductService:

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)

    def list_products(self, filters: ProductFilters, limit: int = DEFAULT_PAGE_SIZE,
                      offset: int = 0) -> Tuple[List[Product], int, int, int]:
        """
        List catalog products.

        limit is clamped to 1-100 and offset to >= 0.

        Returns:
            (products, total, limit, offset) with the effective paging values
        """
        if (filters.min_price is not None and filters.max_price is not None
                and filters.min_price > filters.max_price):
            raise ValidationError("min_price cannot be greater than max_price")

        limit = clamp(limit, 1, MAX_PAGE_SIZE)
        offset = max(offset, 0)
        products, total = self.products.list(filters, limit, offset)
        return products, total, limit, offset

    def create_product(self, tenant_id: uuid.UUID, data: Dict[str, Any]) -> Product:
        with transaction_scope(self.db):
            product = Product(
                tenant_id=tenant_id,
                name=data["name"],
                slug=slugify(data["name"]),
                short_description=data.get("short_description"),
                description=data.get("description"),
                price_cents=data["price_cents"],
                stock_quantity=data.get("stock_quantity", 0),
                attributes=data.get("attributes") or {},
                is_active=data.get("is_active", True),
            )
            self.products.add(product)

        logger.info(f"Created product {product.id} ({product.slug}) for tenant {tenant_id}")
        return product

    def get_product(self, product_id: uuid.UUID) -> Product:
        product = self.products.find_available(product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    def update_product(self, tenant_id: uuid.UUID, product_id: uuid.UUID,
                       changes: Dict[str, Any]) -> Product:
        """Apply a partial update; a new name regenerates the slug."""
        product = self.products.find_for_tenant(product_id, tenant_id)
        if product is None:
            raise NotFoundError("Product not found")

        with transaction_scope(self.db):
            for field in UPDATABLE_FIELDS:
                if field in changes and changes[field] is not None:
                    setattr(product, field, changes[field])
            if changes.get("name"):
                product.slug = slugify(changes["name"])

        logger.info(f"Updated product {product.id}")
        return product

    def delete_product(self, tenant_id: uuid.UUID, product_id: uuid.UUID) -> None:
        product = self.products.find_for_tenant(product_id, tenant_id)
        if product is None:
            raise NotFoundError("Product not found")

        with transaction_scope(self.db):
            product.soft_delete()

        logger.info(f"Deleted product {product_id}")
