"""
Cart and cart item queries.
"""

from typing import List, Optional
import uuid

from sqlalchemy import desc
from sqlalchemy.orm import Session

from storefront.database.models import Cart, CartItem, CartStatus


class CartRepository:

    def __init__(self, db: Session):
        self.db = db

    def _not_deleted(self):
        return self.db.query(Cart).filter(Cart.dt_deleted.is_(None))

    def find_active_for_tenant(self, tenant_id: uuid.UUID) -> Optional[Cart]:
        return (
            self._not_deleted()
            .filter(Cart.tenant_id == tenant_id, Cart.status == CartStatus.ACTIVE)
            .order_by(desc(Cart.dt_created))
            .first()
        )

    def find_for_tenant(self, cart_id: uuid.UUID, tenant_id: uuid.UUID) -> Optional[Cart]:
        return (
            self._not_deleted()
            .filter(Cart.id == cart_id, Cart.tenant_id == tenant_id)
            .first()
        )

    def list_for_tenant(self, tenant_id: uuid.UUID) -> List[Cart]:
        return (
            self._not_deleted()
            .filter(Cart.tenant_id == tenant_id)
            .order_by(desc(Cart.dt_updated), desc(Cart.id))
            .all()
        )

    def add(self, cart: Cart) -> Cart:
        self.db.add(cart)
        self.db.flush()
        return cart

    def find_item_by_key(
        self,
        cart_id: uuid.UUID,
        product_id: uuid.UUID,
        variant_id: Optional[uuid.UUID],
        attributes_hash: str,
    ) -> Optional[CartItem]:
        """Live item matching the upsert key inside a cart."""
        query = self.db.query(CartItem).filter(
            CartItem.cart_id == cart_id,
            CartItem.product_id == product_id,
            CartItem.attributes_hash == attributes_hash,
            CartItem.dt_deleted.is_(None),
        )
        if variant_id is None:
            query = query.filter(CartItem.variant_id.is_(None))
        else:
            query = query.filter(CartItem.variant_id == variant_id)
        return query.first()

    def find_item_for_tenant(self, item_id: uuid.UUID, tenant_id: uuid.UUID) -> Optional[CartItem]:
        """Live item whose cart belongs to the tenant and is not deleted."""
        return (
            self.db.query(CartItem)
            .join(Cart, Cart.id == CartItem.cart_id)
            .filter(
                CartItem.id == item_id,
                CartItem.dt_deleted.is_(None),
                Cart.tenant_id == tenant_id,
                Cart.dt_deleted.is_(None),
            )
            .first()
        )

    def add_item(self, cart: Cart, item: CartItem) -> CartItem:
        cart.items.append(item)
        self.db.flush()
        return item
