"""
Cart service: the active cart of a tenant and its line items.

Every item change goes through the same steps:
1. resolve the product (active, not deleted)
2. resolve the item by its upsert key, or create it
3. check the resulting quantity against product stock
4. refresh the unit price and snapshot, recompute the line total
5. recompute cart totals from the live items and bump the version
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional
import uuid

from sqlalchemy.orm import Session

from storefront.database.models import Cart, CartItem, CartStatus, Product, utcnow
from storefront.monitoring import get_metrics
from storefront.repositories import CartRepository, ProductRepository
from storefront.utils.config import Settings, get_settings
from storefront.utils.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.utils.formatter import attributes_hash, format_cents
from storefront.utils.logger import get_logger
from storefront.utils.transaction import transaction_scope

logger = get_logger(__name__)


def product_snapshot(product: Product) -> Dict[str, Any]:
    """What the shopper saw when the item was added."""
    return {
        "name": product.name,
        "slug": product.slug,
        "short_description": product.short_description,
        "price_cents": product.price_cents,
        "attributes": product.attributes or {},
    }


def recompute_totals(cart: Cart) -> Cart:
    """
    Recompute cart totals from its live items.

    subtotal = sum(unit_price * quantity)
    grand_total = subtotal - discount_total + tax_total + shipping_total
    """
    items = cart.active_items
    for item in items:
        item.compute_line_total()

    cart.subtotal_cents = sum(item.unit_price_cents * item.quantity for item in items)
    cart.discount_total_cents = sum(item.line_discount_total_cents or 0 for item in items)
    cart.tax_total_cents = sum(item.line_tax_total_cents or 0 for item in items)
    cart.grand_total_cents = (
        cart.subtotal_cents
        - cart.discount_total_cents
        + cart.tax_total_cents
        + (cart.shipping_total_cents or 0)
    )
    # Touch the row so the version counter moves even when totals are unchanged
    cart.dt_updated = utcnow()
    return cart


def quantity_in_cart(cart: Cart, product_id: uuid.UUID, exclude: Optional[CartItem] = None) -> int:
    """Units of a product held by the cart's live lines, other than ``exclude``."""
    return sum(
        item.quantity for item in cart.active_items
        if item.product_id == product_id and item is not exclude
    )


def check_stock(product: Product, quantity: int, in_cart: int = 0) -> None:
    """Stock covers ``quantity`` on top of the ``in_cart`` units held by other lines."""
    requested = quantity + in_cart
    if requested > product.stock_quantity:
        raise ValidationError(
            "Insufficient stock",
            {"product_id": str(product.id), "requested": requested, "available": product.stock_quantity},
        )


class CartService:

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.carts = CartRepository(db)
        self.products = ProductRepository(db)
        self.metrics = get_metrics()

    # Carts

    def get_active_cart(self, tenant_id: uuid.UUID) -> Cart:
        cart = self._find_active(tenant_id)
        if cart is None:
            raise NotFoundError("No active cart for this tenant")
        return cart

    def list_carts(self, tenant_id: uuid.UUID) -> List[Cart]:
        return self.carts.list_for_tenant(tenant_id)

    def create_cart(self, tenant_id: uuid.UUID, user_id: uuid.UUID) -> Cart:
        """
        Open a new ACTIVE cart.

        Raises:
            ConflictError: The tenant already has an active cart
        """
        if self._find_active(tenant_id) is not None:
            raise ConflictError("An active cart already exists for this tenant")

        with transaction_scope(self.db):
            cart = self._new_cart(tenant_id, user_id)

        self.metrics.track_cart_operation("create")
        logger.info(f"Created cart {cart.id} for tenant {tenant_id}")
        return cart

    def delete_cart(self, tenant_id: uuid.UUID, cart_id: uuid.UUID) -> None:
        cart = self.carts.find_for_tenant(cart_id, tenant_id)
        if cart is None:
            raise NotFoundError("Cart not found")

        with transaction_scope(self.db):
            cart.status = CartStatus.CANCELLED
            cart.soft_delete()

        self.metrics.track_cart_operation("delete")
        logger.info(f"Cancelled cart {cart_id}")

    # Items

    def add_item(self, tenant_id: uuid.UUID, user_id: uuid.UUID, product_id: uuid.UUID,
                 quantity: int, variant_id: Optional[uuid.UUID] = None) -> Cart:
        """
        Add a product to the tenant's active cart, creating the cart if needed.

        Adding a product already in the cart (same variant and attributes)
        increases that line's quantity instead of adding a new line.
        """
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        product = self.products.find_available(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        with transaction_scope(self.db):
            cart = self._find_active(tenant_id) or self._new_cart(tenant_id, user_id)

            key_hash = attributes_hash(product.attributes)
            item = self.carts.find_item_by_key(cart.id, product.id, variant_id, key_hash)
            new_quantity = quantity + (item.quantity if item else 0)
            check_stock(product, new_quantity, quantity_in_cart(cart, product.id, exclude=item))

            if item is None:
                item = CartItem(
                    product_id=product.id,
                    variant_id=variant_id,
                    unit_price_cents=product.price_cents,
                    quantity=new_quantity,
                    attributes_snapshot=product_snapshot(product),
                    attributes_hash=key_hash,
                )
                self.carts.add_item(cart, item)
            else:
                self._refresh_item(item, product, new_quantity)

            recompute_totals(cart)

        self.metrics.track_cart_operation("add_item")
        logger.info(
            f"Cart {cart.id}: product {product.id} x{new_quantity}, "
            f"total {format_cents(cart.grand_total_cents, cart.currency)}"
        )
        return cart

    def update_item_quantity(self, tenant_id: uuid.UUID, item_id: uuid.UUID, quantity: int) -> Cart:
        """Set an item's quantity; zero removes the item."""
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative")

        item = self._find_mutable_item(tenant_id, item_id)
        cart = item.cart

        with transaction_scope(self.db):
            if quantity == 0:
                item.soft_delete()
            else:
                product = self.products.find_available(item.product_id)
                if product is None:
                    raise NotFoundError("Product not found")
                check_stock(product, quantity, quantity_in_cart(cart, product.id, exclude=item))
                self._refresh_item(item, product, quantity)

            recompute_totals(cart)

        self.metrics.track_cart_operation("update_item")
        return cart

    def remove_item(self, tenant_id: uuid.UUID, item_id: uuid.UUID) -> Cart:
        item = self._find_mutable_item(tenant_id, item_id)
        cart = item.cart

        with transaction_scope(self.db):
            item.soft_delete()
            recompute_totals(cart)

        self.metrics.track_cart_operation("remove_item")
        return cart

    # Helpers

    def _find_active(self, tenant_id: uuid.UUID) -> Optional[Cart]:
        """Active cart, expiring it first when past expires_at."""
        cart = self.carts.find_active_for_tenant(tenant_id)
        if cart is not None and self._expire_if_due(cart):
            return None
        return cart

    def _expire_if_due(self, cart: Cart) -> bool:
        if cart.expires_at is None or cart.expires_at > utcnow():
            return False
        with transaction_scope(self.db):
            cart.status = CartStatus.ABANDONED
        logger.info(f"Cart {cart.id} expired and was marked abandoned")
        self.metrics.track_cart_operation("abandon")
        return True

    def _new_cart(self, tenant_id: uuid.UUID, user_id: uuid.UUID) -> Cart:
        cart = Cart(
            tenant_id=tenant_id,
            user_id=user_id,
            status=CartStatus.ACTIVE,
            currency=self.settings.cart_currency,
            expires_at=utcnow() + timedelta(hours=self.settings.cart_ttl_hours),
        )
        return self.carts.add(cart)

    def _find_mutable_item(self, tenant_id: uuid.UUID, item_id: uuid.UUID) -> CartItem:
        item = self.carts.find_item_for_tenant(item_id, tenant_id)
        if item is None:
            raise NotFoundError("Cart item not found")
        if item.cart.status == CartStatus.ACTIVE:
            self._expire_if_due(item.cart)
        if item.cart.status != CartStatus.ACTIVE:
            raise ConflictError("Cart is not active", {"status": item.cart.status.value})
        return item

    @staticmethod
    def _refresh_item(item: CartItem, product: Product, quantity: int) -> None:
        item.quantity = quantity
        item.unit_price_cents = product.price_cents
        item.attributes_snapshot = product_snapshot(product)
        item.compute_line_total()
