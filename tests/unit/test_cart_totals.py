"""
Unit tests for cart line and total recomputation
"""
import uuid

import pytest

from storefront.database.models import Cart, CartItem, CartStatus, Product, utcnow
from storefront.services.cart_service import (
    check_stock, product_snapshot, quantity_in_cart, recompute_totals
)
from storefront.utils.exceptions import ValidationError


def make_item(unit_price, quantity, discount=0, tax=0, deleted=False):
    item = CartItem(
        product_id=uuid.uuid4(),
        unit_price_cents=unit_price,
        quantity=quantity,
        line_discount_total_cents=discount,
        line_tax_total_cents=tax,
        attributes_snapshot={},
        attributes_hash="x",
    )
    if deleted:
        item.dt_deleted = utcnow()
    return item


class TestRecomputeTotals:

    def test_line_total(self):
        item = make_item(1000, 3, discount=200, tax=50)
        assert item.compute_line_total() == 2850

    def test_totals_from_live_items(self):
        cart = Cart(status=CartStatus.ACTIVE, currency="BRL", shipping_total_cents=500)
        cart.items = [
            make_item(1990, 2),
            make_item(1000, 1, discount=100, tax=30),
            make_item(9999, 9, deleted=True),
        ]

        recompute_totals(cart)

        assert cart.subtotal_cents == 4980
        assert cart.discount_total_cents == 100
        assert cart.tax_total_cents == 30
        assert cart.grand_total_cents == 4980 - 100 + 30 + 500
        assert [i.line_total_cents for i in cart.active_items] == [3980, 930]

    def test_empty_cart_is_zero(self):
        cart = Cart(status=CartStatus.ACTIVE, currency="BRL", shipping_total_cents=0)
        cart.items = []

        recompute_totals(cart)

        assert cart.subtotal_cents == 0
        assert cart.grand_total_cents == 0


class TestStockAndSnapshot:

    def setup_method(self):
        self.product = Product(
            id=uuid.uuid4(),
            name="Blue Mug",
            slug="blue-mug",
            price_cents=1990,
            stock_quantity=3,
            attributes={"color": "blue"},
        )

    def test_check_stock_allows_exact_quantity(self):
        check_stock(self.product, 3)

    def test_check_stock_rejects_excess(self):
        with pytest.raises(ValidationError) as exc_info:
            check_stock(self.product, 4)
        assert exc_info.value.details["available"] == 3

    def test_check_stock_counts_other_lines(self):
        check_stock(self.product, 1, in_cart=2)
        with pytest.raises(ValidationError) as exc_info:
            check_stock(self.product, 2, in_cart=2)
        assert exc_info.value.details["requested"] == 4

    def test_quantity_in_cart_sums_live_lines_of_product(self):
        first = make_item(1990, 2)
        first.product_id = self.product.id
        second = make_item(1990, 1)
        second.product_id = self.product.id
        removed = make_item(1990, 5, deleted=True)
        removed.product_id = self.product.id
        cart = Cart(status=CartStatus.ACTIVE, currency="BRL")
        cart.items = [first, second, removed, make_item(500, 7)]

        assert quantity_in_cart(cart, self.product.id) == 3
        assert quantity_in_cart(cart, self.product.id, exclude=first) == 1

    def test_snapshot(self):
        snapshot = product_snapshot(self.product)
        assert snapshot["name"] == "Blue Mug"
        assert snapshot["price_cents"] == 1990
        assert snapshot["attributes"] == {"color": "blue"}
