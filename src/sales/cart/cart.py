"""Cart aggregate (CQRS): what a shopper intends to buy before checkout.

A cart belongs either to a registered customer or to a guest session. Each
line snapshots the product's effective price when it is added. A percentage
coupon discount is kept in step with the subtotal whenever the lines change.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from sales.cart.events import (
    CartCleared,
    CartConverted,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartItemUpdated,
)
from sales.domain import sales
from sales.settings import money


class CartStatus(Enum):
    ACTIVE = "active"
    CONVERTED = "converted"


@sales.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    sku = String(required=True, max_length=64)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()

    @property
    def row_total(self):
        return money(self.price * self.quantity)


@sales.aggregate
class Cart:
    customer_id = Identifier()  # Nullable for guest carts
    session_id = String(max_length=255)  # Guest cart identification
    items = HasMany(CartItem)
    coupon_code = String(max_length=50)
    discount_percent = Float(default=0.0)
    discount_amount = Float(default=0.0)
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id=None, session_id=None):
        if bool(customer_id) == bool(session_id):
            raise ValidationError({"customer_id": ["A cart needs either a customer or a guest session, not both"]})

        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            session_id=session_id,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_active(self):
        return self.status == CartStatus.ACTIVE.value

    @property
    def subtotal(self):
        return money(sum(item.price * item.quantity for item in self.items))

    @property
    def items_count(self):
        return sum(item.quantity for item in self.items)

    def find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return item

    def _assert_active(self):
        if not self.is_active:
            raise ValidationError({"status": ["Cart has already been checked out"]})

    def _assert_stock(self, product, quantity):
        if not product.available_for(quantity):
            raise ValidationError(
                {"stock": [f"Only {product.quantity} units of {product.name} are available"]}
            )

    def _touch(self):
        if self.coupon_code:
            self.discount_amount = money(self.subtotal * self.discount_percent / 100)
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity):
        """Add ``quantity`` of a CatalogProduct, merging into an existing line."""
        self._assert_active()
        if not product.is_enabled:
            raise ValidationError({"availability": [f"Product {product.name} is not available"]})

        existing = next((i for i in self.items if str(i.product_id) == str(product.product_id)), None)
        in_cart = existing.quantity if existing else 0
        self._assert_stock(product, in_cart + quantity)

        if existing:
            existing.quantity = in_cart + quantity
            item = existing
        else:
            item = CartItem(
                product_id=product.product_id,
                sku=product.sku,
                name=product.name,
                price=product.effective_price(),
                quantity=quantity,
                added_at=datetime.now(UTC),
            )
            self.add_items(item)

        self._touch()
        self.raise_(
            CartItemAdded(
                cart_id=self.id,
                item_id=item.id,
                product_id=product.product_id,
                quantity=item.quantity,
                price=item.price,
            )
        )
        return item

    def update_item(self, item_id, quantity, product):
        self._assert_active()
        item = self.find_item(item_id)
        self._assert_stock(product, quantity)

        previous_quantity = item.quantity
        item.quantity = quantity
        self._touch()

        self.raise_(
            CartItemUpdated(
                cart_id=self.id,
                item_id=item.id,
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, item_id):
        self._assert_active()
        item = self.find_item(item_id)
        self.remove_items(item)
        if not self.items:
            self._drop_coupon()
        self._touch()

        self.raise_(CartItemRemoved(cart_id=self.id, item_id=item_id, product_id=item.product_id))

    def clear(self):
        self._assert_active()
        for item in list(self.items):
            self.remove_items(item)
        self._drop_coupon()
        self._touch()

        self.raise_(CartCleared(cart_id=self.id))

    # -------------------------------------------------------------------
    # Coupons
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon_code, percentage):
        self._assert_active()
        if not self.items:
            raise ValidationError({"cart": ["Cart is empty"]})

        self.coupon_code = coupon_code.strip().upper()
        self.discount_percent = percentage
        self._touch()

        self.raise_(
            CartCouponApplied(
                cart_id=self.id,
                coupon_code=self.coupon_code,
                discount_amount=self.discount_amount,
            )
        )

    def remove_coupon(self):
        self._assert_active()
        if not self.coupon_code:
            raise ValidationError({"coupon_code": ["No coupon applied"]})

        coupon_code = self.coupon_code
        self._drop_coupon()
        self._touch()

        self.raise_(CartCouponRemoved(cart_id=self.id, coupon_code=coupon_code))

    def _drop_coupon(self):
        self.coupon_code = None
        self.discount_percent = 0.0
        self.discount_amount = 0.0

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def convert(self, order_id):
        if not self.is_active or not self.items:
            raise ValidationError({"cart": ["Cart is empty"]})

        self.status = CartStatus.CONVERTED.value
        self.updated_at = datetime.now(UTC)

        self.raise_(CartConverted(cart_id=self.id, order_id=order_id))
