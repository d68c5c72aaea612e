"""Product aggregate root: what is for sale, at what price, and how many are on hand."""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from catalog.domain import catalog


class ProductStatus(Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


def slugify(value):
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").lower()).strip("-")
    return slug or None


@catalog.aggregate
class Product:
    """A sellable catalog item.

    Stock is tracked as a single on-hand ``quantity``. Products with
    ``track_inventory`` switched off (digital goods, made-to-order items)
    are always available and their quantity is never decremented.
    """

    sku: String(required=True, max_length=64, unique=True)
    name: String(required=True, max_length=255)
    slug: String(max_length=255)
    description: Text()
    category_id: Identifier()
    price: Float(required=True, min_value=0.01)
    special_price: Float()
    quantity: Integer(default=0, min_value=0)
    track_inventory: Boolean(default=True)
    status: String(choices=ProductStatus, default=ProductStatus.ENABLED.value)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def special_price_must_undercut_price(self):
        if self.special_price is None:
            return
        if self.special_price <= 0:
            raise ValidationError({"special_price": ["Special price must be greater than zero"]})
        if self.special_price >= self.price:
            raise ValidationError({"special_price": ["Special price must be lower than the regular price"]})

    @classmethod
    def add(
        cls,
        sku,
        name,
        price,
        special_price=None,
        quantity=0,
        track_inventory=True,
        category_id=None,
        description=None,
    ):
        from catalog.product.events import ProductAdded

        now = datetime.now(UTC)
        product = cls(
            sku=sku,
            name=name,
            slug=slugify(name),
            description=description,
            category_id=category_id,
            price=price,
            special_price=special_price,
            quantity=quantity or 0,
            track_inventory=track_inventory,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=product.id,
                sku=sku,
                name=name,
                slug=product.slug,
                category_id=category_id,
                price=product.price,
                special_price=product.special_price,
                quantity=product.quantity,
                track_inventory=product.track_inventory,
                status=product.status,
                added_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_enabled(self):
        return self.status == ProductStatus.ENABLED.value

    def effective_price(self):
        return self.special_price if self.special_price is not None else self.price

    def can_fulfil(self, quantity):
        if not self.is_enabled:
            return False
        return not self.track_inventory or self.quantity >= quantity

    # -------------------------------------------------------------------
    # Details and pricing
    # -------------------------------------------------------------------
    def update_details(self, name=None, description=None, category_id=None):
        from catalog.product.events import ProductDetailsUpdated

        if name is not None:
            self.name = name
            self.slug = slugify(name)
        if description is not None:
            self.description = description
        if category_id is not None:
            self.category_id = category_id
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductDetailsUpdated(
                product_id=self.id,
                name=self.name,
                slug=self.slug,
                description=self.description,
                category_id=self.category_id,
            )
        )

    def change_price(self, price, special_price=None):
        from catalog.product.events import ProductPriceChanged

        previous_final_price = self.effective_price()
        with atomic_change(self):
            self.price = price
            self.special_price = special_price
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPriceChanged(
                product_id=self.id,
                price=price,
                special_price=special_price,
                previous_final_price=previous_final_price,
                final_price=self.effective_price(),
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def receive_stock(self, quantity):
        self._assert_positive(quantity)
        self._change_quantity(self.quantity + quantity, "received")

    def deduct_stock(self, quantity, allow_shortfall=False):
        """Take ``quantity`` units off the shelf.

        Orders that already moved into processing cannot be refused, so their
        deductions pass ``allow_shortfall`` and the quantity bottoms out at zero.
        Returns the number of units that were missing.
        """
        self._assert_positive(quantity)
        if not self.track_inventory:
            return 0
        shortfall = max(quantity - self.quantity, 0)
        if shortfall and not allow_shortfall:
            raise ValidationError(
                {"stock": [f"Insufficient stock for {self.sku}: requested {quantity}, available {self.quantity}"]}
            )
        self._change_quantity(self.quantity - quantity + shortfall, "deducted")
        return shortfall

    def restore_stock(self, quantity, reason="restored"):
        self._assert_positive(quantity)
        if not self.track_inventory:
            return
        self._change_quantity(self.quantity + quantity, reason)

    def _assert_positive(self, quantity):
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be greater than zero"]})

    def _change_quantity(self, new_quantity, reason):
        from catalog.product.events import ProductStockChanged

        previous_quantity = self.quantity
        self.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductStockChanged(
                product_id=self.id,
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                reason=reason,
            )
        )

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def enable(self):
        self._change_status(ProductStatus.ENABLED)

    def disable(self):
        self._change_status(ProductStatus.DISABLED)

    def _change_status(self, target):
        from catalog.product.events import ProductStatusChanged

        if self.status == target.value:
            raise ValidationError({"status": [f"Product is already {target.value}"]})

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            ProductStatusChanged(
                product_id=self.id,
                status=target.value,
                changed_at=now,
            )
        )
