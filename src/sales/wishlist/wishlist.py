"""Wishlist aggregate (CQRS): products a customer has saved for later."""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier

from sales.domain import sales
from sales.wishlist.events import WishlistItemAdded, WishlistItemRemoved


@sales.entity(part_of="Wishlist")
class WishlistItem:
    product_id = Identifier(required=True)
    added_at = DateTime()


@sales.aggregate
class Wishlist:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(WishlistItem)
    created_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        return cls(customer_id=customer_id, created_at=datetime.now(UTC))

    def has_product(self, product_id):
        return any(str(i.product_id) == str(product_id) for i in self.items)

    def add_product(self, product_id):
        if self.has_product(product_id):
            raise ValidationError({"wishlist": ["Product already in wishlist"]})

        item = WishlistItem(product_id=product_id, added_at=datetime.now(UTC))
        self.add_items(item)

        self.raise_(
            WishlistItemAdded(
                wishlist_id=self.id,
                customer_id=self.customer_id,
                item_id=item.id,
                product_id=product_id,
            )
        )
        return item

    def find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError(f"Wishlist item {item_id} not found")
        return item

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        self.remove_items(item)

        self.raise_(
            WishlistItemRemoved(
                wishlist_id=self.id,
                customer_id=self.customer_id,
                item_id=item_id,
                product_id=item.product_id,
            )
        )
        return item
