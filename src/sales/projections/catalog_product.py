"""Catalog product: Sales' local copy of what is for sale.

Carts and wishlists validate price, status and stock against this read model
instead of calling into Catalog. It is fed by Catalog's product events in
``sales.cart.catalog_events``.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from sales.domain import sales


@sales.projection
class CatalogProduct:
    product_id = Identifier(identifier=True, required=True)
    sku = String(required=True)
    name = String(required=True)
    price = Float(required=True)
    special_price = Float()
    quantity = Integer(default=0)
    track_inventory = Boolean(default=True)
    status = String(required=True, default="enabled")

    @property
    def is_enabled(self):
        return self.status == "enabled"

    def effective_price(self):
        return self.special_price if self.special_price is not None else self.price

    def available_for(self, quantity):
        return not self.track_inventory or (self.quantity or 0) >= quantity


def sellable_product(product_id):
    """Load an enabled product or raise an ``availability`` error."""
    try:
        product = current_domain.repository_for(CatalogProduct).get(str(product_id))
    except ObjectNotFoundError:
        raise ValidationError({"availability": [f"Product {product_id} is not available"]})

    if not product.is_enabled:
        raise ValidationError({"availability": [f"Product {product.name} is not available"]})
    return product
