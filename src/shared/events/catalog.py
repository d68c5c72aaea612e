"""Cross-domain event contracts for Catalog domain events.

Sales keeps a local read model of sellable products (price, stock, status)
so that carts and wishlists can validate without calling into Catalog.
These classes mirror the Catalog events that feed that read model and are
registered in Sales via domain.register_external_event() with matching
__type__ strings.

The source-of-truth events are in src/catalog/product/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text


class ProductAdded(BaseEvent):
    """A new product was added to the catalog."""

    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    name = String(required=True)
    slug = String()
    category_id = Identifier()
    price = Float(required=True)
    special_price = Float()
    quantity = Integer(default=0)
    track_inventory = Boolean(default=True)
    status = String(required=True)
    added_at = DateTime(required=True)


class ProductDetailsUpdated(BaseEvent):
    """Name, description or category of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    slug = String()
    description = Text()
    category_id = Identifier()


class ProductPriceChanged(BaseEvent):
    """The regular or special price of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    price = Float(required=True)
    special_price = Float()
    previous_final_price = Float(required=True)
    final_price = Float(required=True)


class ProductStockChanged(BaseEvent):
    """On-hand quantity of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reason = String(required=True)


class ProductStatusChanged(BaseEvent):
    """A product was enabled or disabled for sale."""

    __version__ = 1

    product_id = Identifier(required=True)
    status = String(required=True)
    changed_at = DateTime(required=True)
