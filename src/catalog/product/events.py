"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from catalog.domain import catalog


@catalog.event(part_of="Product")
class ProductAdded:
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


@catalog.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    slug = String()
    description = Text()
    category_id = Identifier()


@catalog.event(part_of="Product")
class ProductPriceChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    price = Float(required=True)
    special_price = Float()
    previous_final_price = Float(required=True)
    final_price = Float(required=True)


@catalog.event(part_of="Product")
class ProductStockChanged:
    """On-hand quantity moved; ``reason`` is received, deducted, or the restock cause."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reason = String(required=True)


@catalog.event(part_of="Product")
class ProductStatusChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    status = String(required=True)
    changed_at = DateTime(required=True)
