"""Domain events for the Order aggregate.

OrderInventoryDeducted and OrderInventoryRestored are also published to
Catalog; their contracts live in shared.events.sales.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from sales.domain import sales


@sales.event(part_of="Order")
class OrderPlaced:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier()
    customer_email = String(required=True)
    items = Text(required=True)  # JSON: [{"item_id", "product_id", "sku", "quantity", "price"}]
    subtotal = Float(required=True)
    tax_amount = Float(default=0.0)
    shipping_amount = Float(default=0.0)
    discount_amount = Float(default=0.0)
    total = Float(required=True)
    currency = String(default="USD")
    placed_at = DateTime(required=True)


@sales.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@sales.event(part_of="Order")
class OrderPaymentStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@sales.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)


@sales.event(part_of="Order")
class OrderCommentAdded:
    __version__ = 1

    order_id = Identifier(required=True)
    comment = Text(required=True)
    customer_notified = Boolean(default=False)
    visible_to_customer = Boolean(default=True)


@sales.event(part_of="Order")
class OrderRefundRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    credit_memo_id = Identifier(required=True)
    amount = Float(required=True)
    total_refunded = Float(required=True)
    fully_refunded = Boolean(default=False)


@sales.event(part_of="Order")
class OrderInventoryDeducted:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    items = Text(required=True)  # JSON: [{"product_id", "sku", "quantity"}]
    deducted_at = DateTime(required=True)


@sales.event(part_of="Order")
class OrderInventoryRestored:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    items = Text(required=True)  # JSON: [{"product_id", "sku", "quantity"}]
    reason = String()
    restored_at = DateTime(required=True)
