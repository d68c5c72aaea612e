"""Cross-domain event contracts for Sales domain events.

Catalog owns on-hand stock. Sales tells it when an order's items leave the
shelf and when they come back (order cancellation, credit memo restock).
These classes are registered in Catalog via domain.register_external_event()
with matching __type__ strings.

The source-of-truth events are in src/sales/order/events.py and
src/sales/credit_memo/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String, Text


class OrderInventoryDeducted(BaseEvent):
    """An order moved into processing and its items were taken from stock."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    items = Text(required=True)  # JSON: [{"product_id", "sku", "quantity"}]
    deducted_at = DateTime(required=True)


class OrderInventoryRestored(BaseEvent):
    """A cancelled order returned its previously deducted items to stock."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    items = Text(required=True)  # JSON: [{"product_id", "sku", "quantity"}]
    reason = String()
    restored_at = DateTime(required=True)


class CreditMemoInventoryRestored(BaseEvent):
    """Refunded credit memo items flagged for restock went back on the shelf."""

    __version__ = 1

    credit_memo_id = Identifier(required=True)
    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{"product_id", "sku", "quantity"}]
    restored_at = DateTime(required=True)
