"""Domain events for the CreditMemo aggregate.

CreditMemoInventoryRestored is also published to Catalog; its contract lives
in shared.events.sales.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from sales.domain import sales


@sales.event(part_of="CreditMemo")
class CreditMemoCreated:
    __version__ = 1

    credit_memo_id = Identifier(required=True)
    order_id = Identifier(required=True)
    credit_memo_number = String(required=True)
    grand_total = Float(required=True)
    created_at = DateTime(required=True)


@sales.event(part_of="CreditMemo")
class CreditMemoUpdated:
    __version__ = 1

    credit_memo_id = Identifier(required=True)
    order_id = Identifier(required=True)
    grand_total = Float(required=True)


@sales.event(part_of="CreditMemo")
class CreditMemoRefunded:
    __version__ = 1

    credit_memo_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Float(required=True)
    refund_method = String(required=True)
    refunded_at = DateTime(required=True)


@sales.event(part_of="CreditMemo")
class CreditMemoRefundFailed:
    __version__ = 1

    credit_memo_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Float(required=True)
    reason = String()
    failed_at = DateTime(required=True)


@sales.event(part_of="CreditMemo")
class CreditMemoInventoryRestored:
    __version__ = 1

    credit_memo_id = Identifier(required=True)
    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{"product_id", "sku", "quantity"}]
    restored_at = DateTime(required=True)


@sales.event(part_of="CreditMemo")
class CreditMemoCompleted:
    __version__ = 1

    credit_memo_id = Identifier(required=True)
    order_id = Identifier(required=True)


@sales.event(part_of="CreditMemo")
class CreditMemoCancelled:
    __version__ = 1

    credit_memo_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String()
