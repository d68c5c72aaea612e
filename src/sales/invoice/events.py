"""Domain events for the Invoice aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from sales.domain import sales


@sales.event(part_of="Invoice")
class InvoiceCreated:
    __version__ = 1

    invoice_id = Identifier(required=True)
    order_id = Identifier(required=True)
    invoice_number = String(required=True)
    total = Float(required=True)
    due_date = DateTime(required=True)


@sales.event(part_of="Invoice")
class InvoiceSent:
    __version__ = 1

    invoice_id = Identifier(required=True)
    order_id = Identifier(required=True)
    sent_at = DateTime(required=True)


@sales.event(part_of="Invoice")
class InvoicePaid:
    __version__ = 1

    invoice_id = Identifier(required=True)
    order_id = Identifier(required=True)
    invoice_number = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@sales.event(part_of="Invoice")
class InvoiceCancelled:
    __version__ = 1

    invoice_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)
