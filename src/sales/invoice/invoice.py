"""Invoice aggregate (CQRS): the billing document for an order.

An invoice copies the order totals at the time it is raised. An order has at
most one invoice that is not cancelled. Paying the invoice marks the order's
payment as received (see ``sales.order.invoice_events``).

State Machine:
    PENDING → SENT → PAID
    PENDING → PAID
    PENDING/SENT → CANCELLED
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from sales.domain import sales
from sales.invoice.events import InvoiceCancelled, InvoiceCreated, InvoicePaid, InvoiceSent


class InvoiceStatus(Enum):
    PENDING = "pending"
    SENT = "sent"
    PAID = "paid"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    InvoiceStatus.PENDING: {InvoiceStatus.SENT, InvoiceStatus.PAID, InvoiceStatus.CANCELLED},
    InvoiceStatus.SENT: {InvoiceStatus.PAID, InvoiceStatus.CANCELLED},
    InvoiceStatus.PAID: set(),  # Terminal
    InvoiceStatus.CANCELLED: set(),  # Terminal
}


def invoice_number_prefix(moment):
    return f"INV-{moment:%Y%m}"


def next_invoice_number(existing_numbers, moment):
    """Next number in ``moment``'s month, e.g. ``INV-20250300001``."""
    prefix = invoice_number_prefix(moment)
    sequences = [int(number[len(prefix) :]) for number in existing_numbers if number.startswith(prefix)]
    return f"{prefix}{max(sequences, default=0) + 1:05d}"


@sales.aggregate
class Invoice:
    order_id = Identifier(required=True)
    invoice_number = String(required=True, max_length=20, unique=True)
    status = String(choices=InvoiceStatus, default=InvoiceStatus.PENDING.value)
    issue_date = DateTime(required=True)
    due_date = DateTime(required=True)
    subtotal = Float(default=0.0)
    tax_amount = Float(default=0.0)
    shipping_amount = Float(default=0.0)
    discount_amount = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="USD")
    notes = Text()
    sent_at = DateTime()
    paid_at = DateTime()
    cancelled_at = DateTime()

    @classmethod
    def create(cls, order, invoice_number, due_days=30, notes=None):
        issue_date = datetime.now(UTC)
        invoice = cls(
            order_id=order.id,
            invoice_number=invoice_number,
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=due_days),
            subtotal=order.subtotal,
            tax_amount=order.tax_amount,
            shipping_amount=order.shipping_amount,
            discount_amount=order.discount_amount,
            total=order.total,
            currency=order.currency,
            notes=notes,
        )
        invoice.raise_(
            InvoiceCreated(
                invoice_id=invoice.id,
                order_id=order.id,
                invoice_number=invoice_number,
                total=invoice.total,
                due_date=invoice.due_date,
            )
        )
        return invoice

    @property
    def is_paid(self):
        return self.status == InvoiceStatus.PAID.value

    @property
    def is_cancelled(self):
        return self.status == InvoiceStatus.CANCELLED.value

    @property
    def can_be_deleted(self):
        return not self.is_paid

    def _assert_can_transition(self, target_status):
        current = InvoiceStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def mark_sent(self):
        if self.status != InvoiceStatus.PENDING.value:
            raise ValidationError({"status": [f"Only pending invoices can be sent, invoice is {self.status}"]})

        self.status = InvoiceStatus.SENT.value
        self.sent_at = datetime.now(UTC)
        self.raise_(InvoiceSent(invoice_id=self.id, order_id=self.order_id, sent_at=self.sent_at))

    def mark_paid(self):
        if self.is_paid:
            raise ValidationError({"status": ["Invoice is already paid"]})
        if self.is_cancelled:
            raise ValidationError({"status": ["Cannot pay a cancelled invoice"]})

        self._assert_can_transition(InvoiceStatus.PAID)
        self.status = InvoiceStatus.PAID.value
        self.paid_at = datetime.now(UTC)
        self.raise_(
            InvoicePaid(
                invoice_id=self.id,
                order_id=self.order_id,
                invoice_number=self.invoice_number,
                amount=self.total,
                paid_at=self.paid_at,
            )
        )

    def cancel(self, reason=None):
        if self.is_paid:
            raise ValidationError({"status": ["Cannot cancel a paid invoice"]})

        self._assert_can_transition(InvoiceStatus.CANCELLED)
        self.status = InvoiceStatus.CANCELLED.value
        self.cancelled_at = datetime.now(UTC)
        if reason:
            self.notes = "\n".join(filter(None, [self.notes, f"Cancellation reason: {reason}"]))

        self.raise_(
            InvoiceCancelled(
                invoice_id=self.id,
                order_id=self.order_id,
                reason=reason,
                cancelled_at=self.cancelled_at,
            )
        )
