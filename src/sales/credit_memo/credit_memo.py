"""CreditMemo aggregate (CQRS): money and goods returned against a paid order.

A credit memo lists the order items being refunded and works out how much
goes back to the customer. Processing the refund books the amount on the
order (which re-checks the refundable ceiling) and completes the memo.

Totals:
    subtotal     = Σ price × qty
    tax          = Σ (item tax / ordered qty) × qty
    discount     = Σ (item discount / ordered qty) × qty
    grand_total  = subtotal + tax + shipping - discount
                   - adjustment_positive + adjustment_negative

``adjustment_positive`` is a restocking fee kept back from the customer and
``adjustment_negative`` is a goodwill amount added on top.
"""

import json
import random
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from sales.credit_memo.events import (
    CreditMemoCancelled,
    CreditMemoCompleted,
    CreditMemoCreated,
    CreditMemoInventoryRestored,
    CreditMemoRefundFailed,
    CreditMemoRefunded,
    CreditMemoUpdated,
)
from sales.domain import sales
from sales.settings import money


class CreditMemoStatus(Enum):
    PENDING = "pending"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class RefundStatus(Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"


class RefundMethod(Enum):
    ORIGINAL_PAYMENT = "original_payment"
    STORE_CREDIT = "store_credit"
    MANUAL = "manual"


_VALID_TRANSITIONS = {
    CreditMemoStatus.PENDING: {CreditMemoStatus.COMPLETE, CreditMemoStatus.CANCELLED},
    CreditMemoStatus.COMPLETE: set(),  # Terminal
    CreditMemoStatus.CANCELLED: set(),  # Terminal
}

_VALID_REFUND_TRANSITIONS = {
    RefundStatus.PENDING: {RefundStatus.PROCESSED, RefundStatus.FAILED},
    RefundStatus.FAILED: {RefundStatus.PROCESSED},
    RefundStatus.PROCESSED: set(),  # Terminal
}

REFUND_CEILING_MESSAGE = "Refund amount exceeds maximum refundable amount"


def generate_credit_memo_number(moment=None):
    moment = moment or datetime.now(UTC)
    return f"CRM-{moment:%Y%m%d}-{random.randint(0, 999999):06d}"


@sales.entity(part_of="CreditMemo")
class CreditMemoItem:
    order_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    sku = String(required=True, max_length=64)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    tax_amount = Float(default=0.0)
    discount_amount = Float(default=0.0)
    row_total = Float(default=0.0)
    restore_stock = Boolean(default=False)
    stock_restored = Boolean(default=False)


@sales.aggregate
class CreditMemo:
    order_id = Identifier(required=True)
    credit_memo_number = String(required=True, max_length=30, unique=True)
    status = String(choices=CreditMemoStatus, default=CreditMemoStatus.PENDING.value)
    refund_status = String(choices=RefundStatus, default=RefundStatus.PENDING.value)
    refund_method = String(choices=RefundMethod, default=RefundMethod.ORIGINAL_PAYMENT.value)
    subtotal = Float(default=0.0)
    tax_amount = Float(default=0.0)
    shipping_amount = Float(default=0.0)
    discount_amount = Float(default=0.0)
    adjustment_positive = Float(default=0.0, min_value=0.0)
    adjustment_negative = Float(default=0.0, min_value=0.0)
    grand_total = Float(default=0.0)
    currency = String(max_length=3, default="USD")
    notes = Text()
    admin_notes = Text()
    refunded_at = DateTime()
    inventory_restored_at = DateTime()
    items = HasMany(CreditMemoItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        order,
        items_data,
        refund_shipping=0.0,
        adjustment_positive=0.0,
        adjustment_negative=0.0,
        refund_method=None,
        notes=None,
        credit_memo_number=None,
    ):
        """Draft a credit memo for ``order``.

        Args:
            items_data: List of dicts with the order item fields, the quantity
                being refunded and ``restore_stock``.
        """
        now = datetime.now(UTC)
        memo = cls(
            order_id=order.id,
            credit_memo_number=credit_memo_number or generate_credit_memo_number(now),
            refund_method=refund_method or RefundMethod.ORIGINAL_PAYMENT.value,
            shipping_amount=money(refund_shipping),
            adjustment_positive=money(adjustment_positive),
            adjustment_negative=money(adjustment_negative),
            currency=order.currency,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for data in items_data:
            memo.add_items(CreditMemoItem(**data))
        memo.recalculate_totals()

        memo.raise_(
            CreditMemoCreated(
                credit_memo_id=memo.id,
                order_id=order.id,
                credit_memo_number=memo.credit_memo_number,
                grand_total=memo.grand_total,
                created_at=now,
            )
        )
        return memo

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_refunded(self):
        return self.refund_status == RefundStatus.PROCESSED.value

    @property
    def is_cancelled(self):
        return self.status == CreditMemoStatus.CANCELLED.value

    @property
    def can_be_deleted(self):
        return self.status == CreditMemoStatus.PENDING.value and not self.is_refunded

    def recalculate_totals(self):
        subtotal = sum(item.price * item.quantity for item in self.items)
        tax = sum(item.tax_amount for item in self.items)
        discount = sum(item.discount_amount for item in self.items)

        self.subtotal = money(subtotal)
        self.tax_amount = money(tax)
        self.discount_amount = money(discount)
        self.grand_total = money(
            self.subtotal
            + self.tax_amount
            + self.shipping_amount
            - self.discount_amount
            - self.adjustment_positive
            + self.adjustment_negative
        )

    def assert_within(self, max_refundable):
        if self.grand_total < 0:
            raise ValidationError({"adjustment_positive": ["Adjustments cannot exceed the refund total"]})
        if self.grand_total == 0:
            raise ValidationError({"grand_total": ["Refund total must be greater than zero"]})
        if self.grand_total > money(max_refundable):
            raise ValidationError({"refund": [REFUND_CEILING_MESSAGE]})

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = CreditMemoStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _assert_refund_can_transition(self, target_status):
        current = RefundStatus(self.refund_status)
        if target_status not in _VALID_REFUND_TRANSITIONS.get(current, set()):
            raise ValidationError(
                {"status": [f"Cannot transition refund from {current.value} to {target_status.value}"]}
            )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def assert_refundable(self):
        if self.is_refunded:
            raise ValidationError({"status": ["Refund already processed"]})
        if self.is_cancelled:
            raise ValidationError({"status": ["Cannot refund a cancelled credit memo"]})

    def mark_refunded(self):
        """Record that the money went back. The order is booked by the caller."""
        self.assert_refundable()
        self._assert_refund_can_transition(RefundStatus.PROCESSED)
        now = datetime.now(UTC)
        self.refund_status = RefundStatus.PROCESSED.value
        self.refunded_at = now
        if self.status == CreditMemoStatus.PENDING.value:
            self.status = CreditMemoStatus.COMPLETE.value
        self.updated_at = now

        self.raise_(
            CreditMemoRefunded(
                credit_memo_id=self.id,
                order_id=self.order_id,
                amount=self.grand_total,
                refund_method=self.refund_method,
                refunded_at=now,
            )
        )

    def mark_refund_failed(self, reason):
        """Keep the memo open for a retry after the refund was rejected."""
        self.assert_refundable()
        if self.refund_status != RefundStatus.FAILED.value:
            self._assert_refund_can_transition(RefundStatus.FAILED)

        now = datetime.now(UTC)
        self.refund_status = RefundStatus.FAILED.value
        self.admin_notes = "\n".join(filter(None, [self.admin_notes, f"Refund failed: {reason}"]))
        self.updated_at = now

        self.raise_(
            CreditMemoRefundFailed(
                credit_memo_id=self.id,
                order_id=self.order_id,
                amount=self.grand_total,
                reason=reason,
                failed_at=now,
            )
        )

    def restore_inventory(self):
        """Send flagged items back to stock once. Returns how many lines moved."""
        lines = [item for item in self.items if item.restore_stock and not item.stock_restored]
        if not lines:
            return 0

        now = datetime.now(UTC)
        for item in lines:
            item.stock_restored = True
        self.inventory_restored_at = now
        self.updated_at = now

        self.raise_(
            CreditMemoInventoryRestored(
                credit_memo_id=self.id,
                order_id=self.order_id,
                items=json.dumps(
                    [{"product_id": str(item.product_id), "sku": item.sku, "quantity": item.quantity} for item in lines]
                ),
                restored_at=now,
            )
        )
        return len(lines)

    def complete(self):
        self._assert_can_transition(CreditMemoStatus.COMPLETE)
        self.status = CreditMemoStatus.COMPLETE.value
        self.updated_at = datetime.now(UTC)
        self.raise_(CreditMemoCompleted(credit_memo_id=self.id, order_id=self.order_id))

    def cancel(self, reason):
        if self.is_refunded:
            raise ValidationError({"status": ["Cannot cancel a refunded credit memo"]})

        self._assert_can_transition(CreditMemoStatus.CANCELLED)
        self.status = CreditMemoStatus.CANCELLED.value
        self.admin_notes = "\n".join(filter(None, [self.admin_notes, f"Cancelled: {reason}"]))
        self.updated_at = datetime.now(UTC)

        self.raise_(CreditMemoCancelled(credit_memo_id=self.id, order_id=self.order_id, reason=reason))

    def update(
        self,
        max_refundable,
        notes=None,
        admin_notes=None,
        adjustment_positive=None,
        adjustment_negative=None,
        refund_method=None,
    ):
        if self.status != CreditMemoStatus.PENDING.value:
            raise ValidationError({"status": ["Only pending credit memos can be updated"]})

        if notes is not None:
            self.notes = notes
        if admin_notes is not None:
            self.admin_notes = admin_notes

        money_changes = (adjustment_positive, adjustment_negative, refund_method)
        if any(value is not None for value in money_changes):
            if self.is_refunded:
                raise ValidationError({"status": ["Amounts cannot change once the refund is processed"]})
            if adjustment_positive is not None:
                self.adjustment_positive = money(adjustment_positive)
            if adjustment_negative is not None:
                self.adjustment_negative = money(adjustment_negative)
            if refund_method is not None:
                self.refund_method = refund_method
            self.recalculate_totals()
            self.assert_within(max_refundable)

        self.updated_at = datetime.now(UTC)
        self.raise_(CreditMemoUpdated(credit_memo_id=self.id, order_id=self.order_id, grand_total=self.grand_total))
