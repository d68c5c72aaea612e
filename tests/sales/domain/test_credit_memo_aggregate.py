"""Tests for the CreditMemo aggregate: totals, the refund ceiling and lifecycle."""

import json

import pytest
from protean.exceptions import ValidationError
from sales.credit_memo.credit_memo import CreditMemo, CreditMemoStatus, RefundStatus
from sales.credit_memo.events import CreditMemoInventoryRestored, CreditMemoRefunded, CreditMemoRefundFailed
from sales.order.order import Order


@pytest.fixture
def order(shipping_address):
    return Order.create(
        customer_email="jane@example.com",
        items_data=[{"product_id": "prod-1", "sku": "A", "name": "Alpha", "price": 50.0, "quantity": 2}],
        shipping_address=shipping_address,
        tax_amount=10.0,
        shipping_amount=5.0,
    )


def _line(order, quantity=1, restore_stock=False):
    item = order.items[0]
    return {
        "order_item_id": item.id,
        "product_id": item.product_id,
        "sku": item.sku,
        "name": item.name,
        "price": item.price,
        "quantity": quantity,
        "tax_amount": item.tax_amount / item.quantity * quantity,
        "row_total": item.price * quantity,
        "restore_stock": restore_stock,
    }


def _memo(order, **kwargs):
    quantity = kwargs.pop("quantity", 1)
    restore_stock = kwargs.pop("restore_stock", False)
    return CreditMemo.create(order, [_line(order, quantity, restore_stock)], **kwargs)


class TestCreditMemoTotals:
    def test_single_unit(self, order):
        memo = _memo(order)
        assert memo.subtotal == 50.0
        assert memo.tax_amount == 5.0
        assert memo.grand_total == 55.0
        assert memo.credit_memo_number.startswith("CRM-")

    def test_shipping_and_adjustments(self, order):
        memo = _memo(order, refund_shipping=5.0, adjustment_positive=10.0, adjustment_negative=2.5)
        # 50 + 5 + 5 - 10 + 2.5
        assert memo.grand_total == 52.5

    def test_whole_order_fits_the_ceiling(self, order):
        memo = _memo(order, quantity=2, refund_shipping=5.0)
        memo.assert_within(order.max_refundable)
        assert memo.grand_total == order.total


class TestRefundCeiling:
    def test_goodwill_above_ceiling(self, order):
        memo = _memo(order, quantity=2, refund_shipping=5.0, adjustment_negative=1.0)
        with pytest.raises(ValidationError) as exc:
            memo.assert_within(order.max_refundable)
        assert exc.value.messages["refund"] == ["Refund amount exceeds maximum refundable amount"]

    def test_fee_larger_than_refund(self, order):
        memo = _memo(order, adjustment_positive=100.0)
        with pytest.raises(ValidationError) as exc:
            memo.assert_within(order.max_refundable)
        assert "adjustment_positive" in exc.value.messages

    def test_fee_equal_to_refund(self, order):
        memo = _memo(order, adjustment_positive=55.0)
        with pytest.raises(ValidationError) as exc:
            memo.assert_within(order.max_refundable)
        assert exc.value.messages["grand_total"] == ["Refund total must be greater than zero"]

    def test_update_rechecks_ceiling(self, order):
        memo = _memo(order)
        with pytest.raises(ValidationError) as exc:
            memo.update(order.max_refundable, adjustment_negative=500.0)
        assert "refund" in exc.value.messages


class TestCreditMemoLifecycle:
    def test_refund_completes_memo(self, order):
        memo = _memo(order)
        memo.mark_refunded()
        assert memo.is_refunded
        assert memo.status == CreditMemoStatus.COMPLETE.value
        event = memo._events[-1]
        assert isinstance(event, CreditMemoRefunded)
        assert event.amount == 55.0

    def test_refund_once(self, order):
        memo = _memo(order)
        memo.mark_refunded()
        with pytest.raises(ValidationError):
            memo.mark_refunded()

    def test_cancelled_memo_cannot_be_refunded(self, order):
        memo = _memo(order)
        memo.cancel("Customer kept the item")
        assert "Cancelled: Customer kept the item" in memo.admin_notes
        with pytest.raises(ValidationError):
            memo.mark_refunded()

    def test_refunded_memo_cannot_be_cancelled(self, order):
        memo = _memo(order)
        memo.mark_refunded()
        with pytest.raises(ValidationError) as exc:
            memo.cancel("Too late")
        assert exc.value.messages["status"] == ["Cannot cancel a refunded credit memo"]

    def test_complete_without_refund(self, order):
        memo = _memo(order)
        memo.complete()
        assert memo.status == "complete"
        assert memo.refund_status == RefundStatus.PENDING.value
        assert not memo.can_be_deleted

    def test_update_only_while_pending(self, order):
        memo = _memo(order)
        memo.update(order.max_refundable, notes="Damaged in transit")
        assert memo.notes == "Damaged in transit"
        memo.complete()
        with pytest.raises(ValidationError):
            memo.update(order.max_refundable, notes="Again")

    def test_failed_refund_stays_open(self, order):
        memo = _memo(order)
        memo.mark_refund_failed("Refund amount exceeds maximum refundable amount")
        assert memo.refund_status == RefundStatus.FAILED.value
        assert memo.status == CreditMemoStatus.PENDING.value
        assert "Refund failed: Refund amount exceeds" in memo.admin_notes
        event = memo._events[-1]
        assert isinstance(event, CreditMemoRefundFailed)
        assert event.amount == 55.0

    def test_retry_after_failure(self, order):
        memo = _memo(order)
        memo.mark_refund_failed("Gateway declined")
        memo.mark_refund_failed("Gateway declined again")
        memo.update(order.max_refundable, adjustment_positive=5.0)
        memo.mark_refunded()
        assert memo.is_refunded
        assert memo.grand_total == 50.0

    def test_processed_refund_cannot_fail(self, order):
        memo = _memo(order)
        memo.mark_refunded()
        with pytest.raises(ValidationError) as exc:
            memo.mark_refund_failed("Late decline")
        assert "status" in exc.value.messages


class TestInventoryRestore:
    def test_flagged_lines_go_back_once(self, order):
        memo = _memo(order, quantity=2, restore_stock=True)
        assert memo.restore_inventory() == 1
        event = memo._events[-1]
        assert isinstance(event, CreditMemoInventoryRestored)
        assert json.loads(event.items) == [{"product_id": "prod-1", "sku": "A", "quantity": 2}]
        assert memo.restore_inventory() == 0

    def test_unflagged_lines_stay(self, order):
        memo = _memo(order)
        assert memo.restore_inventory() == 0
        assert memo.inventory_restored_at is None
