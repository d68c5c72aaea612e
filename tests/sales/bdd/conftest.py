"""Shared BDD fixtures and step definitions for the Sales domain."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from sales.credit_memo.credit_memo import CreditMemo
from sales.credit_memo.events import (
    CreditMemoCancelled,
    CreditMemoCreated,
    CreditMemoInventoryRestored,
    CreditMemoRefunded,
    CreditMemoRefundFailed,
)
from sales.order.events import (
    OrderCancelled,
    OrderInventoryDeducted,
    OrderInventoryRestored,
    OrderPaymentStatusChanged,
    OrderRefundRecorded,
    OrderStatusChanged,
)
from sales.order.order import Order

# Map event name strings to classes for dynamic lookup in Then steps
_ORDER_EVENT_CLASSES = {
    "OrderStatusChanged": OrderStatusChanged,
    "OrderPaymentStatusChanged": OrderPaymentStatusChanged,
    "OrderInventoryDeducted": OrderInventoryDeducted,
    "OrderInventoryRestored": OrderInventoryRestored,
    "OrderCancelled": OrderCancelled,
    "OrderRefundRecorded": OrderRefundRecorded,
}

_CREDIT_MEMO_EVENT_CLASSES = {
    "CreditMemoCreated": CreditMemoCreated,
    "CreditMemoRefunded": CreditMemoRefunded,
    "CreditMemoRefundFailed": CreditMemoRefundFailed,
    "CreditMemoInventoryRestored": CreditMemoInventoryRestored,
    "CreditMemoCancelled": CreditMemoCancelled,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


def _new_order(shipping_address):
    """Two T-shirts at 50.00, 10.00 tax and 5.00 standard shipping: 115.00 in all."""
    return Order.create(
        customer_email="jane@example.com",
        items_data=[
            {"product_id": "prod-001", "sku": "TSHIRT-BLK-M", "name": "Classic Black T-Shirt", "price": 50.0, "quantity": 2}
        ],
        shipping_address=shipping_address,
        tax_amount=10.0,
        shipping_amount=5.0,
    )


# ---------------------------------------------------------------------------
# Given steps: Order
# ---------------------------------------------------------------------------
@given("a pending order", target_fixture="order")
def pending_order(shipping_address):
    order = _new_order(shipping_address)
    order._events.clear()
    return order


@given("a paid order", target_fixture="order")
def paid_order(shipping_address):
    order = _new_order(shipping_address)
    order.update_payment_status("paid")
    order._events.clear()
    return order


@given("a completed order", target_fixture="order")
def completed_order(shipping_address):
    order = _new_order(shipping_address)
    order.update_payment_status("paid")
    order.update_status("completed")
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
@then("the action fails with a validation error")
def action_fails_with_validation_error(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the error is reported on "{field}"'))
def error_reported_on(error, field):
    assert field in error["exc"].messages, f"Errors: {error['exc'].messages}"


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse('the order payment status is "{status}"'))
def order_payment_status_is(order, status):
    assert order.payment_status == status


@then(parsers.cfparse("the order has {amount:f} refunded"))
def order_refunded_amount(order, amount):
    assert order.total_refunded == amount


@then(parsers.cfparse("a {event_type} order event is raised"))
def order_event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in order._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in order._events]}"


@then(parsers.cfparse("no {event_type} order event is raised"))
def order_event_not_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert not any(isinstance(e, event_cls) for e in order._events)


@then(parsers.cfparse("a {event_type} credit memo event is raised"))
def credit_memo_event_raised(credit_memo, event_type):
    event_cls = _CREDIT_MEMO_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in credit_memo._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in credit_memo._events]}"


@pytest.fixture()
def credit_memo_for():
    """Build a credit memo over the first line of an order, flagged for restock."""

    def _build(order, quantity, refund_shipping=0.0, adjustment_positive=0.0, adjustment_negative=0.0):
        item = order.items[0]
        return CreditMemo.create(
            order,
            [
                {
                    "order_item_id": item.id,
                    "product_id": item.product_id,
                    "sku": item.sku,
                    "name": item.name,
                    "price": item.price,
                    "quantity": quantity,
                    "tax_amount": item.tax_amount / item.quantity * quantity,
                    "row_total": item.price * quantity,
                    "restore_stock": True,
                }
            ],
            refund_shipping=refund_shipping,
            adjustment_positive=adjustment_positive,
            adjustment_negative=adjustment_negative,
        )

    return _build
