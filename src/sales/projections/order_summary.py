"""Order summary: lightweight listing view for "my orders" and the back office."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.order.events import (
    OrderCancelled,
    OrderPaymentStatusChanged,
    OrderPlaced,
    OrderRefundRecorded,
    OrderStatusChanged,
)
from sales.order.order import Order


@sales.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True)
    customer_id = Identifier()
    customer_email = String(required=True)
    status = String(required=True)
    payment_status = String(required=True)
    item_count = Integer(default=0)
    total = Float(default=0.0)
    total_refunded = Float(default=0.0)
    currency = String(default="USD")
    created_at = DateTime()
    updated_at = DateTime()


@sales.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                customer_id=event.customer_id,
                customer_email=event.customer_email,
                status="pending",
                payment_status="pending",
                item_count=sum(int(item.get("quantity", 0)) for item in items),
                total=event.total,
                currency=event.currency or "USD",
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.status = event.new_status
        summary.updated_at = event.changed_at
        repo.add(summary)

    @on(OrderPaymentStatusChanged)
    def on_payment_status_changed(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.payment_status = event.new_status
        summary.updated_at = event.changed_at
        repo.add(summary)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.status = "cancelled"
        summary.updated_at = event.cancelled_at
        repo.add(summary)

    @on(OrderRefundRecorded)
    def on_refund_recorded(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.total_refunded = event.total_refunded
        repo.add(summary)
