"""Order and payment status changes: commands and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.order.order import Order

logger = structlog.get_logger(__name__)


@sales.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    comment = Text()
    notify_customer = Boolean(default=False)


@sales.command(part_of="Order")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, max_length=20)
    comment = Text()


@sales.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        if order.update_status(command.status, comment=command.comment, notify_customer=command.notify_customer):
            repo.add(order)
            logger.info("Order status changed", order_id=str(order.id), previous=previous, status=order.status)

    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.payment_status
        if order.update_payment_status(command.payment_status, comment=command.comment):
            repo.add(order)
            logger.info(
                "Order payment status changed",
                order_id=str(order.id),
                previous=previous,
                payment_status=order.payment_status,
                status=order.status,
            )
