"""Order cancellation: command and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.order.order import Order

logger = structlog.get_logger(__name__)


@sales.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    restore_stock = Boolean(default=True)


@sales.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        restore_stock = command.restore_stock is not False
        if not order.cancel(command.reason, restore_stock=restore_stock):
            logger.info("Order already cancelled", order_id=str(order.id))
            return

        repo.add(order)
        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            reason=command.reason,
            restore_stock=restore_stock,
        )
