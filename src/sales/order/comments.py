"""Order comments: command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, Text
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.order.order import Order


@sales.command(part_of="Order")
class AddOrderComment:
    order_id = Identifier(required=True)
    comment = Text(required=True)
    notify_customer = Boolean(default=False)
    visible_to_customer = Boolean(default=True)


@sales.command_handler(part_of=Order)
class OrderCommentHandler:
    @handle(AddOrderComment)
    def add_order_comment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.add_comment(
            command.comment,
            notify_customer=command.notify_customer,
            visible_to_customer=command.visible_to_customer,
        )
        repo.add(order)
