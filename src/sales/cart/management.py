"""Cart creation: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from sales.cart.cart import Cart
from sales.domain import sales


@sales.command(part_of="Cart")
class CreateCart:
    customer_id = Identifier()
    session_id = String(max_length=255)


@sales.command_handler(part_of=Cart)
class CreateCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(customer_id=command.customer_id, session_id=command.session_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)
