"""Stock movements: commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from catalog.domain import catalog
from catalog.product.product import Product


@catalog.command(part_of="Product")
class ReceiveStock:
    product_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=1)


@catalog.command(part_of="Product")
class DeductStock:
    product_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=1)


@catalog.command(part_of="Product")
class RestoreStock:
    product_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=1)
    reason: String(max_length=100, default="restored")


@catalog.command_handler(part_of=Product)
class StockHandler:
    @handle(ReceiveStock)
    def receive_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.receive_stock(command.quantity)
        repo.add(product)

    @handle(DeductStock)
    def deduct_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deduct_stock(command.quantity)
        repo.add(product)

    @handle(RestoreStock)
    def restore_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.restore_stock(command.quantity, reason=command.reason)
        repo.add(product)
