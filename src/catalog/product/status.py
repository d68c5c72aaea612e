"""Product availability: commands and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from catalog.domain import catalog
from catalog.product.product import Product


@catalog.command(part_of="Product")
class EnableProduct:
    product_id: Identifier(required=True)


@catalog.command(part_of="Product")
class DisableProduct:
    product_id: Identifier(required=True)


@catalog.command_handler(part_of=Product)
class ProductStatusHandler:
    @handle(EnableProduct)
    def enable_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.enable()
        repo.add(product)

    @handle(DisableProduct)
    def disable_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.disable()
        repo.add(product)
