"""Product creation: command and handler."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from catalog.domain import catalog
from catalog.product.product import Product


@catalog.command(part_of="Product")
class AddProduct:
    sku: String(required=True, max_length=64)
    name: String(required=True, max_length=255)
    price: Float(required=True)
    special_price: Float()
    quantity: Integer(default=0)
    track_inventory: Boolean(default=True)
    category_id: Identifier()
    description: Text()


@catalog.command_handler(part_of=Product)
class AddProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.add(
            sku=command.sku,
            name=command.name,
            price=command.price,
            special_price=command.special_price,
            quantity=command.quantity,
            track_inventory=command.track_inventory,
            category_id=command.category_id,
            description=command.description,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)
