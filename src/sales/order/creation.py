"""Back-office order creation: command and handler.

Checkout places orders from a cart (see ``sales.checkout.placement``). This
command lets staff key in an order directly, e.g. for a phone sale.
"""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain
from shared.queries import unused_number

from sales.domain import sales
from sales.order.order import Order, generate_order_number
from sales.projections.catalog_product import sellable_product
from sales.settings import currency, money, shipping_cost, tax_rate

logger = structlog.get_logger(__name__)


@sales.command(part_of="Order")
class CreateOrder:
    customer_id = Identifier()
    customer_email = String(required=True, max_length=254)
    items = Text(required=True)  # JSON: [{"product_id", "quantity", "price"?, "sku"?, "name"?}]
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict, defaults to shipping
    shipping_method = String(max_length=50, default="standard")
    payment_method = String(max_length=50)
    shipping_amount = Float()
    discount_amount = Float(default=0.0)
    tax_amount = Float()
    notes = Text()


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


def _resolve_items(items):
    """Fill in sku, name and price from the catalog where the caller left them out."""
    resolved = []
    for item in items:
        if not all(item.get(key) is not None for key in ("sku", "name", "price")):
            product = sellable_product(item["product_id"])
            item = {
                "sku": product.sku,
                "name": product.name,
                "price": product.effective_price(),
                **{k: v for k, v in item.items() if v is not None},
            }
        resolved.append({**item, "quantity": int(item["quantity"])})
    return resolved


@sales.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        items_data = _resolve_items(_loads(command.items) or [])
        subtotal = money(sum(item["price"] * item["quantity"] for item in items_data))
        discount = command.discount_amount or 0.0

        tax_amount = command.tax_amount
        if tax_amount is None:
            tax_amount = money((subtotal - discount) * tax_rate())

        shipping_amount = command.shipping_amount
        if shipping_amount is None:
            shipping_amount = shipping_cost(command.shipping_method, subtotal)

        repo = current_domain.repository_for(Order)
        order = Order.create(
            order_number=unused_number(repo._dao.query, "order_number", generate_order_number),
            customer_id=command.customer_id,
            customer_email=command.customer_email,
            items_data=items_data,
            shipping_address=_loads(command.shipping_address),
            billing_address=_loads(command.billing_address),
            shipping_method=command.shipping_method,
            payment_method=command.payment_method,
            shipping_amount=shipping_amount,
            discount_amount=discount,
            tax_amount=tax_amount,
            currency=currency(),
            notes=command.notes,
        )
        repo.add(order)

        logger.info("Order created by staff", order_id=str(order.id), order_number=order.order_number)
        return str(order.id)
