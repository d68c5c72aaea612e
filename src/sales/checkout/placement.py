"""Checkout: turns an active cart into a pending order."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain
from shared.queries import unused_number

from sales.cart.cart import Cart
from sales.cart.totals import cart_totals
from sales.domain import sales
from sales.order.order import Order, generate_order_number
from sales.projections.catalog_product import sellable_product
from sales.settings import currency

logger = structlog.get_logger(__name__)


@sales.command(part_of="Order")
class PlaceOrder:
    cart_id = Identifier(required=True)
    customer_id = Identifier()  # Empty for guest checkout
    customer_email = String(required=True, max_length=254)
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict
    same_as_shipping = Boolean(default=True)
    shipping_method = String(required=True, max_length=50)
    payment_method = String(required=True, max_length=50)
    notes = Text()


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


def _verify_lines(cart):
    """Re-check every line against current availability and stock."""
    for item in cart.items:
        product = sellable_product(item.product_id)
        if not product.available_for(item.quantity):
            raise ValidationError(
                {"stock": [f"Only {product.quantity} units of {product.name} are available"]}
            )


@sales.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.get(command.cart_id)
        if not cart.is_active or not cart.items:
            raise ValidationError({"cart": ["Cart is empty"]})

        _verify_lines(cart)
        totals = cart_totals(cart, command.shipping_method)

        shipping_address = _loads(command.shipping_address)
        billing_address = shipping_address
        if command.same_as_shipping is False:
            billing_address = _loads(command.billing_address)
            if not billing_address:
                raise ValidationError({"billing_address": ["Billing address is required"]})

        repo = current_domain.repository_for(Order)
        order = Order.create(
            order_number=unused_number(repo._dao.query, "order_number", generate_order_number),
            customer_id=command.customer_id or cart.customer_id,
            customer_email=command.customer_email,
            items_data=[
                {
                    "product_id": item.product_id,
                    "sku": item.sku,
                    "name": item.name,
                    "price": item.price,
                    "quantity": item.quantity,
                }
                for item in cart.items
            ],
            shipping_address=shipping_address,
            billing_address=billing_address,
            shipping_method=command.shipping_method,
            payment_method=command.payment_method,
            shipping_amount=totals["shipping_cost"],
            discount_amount=totals["discount"],
            tax_amount=totals["tax"],
            coupon_code=cart.coupon_code,
            currency=currency(),
            notes=command.notes,
        )
        cart.convert(order.id)

        repo.add(order)
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            cart_id=str(cart.id),
            guest=not order.customer_id,
            total=order.total,
        )
        return str(order.id)
