"""Checkout summary: what the shopper will pay for a given shipping method."""

from protean.utils.globals import current_domain

from sales.cart.cart import Cart
from sales.cart.totals import cart_totals
from sales.settings import shipping_methods


def checkout_summary(cart_id, shipping_method="standard"):
    cart = current_domain.repository_for(Cart).get(cart_id)
    return {
        "cart_id": str(cart.id),
        "items": [
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "sku": item.sku,
                "name": item.name,
                "price": item.price,
                "quantity": item.quantity,
                "row_total": item.row_total,
            }
            for item in cart.items
        ],
        "totals": cart_totals(cart, shipping_method),
        "shipping_methods": sorted(shipping_methods()),
    }
