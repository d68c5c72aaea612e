"""Cart totals as shown in the cart drawer and the checkout summary."""

from sales.settings import money, shipping_cost, tax_rate


def cart_totals(cart, shipping_method="standard"):
    """Price ``cart`` for ``shipping_method``.

    Tax is charged on the discounted subtotal. The total adds tax and shipping
    to the subtotal and takes the discount off.
    """
    subtotal = cart.subtotal
    discount = money(cart.discount_amount)
    tax = money((subtotal - discount) * tax_rate())
    shipping = shipping_cost(shipping_method, subtotal)

    return {
        "subtotal": subtotal,
        "discount": discount,
        "tax": tax,
        "shipping_method": shipping_method,
        "shipping_cost": shipping,
        "total": money(subtotal + tax + shipping - discount),
        "items_count": cart.items_count,
        "coupon_code": cart.coupon_code,
    }
