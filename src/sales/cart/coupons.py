"""Cart coupon management: commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from sales.cart.cart import Cart
from sales.domain import sales
from sales.settings import coupon_percentage


@sales.command(part_of="Cart")
class ApplyCoupon:
    cart_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=50)


@sales.command(part_of="Cart")
class RemoveCoupon:
    cart_id = Identifier(required=True)


@sales.command_handler(part_of=Cart)
class CartCouponHandler:
    @handle(ApplyCoupon)
    def apply_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        # An empty cart is reported before an unknown code
        percentage = coupon_percentage(command.coupon_code) if cart.items else 0.0
        cart.apply_coupon(command.coupon_code, percentage)
        repo.add(cart)

    @handle(RemoveCoupon)
    def remove_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.remove_coupon()
        repo.add(cart)
