"""Wishlist management: commands, handler and lookup."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from sales.cart.cart import Cart
from sales.domain import sales
from sales.projections.catalog_product import sellable_product
from sales.wishlist.wishlist import Wishlist


@sales.command(part_of="Wishlist")
class AddToWishlist:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@sales.command(part_of="Wishlist")
class RemoveFromWishlist:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)


@sales.command(part_of="Wishlist")
class MoveWishlistItemToCart:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    cart_id = Identifier(required=True)


def wishlist_for(customer_id):
    """Return the customer's wishlist, or ``None`` if they never saved anything."""
    wishlists = current_domain.repository_for(Wishlist)._dao.query.filter(customer_id=str(customer_id)).all().items
    return wishlists[0] if wishlists else None


def _existing_wishlist(customer_id):
    wishlist = wishlist_for(customer_id)
    if wishlist is None:
        raise ObjectNotFoundError(f"Wishlist for customer {customer_id} not found")
    return wishlist


@sales.command_handler(part_of=Wishlist)
class WishlistHandler:
    @handle(AddToWishlist)
    def add_to_wishlist(self, command):
        sellable_product(command.product_id)

        wishlist = wishlist_for(command.customer_id) or Wishlist.create(command.customer_id)
        item = wishlist.add_product(command.product_id)
        current_domain.repository_for(Wishlist).add(wishlist)
        return str(item.id)

    @handle(RemoveFromWishlist)
    def remove_from_wishlist(self, command):
        wishlist = _existing_wishlist(command.customer_id)
        wishlist.remove_item(command.item_id)
        current_domain.repository_for(Wishlist).add(wishlist)

    @handle(MoveWishlistItemToCart)
    def move_to_cart(self, command):
        wishlist = _existing_wishlist(command.customer_id)
        item = wishlist.find_item(command.item_id)

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.get(command.cart_id)
        cart_item = cart.add_item(sellable_product(item.product_id), 1)
        wishlist.remove_item(command.item_id)

        cart_repo.add(cart)
        current_domain.repository_for(Wishlist).add(wishlist)
        return str(cart_item.id)
