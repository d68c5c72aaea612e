"""Application tests for cart commands, coupons and the checkout summary."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from sales.cart.cart import Cart
from sales.cart.coupons import ApplyCoupon, RemoveCoupon
from sales.cart.items import AddToCart, ClearCart, RemoveCartItem, UpdateCartItem
from sales.cart.management import CreateCart
from sales.checkout.summary import checkout_summary


def _cart(cart_id):
    return current_domain.repository_for(Cart).get(cart_id)


class TestCreateCart:
    def test_guest_cart_persists(self):
        cart_id = current_domain.process(CreateCart(session_id="sess-001"), asynchronous=False)
        assert _cart(cart_id).session_id == "sess-001"


class TestCartItems:
    def test_add_to_cart(self, cart_with_items):
        cart = _cart(cart_with_items(quantity=3))
        assert cart.items_count == 3
        assert cart.items[0].sku == "TSHIRT-BLK-M"
        assert cart.subtotal == 150.0

    def test_unknown_product_is_unavailable(self):
        cart_id = current_domain.process(CreateCart(customer_id="cust-001"), asynchronous=False)
        with pytest.raises(ValidationError) as exc:
            current_domain.process(AddToCart(cart_id=cart_id, product_id="ghost", quantity=1), asynchronous=False)
        assert "availability" in exc.value.messages

    def test_add_beyond_stock(self, add_product):
        product_id = add_product(quantity=1)
        cart_id = current_domain.process(CreateCart(customer_id="cust-001"), asynchronous=False)
        with pytest.raises(ValidationError) as exc:
            current_domain.process(AddToCart(cart_id=cart_id, product_id=product_id, quantity=2), asynchronous=False)
        assert "stock" in exc.value.messages

    def test_update_quantity(self, cart_with_items):
        cart_id = cart_with_items()
        item_id = _cart(cart_id).items[0].id
        current_domain.process(UpdateCartItem(cart_id=cart_id, item_id=item_id, quantity=5), asynchronous=False)
        assert _cart(cart_id).items_count == 5

    def test_remove_item(self, cart_with_items):
        cart_id = cart_with_items()
        item_id = _cart(cart_id).items[0].id
        current_domain.process(RemoveCartItem(cart_id=cart_id, item_id=item_id), asynchronous=False)
        assert _cart(cart_id).items == []

    def test_clear(self, cart_with_items):
        cart_id = cart_with_items()
        current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
        assert _cart(cart_id).items_count == 0

    def test_missing_cart(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(ClearCart(cart_id="missing"), asynchronous=False)


class TestCoupons:
    def test_apply_known_coupon(self, cart_with_items):
        cart_id = cart_with_items()
        current_domain.process(ApplyCoupon(cart_id=cart_id, coupon_code="welcome10"), asynchronous=False)
        cart = _cart(cart_id)
        assert cart.coupon_code == "WELCOME10"
        assert cart.discount_amount == 10.0

    def test_unknown_coupon(self, cart_with_items):
        cart_id = cart_with_items()
        with pytest.raises(ValidationError) as exc:
            current_domain.process(ApplyCoupon(cart_id=cart_id, coupon_code="FREESTUFF"), asynchronous=False)
        assert "coupon_code" in exc.value.messages

    def test_coupon_on_empty_cart(self):
        cart_id = current_domain.process(CreateCart(customer_id="cust-001"), asynchronous=False)
        with pytest.raises(ValidationError) as exc:
            current_domain.process(ApplyCoupon(cart_id=cart_id, coupon_code="WELCOME10"), asynchronous=False)
        assert "cart" in exc.value.messages

    def test_remove_coupon(self, cart_with_items):
        cart_id = cart_with_items()
        current_domain.process(ApplyCoupon(cart_id=cart_id, coupon_code="SAVE20"), asynchronous=False)
        current_domain.process(RemoveCoupon(cart_id=cart_id), asynchronous=False)
        assert _cart(cart_id).discount_amount == 0.0


class TestCheckoutSummary:
    def test_standard_shipping(self, cart_with_items):
        totals = checkout_summary(cart_with_items())["totals"]
        assert totals["subtotal"] == 100.0
        assert totals["tax"] == 10.0
        assert totals["shipping_cost"] == 5.0
        assert totals["total"] == 115.0

    def test_express_with_coupon(self, cart_with_items):
        cart_id = cart_with_items()
        current_domain.process(ApplyCoupon(cart_id=cart_id, coupon_code="SAVE20"), asynchronous=False)
        totals = checkout_summary(cart_id, "express")["totals"]
        # tax on the discounted subtotal: (100 - 20) * 0.10
        assert totals["discount"] == 20.0
        assert totals["tax"] == 8.0
        assert totals["total"] == 103.0

    def test_unknown_shipping_method(self, cart_with_items):
        with pytest.raises(ValidationError) as exc:
            checkout_summary(cart_with_items(), "teleport")
        assert "shipping_method" in exc.value.messages

    def test_lists_shipping_methods(self, cart_with_items):
        assert checkout_summary(cart_with_items())["shipping_methods"] == ["express", "standard"]
