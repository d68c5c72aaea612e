"""Tests for the Product aggregate root."""

import pytest
from catalog.product.events import (
    ProductAdded,
    ProductDetailsUpdated,
    ProductPriceChanged,
    ProductStatusChanged,
    ProductStockChanged,
)
from catalog.product.product import Product, ProductStatus, slugify
from protean.exceptions import ValidationError
from protean.utils.reflection import declared_fields


def _product(**overrides):
    defaults = {"sku": "TSHIRT-BLK-M", "name": "Classic Black T-Shirt", "price": 29.99, "quantity": 10}
    defaults.update(overrides)
    product = Product.add(**defaults)
    product._events.clear()
    return product


class TestProductConstruction:
    def test_element_type(self):
        from protean.utils import DomainObjects

        assert Product.element_type == DomainObjects.AGGREGATE

    def test_declared_fields(self):
        fields = declared_fields(Product)
        for name in ("sku", "name", "slug", "price", "special_price", "quantity", "track_inventory", "status"):
            assert name in fields

    def test_add_minimal(self):
        product = Product.add(sku="MUG-001", name="Coffee Mug", price=9.5)
        assert product.status == ProductStatus.ENABLED.value
        assert product.quantity == 0
        assert product.track_inventory is True
        assert product.slug == "coffee-mug"
        assert product.created_at is not None

    def test_add_raises_event(self):
        product = Product.add(sku="MUG-001", name="Coffee Mug", price=9.5, quantity=3)
        assert len(product._events) == 1
        event = product._events[0]
        assert isinstance(event, ProductAdded)
        assert event.sku == "MUG-001"
        assert event.quantity == 3
        assert event.slug == "coffee-mug"


class TestSlugify:
    def test_punctuation_collapses_to_hyphens(self):
        assert slugify("Hello,  World!") == "hello-world"

    def test_empty_value(self):
        assert slugify("") is None
        assert slugify(None) is None


class TestPricing:
    def test_effective_price_without_special(self):
        assert _product().effective_price() == 29.99

    def test_effective_price_uses_special(self):
        assert _product(special_price=24.99).effective_price() == 24.99

    def test_change_price(self):
        product = _product()
        product.change_price(35.0, 30.0)
        assert product.price == 35.0
        assert product.special_price == 30.0
        event = product._events[-1]
        assert isinstance(event, ProductPriceChanged)
        assert event.previous_final_price == 29.99
        assert event.final_price == 30.0

    def test_special_price_must_undercut_price(self):
        product = _product()
        with pytest.raises(ValidationError) as exc:
            product.change_price(20.0, 25.0)
        assert "special_price" in exc.value.messages

    def test_clearing_special_price(self):
        product = _product(special_price=24.99)
        product.change_price(29.99)
        assert product.special_price is None
        assert product.effective_price() == 29.99


class TestDetails:
    def test_update_name_refreshes_slug(self):
        product = _product()
        product.update_details(name="Classic White T-Shirt")
        assert product.slug == "classic-white-t-shirt"
        assert isinstance(product._events[-1], ProductDetailsUpdated)

    def test_omitted_fields_are_kept(self):
        product = _product(description="Soft cotton")
        product.update_details(name="Renamed")
        assert product.description == "Soft cotton"


class TestStock:
    def test_receive_stock(self):
        product = _product()
        product.receive_stock(5)
        assert product.quantity == 15
        event = product._events[-1]
        assert isinstance(event, ProductStockChanged)
        assert event.previous_quantity == 10
        assert event.new_quantity == 15
        assert event.reason == "received"

    def test_receive_zero_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _product().receive_stock(0)
        assert "quantity" in exc.value.messages

    def test_deduct_stock(self):
        product = _product()
        assert product.deduct_stock(4) == 0
        assert product.quantity == 6

    def test_deduct_more_than_on_hand_rejected(self):
        product = _product()
        with pytest.raises(ValidationError) as exc:
            product.deduct_stock(11)
        assert "stock" in exc.value.messages
        assert product.quantity == 10

    def test_deduct_with_shortfall_bottoms_out_at_zero(self):
        product = _product(quantity=2)
        assert product.deduct_stock(5, allow_shortfall=True) == 3
        assert product.quantity == 0

    def test_untracked_product_never_decrements(self):
        product = _product(track_inventory=False, quantity=0)
        assert product.deduct_stock(50) == 0
        assert product.quantity == 0
        assert product._events == []

    def test_restore_stock(self):
        product = _product()
        product.restore_stock(2, reason="order_cancelled")
        assert product.quantity == 12
        assert product._events[-1].reason == "order_cancelled"


class TestAvailability:
    def test_can_fulfil_within_stock(self):
        assert _product().can_fulfil(10) is True

    def test_cannot_fulfil_beyond_stock(self):
        assert _product().can_fulfil(11) is False

    def test_untracked_always_fulfils(self):
        assert _product(track_inventory=False).can_fulfil(1000) is True

    def test_disabled_never_fulfils(self):
        product = _product()
        product.disable()
        assert product.can_fulfil(1) is False


class TestStatus:
    def test_disable_and_enable(self):
        product = _product()
        product.disable()
        assert product.status == ProductStatus.DISABLED.value
        assert isinstance(product._events[-1], ProductStatusChanged)

        product.enable()
        assert product.is_enabled

    def test_disable_twice_rejected(self):
        product = _product()
        product.disable()
        with pytest.raises(ValidationError) as exc:
            product.disable()
        assert "status" in exc.value.messages
