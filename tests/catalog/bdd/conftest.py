"""Shared BDD fixtures and step definitions for the Catalog domain."""

import pytest
from catalog.product.events import (
    ProductAdded,
    ProductPriceChanged,
    ProductStatusChanged,
    ProductStockChanged,
)
from catalog.product.product import Product
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

_PRODUCT_EVENT_CLASSES = {
    "ProductAdded": ProductAdded,
    "ProductPriceChanged": ProductPriceChanged,
    "ProductStatusChanged": ProductStatusChanged,
    "ProductStockChanged": ProductStockChanged,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a product with {quantity:d} units in stock"), target_fixture="product")
def product_in_stock(quantity):
    product = Product.add(sku="MUG-001", name="Coffee Mug", price=12.0, quantity=quantity)
    product._events.clear()
    return product


@given(parsers.cfparse("a product priced at {price:f}"), target_fixture="product")
def priced_product(price):
    product = Product.add(sku="MUG-001", name="Coffee Mug", price=price, quantity=5)
    product._events.clear()
    return product


@given("the product does not track inventory")
def untracked(product):
    product.track_inventory = False


@given("the product is disabled")
def disabled(product):
    product.disable()
    product._events.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the action fails with a validation error")
def action_fails(error):
    assert error["exc"] is not None
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the error is reported on "{field}"'))
def error_on_field(error, field):
    assert field in error["exc"].messages


@then(parsers.cfparse("the product has {quantity:d} units in stock"))
def units_in_stock(product, quantity):
    assert product.quantity == quantity


@then(parsers.cfparse('the product status is "{status}"'))
def product_status(product, status):
    assert product.status == status


@then(parsers.cfparse("a {event_type} product event is raised"))
def product_event_raised(product, event_type):
    event_cls = _PRODUCT_EVENT_CLASSES[event_type]
    assert any(isinstance(e, event_cls) for e in product._events)


@then(parsers.cfparse("no {event_type} product event is raised"))
def no_product_event_raised(product, event_type):
    event_cls = _PRODUCT_EVENT_CLASSES[event_type]
    assert not any(isinstance(e, event_cls) for e in product._events)
