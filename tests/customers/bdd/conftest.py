"""Shared BDD fixtures and step definitions for the Customers domain."""

import pytest
from customers.customer.customer import Customer
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


def _address(city):
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "address_line_1": "1 High Street",
        "city": city,
        "postal_code": "10001",
        "country": "US",
    }


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@given("a registered customer", target_fixture="customer")
def registered_customer():
    customer = Customer.register(email="jane@example.com", first_name="Jane", last_name="Doe")
    customer._events.clear()
    return customer


@given(parsers.cfparse('the customer has an address in "{city}"'))
def existing_address(customer, city):
    customer.add_address(**_address(city))


@then("the action fails with a validation error")
def action_fails(error):
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the error is reported on "{field}"'))
def error_on_field(error, field):
    assert field in error["exc"].messages


@then(parsers.cfparse('the default shipping address is in "{city}"'))
def default_shipping(customer, city):
    assert customer.default_shipping_address().city == city


@then(parsers.cfparse('the default billing address is in "{city}"'))
def default_billing(customer, city):
    assert customer.default_billing_address().city == city


@then(parsers.cfparse("the customer has {count:d} addresses"))
def address_count(customer, count):
    assert len(customer.addresses) == count


@pytest.fixture()
def address_fields():
    """Builds the field dict for an address in the given city."""
    return _address
