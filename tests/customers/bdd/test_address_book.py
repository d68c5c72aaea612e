"""BDD tests for the customer address book."""

from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, when

scenarios("features/address_book.feature")


@given(parsers.cfparse("the customer already has {count:d} addresses"))
def many_addresses(customer, count, address_fields):
    for index in range(count):
        customer.add_address(**address_fields(f"Town {index}"))


@when(parsers.cfparse('the customer adds an address in "{city}"'))
def add_address(customer, city, address_fields, error):
    try:
        customer.add_address(**address_fields(city))
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the customer adds a default shipping address in "{city}"'))
def add_default_shipping(customer, city, address_fields):
    customer.add_address(is_default_shipping=True, **address_fields(city))


@when(parsers.cfparse('the customer removes the address in "{city}"'))
def remove_address(customer, city):
    address = next(a for a in customer.addresses if a.city == city)
    customer.remove_address(address.id)
