"""BDD tests for stock movements."""

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/stock_movements.feature")


@when(parsers.cfparse("{quantity:d} units are received"))
def receive(product, quantity, error):
    try:
        product.receive_stock(quantity)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse("{quantity:d} units are deducted"))
def deduct(product, quantity, error):
    try:
        product.deduct_stock(quantity)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse("{quantity:d} units are deducted allowing a shortfall"), target_fixture="shortfall")
def deduct_with_shortfall(product, quantity):
    return product.deduct_stock(quantity, allow_shortfall=True)


@then(parsers.cfparse("the shortfall is {quantity:d} units"))
def shortfall_is(shortfall, quantity):
    assert shortfall == quantity
