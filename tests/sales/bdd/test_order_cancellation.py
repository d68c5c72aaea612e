"""BDD tests for order cancellation."""

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/order_cancellation.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the order is cancelled with reason "{reason}"'))
def cancel_order(order, reason, error):
    try:
        order.cancel(reason)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the order is cancelled with reason "{reason}" keeping the stock off the shelf'))
def cancel_order_without_restock(order, reason):
    order.cancel(reason, restore_stock=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order has {count:d} cancellation in its history"))
def cancellations_in_history(order, count):
    assert len([entry for entry in order.history if entry.status_to == "cancelled"]) == count
