"""BDD tests for checkout."""

from protean import current_domain
from pytest_bdd import parsers, scenarios, then, when
from storefront.order.order import Order

scenarios("features/checkout.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("the customer orders {quantity:d} units"), target_fixture="order_id")
def _(place_order, product_id, attempt, quantity):
    return attempt(place_order, [(product_id, quantity)])


@when("the customer opens a payment intent", target_fixture="reopened")
def _(open_intent, order_id):
    return open_intent(order_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order total is {total:f}"))
def _(order_id, total):
    assert current_domain.repository_for(Order).get(order_id).total == total


@then(parsers.cfparse("the intent amount is {amount:d} paise"))
def _(reopened, amount):
    assert reopened["amount"] == amount
    assert reopened["currency"] == "INR"


@then("the same gateway order is returned")
def _(intent, reopened):
    assert reopened["intent_id"] == intent["intent_id"]
    assert reopened["gateway_order_id"] == intent["gateway_order_id"]
