"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from protean.exceptions import ProteanException
from pytest_bdd import given, parsers, then
from storefront.channel import get_email_adapter
from storefront.order.order import Order
from storefront.payment.reconciliation import receive_webhook
from storefront.product.product import Product
from storefront.refund.request import RequestRefund

REFUND_REASON = "The package arrived damaged and leaking"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@pytest.fixture()
def attempt(error):
    """Run a step action, capturing the domain error for a later Then step."""

    def _attempt(fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except ProteanException as exc:
            error["exc"] = exc
            return None

    return _attempt


@pytest.fixture()
def request_refund():
    def _request(order_id):
        return current_domain.process(
            RequestRefund(order_id=order_id, requested_by="cust-001", reason=REFUND_REASON),
            asynchronous=False,
        )

    return _request


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'),
    target_fixture="product_id",
)
def product_in_stock(add_product, name, price, stock):
    return add_product(name=name, price=price, stock=stock)


@given(parsers.cfparse("the customer has ordered {quantity:d} units"), target_fixture="order_id")
def customer_has_ordered(place_order, product_id, quantity):
    return place_order([(product_id, quantity)])


@given("the customer has opened a payment intent", target_fixture="intent")
def customer_has_opened_intent(open_intent, order_id):
    return open_intent(order_id)


@given("the order has been paid by webhook")
def order_paid_by_webhook(signed_webhook, intent):
    ack = receive_webhook(*signed_webhook("payment.captured", intent["gateway_order_id"], "pay_001"))
    assert ack.outcome == "completed"


@given("the customer has requested a refund", target_fixture="refund_id")
def customer_has_requested_refund(request_refund, order_id):
    return request_refund(order_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def payment_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).payment_status == status


@then(parsers.cfparse("the stock of the product is {stock:d}"))
def stock_is(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock == stock


@then(parsers.cfparse('the request is rejected with "{message}"'))
def request_rejected(error, message):
    assert error["exc"] is not None
    messages = [msg for msgs in error["exc"].messages.values() for msg in msgs]
    assert any(message in msg for msg in messages), messages


@then(parsers.cfparse('the customer receives {count:d} email with subject starting "{prefix}"'))
def customer_receives_emails(count, prefix):
    emails = [email for email in get_email_adapter().emails_to("cust-001") if email["subject"].startswith(prefix)]
    assert len(emails) == count
