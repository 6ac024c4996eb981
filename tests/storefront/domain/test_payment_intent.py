"""Tests for the PaymentIntent aggregate."""

import pytest
from storefront.exceptions import InvalidTransition
from storefront.gateway.port import GatewayOrder
from storefront.order.order import Order, ShippingAddress
from storefront.payment.events import PaymentAttemptFailed, PaymentCaptured, PaymentIntentCreated
from storefront.payment.intent import CompletionSource, IntentStatus, PaymentIntent


def _intent():
    order = Order.place(
        order_number="ORD-PI-00001",
        customer_id="cust-001",
        lines=[
            {"product_id": "prod-1", "product_name": "Jaggery", "quantity": 3, "unit_price": 99.5, "weight": "1kg"}
        ],
        shipping_address=ShippingAddress(
            name="Asha Rao", line1="12 MG Road", city="Bengaluru", state="Karnataka", postal_code="560001"
        ),
    )
    gateway_order = GatewayOrder(
        gateway_order_id="order_TEST000001",
        amount_minor=34850,
        currency="INR",
        receipt=order.order_number,
    )
    return PaymentIntent.issue(order, gateway_order)


class TestIssue:
    def test_amounts_on_both_sides_of_the_boundary(self):
        intent = _intent()
        assert intent.amount_minor == 34850
        assert intent.amount == 348.5
        assert intent.status == IntentStatus.PENDING.value

    def test_raises_created_event(self):
        intent = _intent()
        assert any(isinstance(e, PaymentIntentCreated) for e in intent._events)


class TestCompletion:
    def test_complete_records_source_and_payment(self):
        intent = _intent()
        intent.complete("pay_001", CompletionSource.WEBHOOK.value, method="upi")
        assert intent.is_completed
        assert intent.gateway_payment_id == "pay_001"
        assert intent.completed_via == "webhook"
        assert intent.method == "upi"
        assert any(isinstance(e, PaymentCaptured) for e in intent._events)

    def test_complete_twice_is_rejected(self):
        intent = _intent()
        intent.complete("pay_001", CompletionSource.CLIENT.value, signature="sig")
        with pytest.raises(InvalidTransition):
            intent.complete("pay_001", CompletionSource.WEBHOOK.value)

    def test_failed_intent_cannot_capture(self):
        intent = _intent()
        intent.fail("pay_001", "Card declined")
        assert intent.is_failed
        with pytest.raises(InvalidTransition):
            intent.complete("pay_002", CompletionSource.WEBHOOK.value)
        assert intent.status == IntentStatus.FAILED.value


class TestFailure:
    def test_fail_records_reason(self):
        intent = _intent()
        assert intent.fail("pay_001", "Card declined") is True
        assert intent.status == IntentStatus.FAILED.value
        assert intent.failure_reason == "Card declined"
        assert any(isinstance(e, PaymentAttemptFailed) for e in intent._events)

    def test_fail_is_idempotent(self):
        intent = _intent()
        intent.fail("pay_001", "Card declined")
        intent._events.clear()
        assert intent.fail("pay_001", "Card declined") is False
        assert intent._events == []

    def test_late_failure_never_downgrades_completion(self):
        intent = _intent()
        intent.complete("pay_001", CompletionSource.CLIENT.value)
        assert intent.fail("pay_001", "Timed out") is False
        assert intent.is_completed
