"""Application tests for the client-side payment confirmation path."""

from unittest import mock

import pytest
from protean import current_domain
from storefront.exceptions import ForbiddenError, NotFoundError, PaymentProcessingFailed, SignatureMismatch
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.payment.intent import IntentStatus, PaymentIntent
from storefront.payment.reconciliation import confirm_client_payment, receive_webhook
from storefront.product.product import Product


def _confirm(placed, sign, customer_id="cust-001", payment_id="pay_client_001", signature=None):
    gateway_order_id = placed["intent"]["gateway_order_id"]
    return confirm_client_payment(
        customer_id=customer_id,
        gateway_order_id=gateway_order_id,
        gateway_payment_id=payment_id,
        signature=signature or sign(gateway_order_id, payment_id),
    )


class TestClientConfirmation:
    def test_completes_payment(self, checkout, sign_checkout_callback):
        placed = checkout(stock=5, quantity=2)

        result = _confirm(placed, sign_checkout_callback)

        assert result == {"order_id": placed["order_id"], "status": "completed"}
        order = current_domain.repository_for(Order).get(placed["order_id"])
        assert order.status == OrderStatus.PROCESSING.value
        assert order.payment_status == PaymentStatus.COMPLETED.value

        intent = current_domain.repository_for(PaymentIntent).get(placed["intent"]["intent_id"])
        assert intent.status == IntentStatus.COMPLETED.value
        assert intent.completed_via == "client"
        assert intent.gateway_payment_id == "pay_client_001"

    def test_decrements_stock(self, checkout, sign_checkout_callback):
        placed = checkout(stock=5, quantity=2)
        _confirm(placed, sign_checkout_callback)
        assert current_domain.repository_for(Product).get(placed["product_id"]).stock == 3

    def test_repeat_confirmation_changes_nothing(self, checkout, sign_checkout_callback):
        placed = checkout(stock=5, quantity=2)
        _confirm(placed, sign_checkout_callback)

        result = _confirm(placed, sign_checkout_callback)

        assert result["status"] == "already_completed"
        assert current_domain.repository_for(Product).get(placed["product_id"]).stock == 3

    def test_confirmation_after_failure_changes_nothing(self, checkout, sign_checkout_callback, signed_webhook):
        placed = checkout(stock=5, quantity=2)
        receive_webhook(*signed_webhook("payment.failed", placed["intent"]["gateway_order_id"], "pay_client_001"))

        result = _confirm(placed, sign_checkout_callback)

        assert result["status"] == "already_failed"
        order = current_domain.repository_for(Order).get(placed["order_id"])
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.FAILED.value
        assert current_domain.repository_for(Product).get(placed["product_id"]).stock == 5

    def test_invalid_signature(self, checkout, sign_checkout_callback):
        placed = checkout(stock=5, quantity=2)
        with pytest.raises(SignatureMismatch) as exc:
            _confirm(placed, sign_checkout_callback, signature="0" * 64)
        assert "Invalid payment signature" in exc.value.messages["signature"]

        order = current_domain.repository_for(Order).get(placed["order_id"])
        assert order.payment_status == PaymentStatus.PENDING.value
        assert current_domain.repository_for(Product).get(placed["product_id"]).stock == 5

    def test_unknown_gateway_order(self, sign_checkout_callback):
        with pytest.raises(NotFoundError):
            confirm_client_payment(
                customer_id="cust-001",
                gateway_order_id="order_unknown",
                gateway_payment_id="pay_001",
                signature=sign_checkout_callback("order_unknown", "pay_001"),
            )

    def test_someone_elses_payment(self, checkout, sign_checkout_callback):
        placed = checkout(customer_id="cust-001")
        with pytest.raises(ForbiddenError):
            _confirm(placed, sign_checkout_callback, customer_id="cust-002")


class TestUnexpectedFailures:
    def test_failure_during_completion_is_wrapped(self, checkout, sign_checkout_callback):
        placed = checkout(stock=5, quantity=2)

        with mock.patch(
            "storefront.payment.completion._load_products",
            side_effect=RuntimeError("database went away"),
        ):
            with pytest.raises(PaymentProcessingFailed):
                _confirm(placed, sign_checkout_callback)

        intent = current_domain.repository_for(PaymentIntent).get(placed["intent"]["intent_id"])
        assert intent.status == IntentStatus.PENDING.value
        order = current_domain.repository_for(Order).get(placed["order_id"])
        assert order.payment_status == PaymentStatus.PENDING.value
        assert current_domain.repository_for(Product).get(placed["product_id"]).stock == 5

    def test_retry_after_failure_completes(self, checkout, sign_checkout_callback):
        placed = checkout(stock=5, quantity=2)
        with mock.patch(
            "storefront.payment.completion._load_products",
            side_effect=RuntimeError("database went away"),
        ):
            with pytest.raises(PaymentProcessingFailed):
                _confirm(placed, sign_checkout_callback)

        assert _confirm(placed, sign_checkout_callback)["status"] == "completed"
        assert current_domain.repository_for(Product).get(placed["product_id"]).stock == 3
