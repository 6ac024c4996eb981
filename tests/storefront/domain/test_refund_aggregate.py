"""Tests for the Refund aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.exceptions import AlreadyProcessed, InvalidTransition
from storefront.order.order import Order, ShippingAddress
from storefront.refund.events import RefundApproved, RefundCompleted, RefundRejected, RefundRequested
from storefront.refund.refund import Refund, RefundKind, RefundStatus


def _paid_order():
    order = Order.place(
        order_number="ORD-RF-00001",
        customer_id="cust-001",
        lines=[
            {"product_id": "prod-1", "product_name": "Saffron", "quantity": 1, "unit_price": 1200.0, "weight": "2g"}
        ],
        shipping_address=ShippingAddress(
            name="Asha Rao", line1="12 MG Road", city="Bengaluru", state="Karnataka", postal_code="560001"
        ),
    )
    order.record_payment("pay_001")
    return order


def _refund(**overrides):
    defaults = {
        "order": _paid_order(),
        "reason": "Package arrived damaged",
        "requested_by": "cust-001",
    }
    defaults.update(overrides)
    return Refund.request(**defaults)


class TestRequest:
    def test_refund_is_for_full_order_total(self):
        refund = _refund()
        assert refund.amount == 1200.0
        assert refund.status == RefundStatus.PENDING.value
        assert refund.kind == RefundKind.REFUND.value
        assert refund.order_number == "ORD-RF-00001"

    def test_raises_requested_event(self):
        refund = _refund(kind=RefundKind.RETURN.value)
        event = next(e for e in refund._events if isinstance(e, RefundRequested))
        assert event.kind == "Return"
        assert event.customer_id == "cust-001"

    @pytest.mark.parametrize("reason", ["", "too short", "         x"])
    def test_reason_must_be_at_least_ten_characters(self, reason):
        with pytest.raises(ValidationError) as exc:
            _refund(reason=reason)
        assert "reason" in exc.value.messages


class TestDecision:
    def test_approve(self):
        refund = _refund()
        refund.approve(processed_by="admin-001", notes="Photos confirm damage")
        assert refund.status == RefundStatus.APPROVED.value
        assert refund.processed_by == "admin-001"
        assert refund.processed_at is not None
        assert any(isinstance(e, RefundApproved) for e in refund._events)

    def test_reject(self):
        refund = _refund()
        refund.reject(processed_by="admin-001", notes="Outside policy")
        assert refund.status == RefundStatus.REJECTED.value
        assert any(isinstance(e, RefundRejected) for e in refund._events)

    def test_second_decision_is_rejected(self):
        refund = _refund()
        refund.approve(processed_by="admin-001")
        with pytest.raises(AlreadyProcessed) as exc:
            refund.reject(processed_by="admin-002")
        assert "Refund has already been processed" in exc.value.messages["refund"]


class TestCompletion:
    def test_complete_after_approval(self):
        refund = _refund()
        refund.approve(processed_by="admin-001")
        refund.complete(gateway_refund_id="rfnd_001")
        assert refund.status == RefundStatus.COMPLETED.value
        assert refund.gateway_refund_id == "rfnd_001"
        assert any(isinstance(e, RefundCompleted) for e in refund._events)

    def test_cannot_complete_pending_refund(self):
        with pytest.raises(InvalidTransition):
            _refund().complete(gateway_refund_id="rfnd_001")

    def test_cannot_complete_rejected_refund(self):
        refund = _refund()
        refund.reject(processed_by="admin-001")
        with pytest.raises(InvalidTransition):
            refund.complete(gateway_refund_id="rfnd_001")
