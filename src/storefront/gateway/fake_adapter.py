"""Configurable fake payment gateway for development and testing.

Issues Razorpay-shaped identifiers without any network traffic and can be
switched to fail at runtime (``/payments/gateway/configure`` outside
production, or directly from tests).
"""

from uuid import uuid4

from storefront.exceptions import GatewayError
from storefront.gateway.port import GatewayCall, GatewayOrder, PaymentGateway, RefundResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, key_id: str = "rzp_test_storefront") -> None:
        self.key_id = key_id
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[GatewayCall] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_order(self, amount_minor: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        self.calls.append(
            GatewayCall(
                method="create_order",
                payload={"amount": amount_minor, "currency": currency, "receipt": receipt, "notes": dict(notes)},
            )
        )
        if not self.should_succeed:
            raise GatewayError({"gateway": [self.failure_reason]})

        return GatewayOrder(
            gateway_order_id=f"order_{uuid4().hex[:14]}",
            amount_minor=amount_minor,
            currency=currency,
            receipt=receipt,
        )

    def create_refund(self, gateway_payment_id: str, amount_minor: int, notes: dict) -> RefundResult:
        self.calls.append(
            GatewayCall(
                method="create_refund",
                payload={"payment_id": gateway_payment_id, "amount": amount_minor, "notes": dict(notes)},
            )
        )
        if self.should_succeed:
            return RefundResult(
                success=True,
                gateway_refund_id=f"rfnd_{uuid4().hex[:14]}",
                gateway_status="processed",
            )
        return RefundResult(success=False, gateway_status="failed", failure_reason=self.failure_reason)
