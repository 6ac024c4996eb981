"""PaymentIntent aggregate (CQRS): the local record of one gateway order.

Each intent belongs to exactly one Order and is created before the customer
pays. It is the conversion boundary between currency amounts (``amount``)
and gateway minor units (``amount_minor``).

State Machine:
    PENDING -> COMPLETED | FAILED
    FAILED  -> COMPLETED   (a later attempt on the same gateway order captured)
    COMPLETED is terminal: a late failure never downgrades it.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront
from storefront.exceptions import InvalidTransition
from storefront.payment.events import PaymentAttemptFailed, PaymentCaptured, PaymentIntentCreated
from storefront.shared.money import from_minor_units


class IntentStatus(Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"


class CompletionSource(Enum):
    CLIENT = "client"
    WEBHOOK = "webhook"


_VALID_TRANSITIONS = {
    IntentStatus.PENDING: {IntentStatus.COMPLETED, IntentStatus.FAILED},
    IntentStatus.FAILED: set(),  # Terminal
    IntentStatus.COMPLETED: set(),  # Terminal
}


@storefront.aggregate
class PaymentIntent:
    gateway_order_id = String(required=True, max_length=100, unique=True)
    gateway_payment_id = String(max_length=100)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True, min_value=0.0)
    amount_minor = Integer(required=True, min_value=0)
    currency = String(max_length=3, default="INR")
    status = String(choices=IntentStatus, default=IntentStatus.PENDING.value)
    method = String(max_length=50)
    signature = String(max_length=255)
    failure_reason = String(max_length=500)
    completed_via = String(choices=CompletionSource)
    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()
    failed_at = DateTime()

    @classmethod
    def issue(cls, order, gateway_order):
        """Record a gateway order created for ``order``."""
        now = datetime.now(UTC)
        intent = cls(
            gateway_order_id=gateway_order.gateway_order_id,
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            amount=from_minor_units(gateway_order.amount_minor),
            amount_minor=gateway_order.amount_minor,
            currency=gateway_order.currency,
            status=IntentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        intent.raise_(
            PaymentIntentCreated(
                intent_id=str(intent.id),
                order_id=str(order.id),
                customer_id=str(order.customer_id),
                gateway_order_id=intent.gateway_order_id,
                amount=intent.amount,
                amount_minor=intent.amount_minor,
                currency=intent.currency,
                created_at=now,
            )
        )
        return intent

    def _assert_can_transition(self, target_status):
        current = IntentStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    @property
    def is_pending(self) -> bool:
        return self.status == IntentStatus.PENDING.value

    @property
    def is_completed(self) -> bool:
        return self.status == IntentStatus.COMPLETED.value

    @property
    def is_failed(self) -> bool:
        return self.status == IntentStatus.FAILED.value

    def complete(self, gateway_payment_id, source, signature=None, method=None):
        self._assert_can_transition(IntentStatus.COMPLETED)

        now = datetime.now(UTC)
        self.status = IntentStatus.COMPLETED.value
        self.gateway_payment_id = gateway_payment_id
        self.completed_via = source
        if signature:
            self.signature = signature
        if method:
            self.method = method
        self.failure_reason = None
        self.completed_at = now
        self.updated_at = now

        self.raise_(
            PaymentCaptured(
                intent_id=str(self.id),
                order_id=str(self.order_id),
                customer_id=str(self.customer_id),
                gateway_order_id=self.gateway_order_id,
                gateway_payment_id=gateway_payment_id,
                amount=self.amount,
                amount_minor=self.amount_minor,
                method=self.method,
                completed_via=source,
                captured_at=now,
            )
        )

    def fail(self, gateway_payment_id, reason):
        """Record a failed attempt. Returns False when nothing changed."""
        if self.status != IntentStatus.PENDING.value:
            return False
        self._assert_can_transition(IntentStatus.FAILED)

        now = datetime.now(UTC)
        self.status = IntentStatus.FAILED.value
        if gateway_payment_id:
            self.gateway_payment_id = gateway_payment_id
        self.failure_reason = reason
        self.failed_at = now
        self.updated_at = now

        self.raise_(
            PaymentAttemptFailed(
                intent_id=str(self.id),
                order_id=str(self.order_id),
                customer_id=str(self.customer_id),
                gateway_order_id=self.gateway_order_id,
                gateway_payment_id=gateway_payment_id,
                reason=reason,
                failed_at=now,
            )
        )
        return True


@storefront.repository(part_of=PaymentIntent)
class PaymentIntentRepository:
    def find_by_gateway_order_id(self, gateway_order_id: str) -> PaymentIntent | None:
        if not gateway_order_id:
            return None
        results = self._dao.query.filter(gateway_order_id=gateway_order_id).all().items
        return results[0] if results else None

    def find_by_gateway_payment_id(self, gateway_payment_id: str) -> PaymentIntent | None:
        if not gateway_payment_id:
            return None
        results = self._dao.query.filter(gateway_payment_id=gateway_payment_id).all().items
        return results[0] if results else None

    def pending_for_order(self, order_id) -> PaymentIntent | None:
        results = self._dao.query.filter(order_id=str(order_id), status=IntentStatus.PENDING.value).all().items
        return results[0] if results else None

    def completed_for_order(self, order_id) -> PaymentIntent | None:
        results = self._dao.query.filter(order_id=str(order_id), status=IntentStatus.COMPLETED.value).all().items
        return results[0] if results else None
