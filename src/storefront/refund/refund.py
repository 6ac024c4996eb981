"""Refund aggregate (CQRS): one per order, reviewed by an admin.

State Machine:
    PENDING -> APPROVED -> COMPLETED
    PENDING -> REJECTED

Approval is what moves the order to CANCELLED/REFUNDED. Completion only
records that the money has actually been returned.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront
from storefront.exceptions import AlreadyProcessed, InvalidTransition
from storefront.refund.events import RefundApproved, RefundCompleted, RefundRejected, RefundRequested

MIN_REASON_LENGTH = 10


class RefundStatus(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    COMPLETED = "Completed"


class RefundKind(Enum):
    REFUND = "Refund"
    RETURN = "Return"


class RefundAction(Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


_VALID_TRANSITIONS = {
    RefundStatus.PENDING: {RefundStatus.APPROVED, RefundStatus.REJECTED},
    RefundStatus.APPROVED: {RefundStatus.COMPLETED},
    RefundStatus.REJECTED: set(),  # Terminal
    RefundStatus.COMPLETED: set(),  # Terminal
}


@storefront.aggregate
class Refund:
    order_id = Identifier(required=True, unique=True)
    order_number = String(required=True, max_length=50)
    customer_id = Identifier(required=True)
    kind = String(choices=RefundKind, default=RefundKind.REFUND.value)
    amount = Float(required=True, min_value=0.0)
    reason = Text(required=True)
    description = Text()
    status = String(choices=RefundStatus, default=RefundStatus.PENDING.value)
    requested_by = Identifier(required=True)
    processed_by = Identifier()
    notes = Text()
    gateway_refund_id = String(max_length=100)
    requested_at = DateTime()
    processed_at = DateTime()
    completed_at = DateTime()

    @classmethod
    def request(cls, order, reason, requested_by, kind=RefundKind.REFUND.value, description=None):
        """Open a refund for the full order total."""
        reason = (reason or "").strip()
        if len(reason) < MIN_REASON_LENGTH:
            raise ValidationError({"reason": [f"Reason must be at least {MIN_REASON_LENGTH} characters"]})

        now = datetime.now(UTC)
        refund = cls(
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            kind=kind,
            amount=order.total,
            reason=reason,
            description=description,
            status=RefundStatus.PENDING.value,
            requested_by=requested_by,
            requested_at=now,
        )
        refund.raise_(
            RefundRequested(
                refund_id=str(refund.id),
                order_id=str(order.id),
                order_number=order.order_number,
                customer_id=str(order.customer_id),
                kind=kind,
                amount=refund.amount,
                reason=reason,
                requested_by=requested_by,
                requested_at=now,
            )
        )
        return refund

    def _assert_can_transition(self, target_status):
        current = RefundStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _assert_pending(self):
        if self.status != RefundStatus.PENDING.value:
            raise AlreadyProcessed({"refund": ["Refund has already been processed"]})

    def approve(self, processed_by, notes=None):
        self._assert_pending()
        self._assert_can_transition(RefundStatus.APPROVED)

        now = datetime.now(UTC)
        self.status = RefundStatus.APPROVED.value
        self.processed_by = processed_by
        self.processed_at = now
        self.notes = notes

        self.raise_(
            RefundApproved(
                refund_id=str(self.id),
                order_id=str(self.order_id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                amount=self.amount,
                processed_by=processed_by,
                notes=notes,
                processed_at=now,
            )
        )

    def reject(self, processed_by, notes=None):
        self._assert_pending()
        self._assert_can_transition(RefundStatus.REJECTED)

        now = datetime.now(UTC)
        self.status = RefundStatus.REJECTED.value
        self.processed_by = processed_by
        self.processed_at = now
        self.notes = notes

        self.raise_(
            RefundRejected(
                refund_id=str(self.id),
                order_id=str(self.order_id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                amount=self.amount,
                processed_by=processed_by,
                notes=notes,
                processed_at=now,
            )
        )

    def complete(self, gateway_refund_id=None):
        self._assert_can_transition(RefundStatus.COMPLETED)

        now = datetime.now(UTC)
        self.status = RefundStatus.COMPLETED.value
        self.gateway_refund_id = gateway_refund_id
        self.completed_at = now

        self.raise_(
            RefundCompleted(
                refund_id=str(self.id),
                order_id=str(self.order_id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                amount=self.amount,
                gateway_refund_id=gateway_refund_id,
                completed_at=now,
            )
        )


@storefront.repository(part_of=Refund)
class RefundRepository:
    def find_for_order(self, order_id) -> Refund | None:
        results = self._dao.query.filter(order_id=str(order_id)).all().items
        return results[0] if results else None

    def search(self, customer_id=None, status=None) -> list[Refund]:
        filters = {}
        if customer_id is not None:
            filters["customer_id"] = str(customer_id)
        if status is not None:
            filters["status"] = status
        return self._dao.query.filter(**filters).order_by("-requested_at").all().items
