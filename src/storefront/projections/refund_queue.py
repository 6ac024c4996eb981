"""Refund queue: admin view of refund and return requests awaiting review."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.refund.events import RefundApproved, RefundCompleted, RefundRejected, RefundRequested
from storefront.refund.refund import Refund


@storefront.projection
class RefundQueue:
    refund_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    kind = String(required=True)
    amount = Float(required=True)
    reason = Text()
    status = String(required=True)
    requested_at = DateTime()
    processed_at = DateTime()


@storefront.projector(projector_for=RefundQueue, aggregates=[Refund])
class RefundQueueProjector:
    @on(RefundRequested)
    def on_refund_requested(self, event):
        current_domain.repository_for(RefundQueue).add(
            RefundQueue(
                refund_id=event.refund_id,
                order_id=event.order_id,
                order_number=event.order_number,
                customer_id=event.customer_id,
                kind=event.kind,
                amount=event.amount,
                reason=event.reason,
                status="Pending",
                requested_at=event.requested_at,
            )
        )

    def _update_status(self, refund_id, status, processed_at=None):
        repo = current_domain.repository_for(RefundQueue)
        record = repo.get(refund_id)
        record.status = status
        if processed_at:
            record.processed_at = processed_at
        repo.add(record)

    @on(RefundApproved)
    def on_refund_approved(self, event):
        self._update_status(event.refund_id, "Approved", event.processed_at)

    @on(RefundRejected)
    def on_refund_rejected(self, event):
        self._update_status(event.refund_id, "Rejected", event.processed_at)

    @on(RefundCompleted)
    def on_refund_completed(self, event):
        self._update_status(event.refund_id, "Completed")
