"""Notifications for refund workflow events."""

from protean import handle

from storefront.domain import storefront
from storefront.notification.helpers import (
    REVIEW_QUEUE_RECIPIENT,
    create_internal_notification,
    create_notifications_for_customer,
)
from storefront.notification.notification import Notification, NotificationType
from storefront.refund.events import RefundApproved, RefundCompleted, RefundRejected, RefundRequested


def _context(event, **extra):
    return {
        "refund_id": str(event.refund_id),
        "order_id": str(event.order_id),
        "order_number": event.order_number,
        "amount": event.amount,
        **extra,
    }


@storefront.event_handler(part_of=Notification, stream_category="storefront::refund")
class RefundNotificationHandler:
    @handle(RefundRequested)
    def on_refund_requested(self, event: RefundRequested):
        context = _context(event, kind=event.kind, reason=event.reason)
        create_notifications_for_customer(
            customer_id=str(event.customer_id),
            notification_type=NotificationType.REFUND_REQUESTED.value,
            context=context,
            source_event_type="RefundRequested",
            source_event_id=str(event.refund_id),
        )
        create_internal_notification(
            notification_type=NotificationType.REFUND_REVIEW.value,
            context=context,
            recipient_id=REVIEW_QUEUE_RECIPIENT,
            source_event_type="RefundRequested",
            source_event_id=str(event.refund_id),
        )

    @handle(RefundApproved)
    def on_refund_approved(self, event: RefundApproved):
        create_notifications_for_customer(
            customer_id=str(event.customer_id),
            notification_type=NotificationType.REFUND_APPROVED.value,
            context=_context(event, notes=event.notes),
            source_event_type="RefundApproved",
            source_event_id=str(event.refund_id),
        )

    @handle(RefundRejected)
    def on_refund_rejected(self, event: RefundRejected):
        create_notifications_for_customer(
            customer_id=str(event.customer_id),
            notification_type=NotificationType.REFUND_REJECTED.value,
            context=_context(event, notes=event.notes),
            source_event_type="RefundRejected",
            source_event_id=str(event.refund_id),
        )

    @handle(RefundCompleted)
    def on_refund_completed(self, event: RefundCompleted):
        create_notifications_for_customer(
            customer_id=str(event.customer_id),
            notification_type=NotificationType.REFUND_COMPLETED.value,
            context=_context(event),
            source_event_type="RefundCompleted",
            source_event_id=str(event.refund_id),
        )
