"""Notification aggregate (CQRS): one message to one recipient on one channel.

Notifications are created by event handlers after the transition that caused
them has committed. The order, payment and refund logic never reads them.

State Machine:
    PENDING -> SENT
    PENDING -> FAILED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from storefront.domain import storefront
from storefront.notification.events import (
    NotificationCreated,
    NotificationFailed,
    NotificationRead,
    NotificationSent,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    ORDER_CONFIRMATION = "OrderConfirmation"
    PAYMENT_FAILED = "PaymentFailed"
    ORDER_STATUS_UPDATE = "OrderStatusUpdate"
    SHIPPING_UPDATE = "ShippingUpdate"
    DELIVERY_CONFIRMATION = "DeliveryConfirmation"
    ORDER_CANCELLATION = "OrderCancellation"
    REFUND_REQUESTED = "RefundRequested"
    REFUND_REVIEW = "RefundReview"
    REFUND_APPROVED = "RefundApproved"
    REFUND_REJECTED = "RefundRejected"
    REFUND_COMPLETED = "RefundCompleted"
    STOCK_SHORTFALL = "StockShortfall"
    LATE_PAYMENT = "LatePayment"


class NotificationChannel(Enum):
    EMAIL = "Email"
    IN_APP = "InApp"


class NotificationStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"


class RecipientType(Enum):
    CUSTOMER = "Customer"
    INTERNAL = "Internal"


_VALID_TRANSITIONS = {
    NotificationStatus.PENDING: {NotificationStatus.SENT, NotificationStatus.FAILED},
    NotificationStatus.SENT: set(),  # Terminal
    NotificationStatus.FAILED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Notification:
    recipient_id: Identifier(required=True)
    recipient_type: String(choices=RecipientType, default=RecipientType.CUSTOMER.value)

    notification_type: String(choices=NotificationType, required=True)
    channel: String(choices=NotificationChannel, required=True)

    subject: String(max_length=500)
    body: Text(required=True)
    link: String(max_length=500)

    # Source event correlation
    source_event_type: String(max_length=200)
    source_event_id: String(max_length=200)

    status: String(choices=NotificationStatus, default=NotificationStatus.PENDING.value)
    failure_reason: String(max_length=500)

    sent_at: DateTime()
    read_at: DateTime()
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(
        cls,
        recipient_id,
        notification_type,
        channel,
        body,
        subject=None,
        link=None,
        recipient_type=RecipientType.CUSTOMER.value,
        source_event_type=None,
        source_event_id=None,
    ):
        """Create a new notification in PENDING status."""
        now = datetime.now(UTC)

        notification = cls(
            recipient_id=recipient_id,
            recipient_type=recipient_type,
            notification_type=notification_type,
            channel=channel,
            subject=subject,
            body=body,
            link=link,
            source_event_type=source_event_type,
            source_event_id=source_event_id,
            status=NotificationStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                recipient_id=str(recipient_id),
                recipient_type=recipient_type,
                notification_type=notification_type,
                channel=channel,
                subject=subject,
                source_event_type=source_event_type,
                created_at=now,
            )
        )

        return notification

    def _assert_can_transition(self, target_status):
        current = NotificationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def mark_sent(self, sent_at=None):
        self._assert_can_transition(NotificationStatus.SENT)

        now = sent_at or datetime.now(UTC)
        self.status = NotificationStatus.SENT.value
        self.sent_at = now
        self.updated_at = now

        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                sent_at=now,
            )
        )

    def mark_failed(self, reason):
        self._assert_can_transition(NotificationStatus.FAILED)

        now = datetime.now(UTC)
        self.status = NotificationStatus.FAILED.value
        self.failure_reason = reason
        self.updated_at = now

        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                reason=reason,
                failed_at=now,
            )
        )

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def mark_read(self):
        """Inbox acknowledgement. Only in-app notifications can be read."""
        if self.channel != NotificationChannel.IN_APP.value:
            raise ValidationError({"channel": ["Only in-app notifications can be marked as read"]})
        if self.is_read:
            return

        now = datetime.now(UTC)
        self.read_at = now
        self.updated_at = now
        self.raise_(NotificationRead(notification_id=str(self.id), recipient_id=str(self.recipient_id), read_at=now))


@storefront.repository(part_of=Notification)
class NotificationRepository:
    def inbox(self, recipient_id, unread_only=False) -> list[Notification]:
        notifications = (
            self._dao.query.filter(recipient_id=str(recipient_id), channel=NotificationChannel.IN_APP.value)
            .order_by("-created_at")
            .all()
            .items
        )
        if unread_only:
            return [n for n in notifications if not n.is_read]
        return notifications

    def for_source(self, source_event_type, source_event_id=None) -> list[Notification]:
        filters = {"source_event_type": source_event_type}
        if source_event_id is not None:
            filters["source_event_id"] = str(source_event_id)
        return self._dao.query.filter(**filters).all().items
