"""Notifications for the payment axis of an order.

Listens for OrderPaid (confirmation), OrderPaymentFailed (retry prompt) and
PaymentReceivedForCancelledOrder (operations alert to refund).
"""

import structlog
from protean import handle

from storefront.domain import storefront
from storefront.notification.helpers import create_internal_notification
from storefront.notification.notification import Notification, NotificationType
from storefront.notification.order_events import notify_order_customer
from storefront.order.events import OrderPaid, OrderPaymentFailed, PaymentReceivedForCancelledOrder

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Notification, stream_category="storefront::order")
class PaymentNotificationHandler:
    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid):
        notify_order_customer(event, NotificationType.ORDER_CONFIRMATION.value, total=event.total)

    @handle(OrderPaymentFailed)
    def on_payment_failed(self, event: OrderPaymentFailed):
        notify_order_customer(event, NotificationType.PAYMENT_FAILED.value, reason=event.reason)

    @handle(PaymentReceivedForCancelledOrder)
    def on_late_payment(self, event: PaymentReceivedForCancelledOrder):
        logger.warning(
            "payment_received_for_cancelled_order",
            order_id=str(event.order_id),
            gateway_payment_id=event.gateway_payment_id,
        )
        create_internal_notification(
            notification_type=NotificationType.LATE_PAYMENT.value,
            context={
                "order_id": str(event.order_id),
                "order_number": event.order_number,
                "total": event.total,
                "gateway_payment_id": event.gateway_payment_id,
            },
            source_event_type="PaymentReceivedForCancelledOrder",
            source_event_id=str(event.order_id),
        )
