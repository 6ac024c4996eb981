"""Customer notifications for order fulfilment events."""

from protean import handle

from storefront.domain import storefront
from storefront.notification.helpers import create_notifications_for_customer
from storefront.notification.notification import Notification, NotificationType
from storefront.order.events import OrderCancelled, OrderConfirmed, OrderDelivered, OrderShipped


def notify_order_customer(event, notification_type, **context):
    return create_notifications_for_customer(
        customer_id=str(event.customer_id),
        notification_type=notification_type,
        context={"order_id": str(event.order_id), "order_number": event.order_number, **context},
        source_event_type=type(event).__name__,
        source_event_id=str(event.order_id),
    )


@storefront.event_handler(part_of=Notification, stream_category="storefront::order")
class OrderNotificationHandler:
    @handle(OrderConfirmed)
    def on_order_confirmed(self, event: OrderConfirmed):
        notify_order_customer(event, NotificationType.ORDER_STATUS_UPDATE.value, status="Confirmed")

    @handle(OrderShipped)
    def on_order_shipped(self, event: OrderShipped):
        notify_order_customer(event, NotificationType.SHIPPING_UPDATE.value, tracking_number=event.tracking_number)

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered):
        notify_order_customer(event, NotificationType.DELIVERY_CONFIRMATION.value)

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled):
        notify_order_customer(
            event,
            NotificationType.ORDER_CANCELLATION.value,
            reason=event.reason,
            cancelled_by=event.cancelled_by,
        )
