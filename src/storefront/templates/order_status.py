"""Fulfilment progress templates: confirmed, shipped, delivered."""

from storefront.notification.notification import NotificationChannel, NotificationType


class OrderStatusUpdateTemplate:
    notification_type = NotificationType.ORDER_STATUS_UPDATE.value
    default_channels = [NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        status = context.get("status", "updated")
        return {
            "subject": "Order Status Updated",
            "body": f"Your order #{order_number} is now {status}.",
            "link": f"/dashboard/orders/{context.get('order_id', '')}",
        }


class ShippingUpdateTemplate:
    notification_type = NotificationType.SHIPPING_UPDATE.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        tracking_number = context.get("tracking_number", "N/A")
        return {
            "subject": f"Your order #{order_number} has shipped",
            "body": (
                f"Good news! Your order #{order_number} is on its way.\n\n"
                f"Tracking number: {tracking_number}"
            ),
            "link": f"/dashboard/orders/{context.get('order_id', '')}",
        }


class DeliveryConfirmationTemplate:
    notification_type = NotificationType.DELIVERY_CONFIRMATION.value
    default_channels = [NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": "Order Delivered",
            "body": (
                f"Your order #{order_number} has been delivered. "
                "If anything is wrong you can request a return within 30 days."
            ),
            "link": f"/dashboard/orders/{context.get('order_id', '')}",
        }
