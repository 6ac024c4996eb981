from storefront.notification.notification import NotificationChannel, NotificationType


class OrderCancellationTemplate:
    notification_type = NotificationType.ORDER_CANCELLATION.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        reason = context.get("reason")
        body = f"Your order #{order_number} has been cancelled."
        if reason:
            body += f"\n\nReason: {reason}"
        return {
            "subject": "Order Cancelled",
            "body": body,
            "link": f"/dashboard/orders/{context.get('order_id', '')}",
        }
