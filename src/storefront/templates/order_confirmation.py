"""Order confirmation template: sent when an order's payment completes."""

from storefront.notification.notification import NotificationChannel, NotificationType
from storefront.shared.money import format_inr


class OrderConfirmationTemplate:
    notification_type = NotificationType.ORDER_CONFIRMATION.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        total = format_inr(context.get("total", 0))
        return {
            "subject": f"Order Confirmed - #{order_number}",
            "body": (
                f"Thank you for your order! Your payment of {total} for order "
                f"#{order_number} has been received.\n\n"
                "We are preparing your order and will let you know as soon as it ships."
            ),
            "link": f"/dashboard/orders/{context.get('order_id', '')}",
        }
