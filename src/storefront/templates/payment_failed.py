from storefront.notification.notification import NotificationChannel, NotificationType


class PaymentFailedTemplate:
    notification_type = NotificationType.PAYMENT_FAILED.value
    default_channels = [NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        reason = context.get("reason") or "the payment was declined"
        return {
            "subject": "Payment Failed",
            "body": (
                f"Payment for order #{order_number} did not go through: {reason}. "
                "You can retry the payment from your orders page."
            ),
            "link": f"/dashboard/orders/{context.get('order_id', '')}",
        }
