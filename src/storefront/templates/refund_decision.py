"""Refund outcome templates. Each decision has its own customer-facing copy."""

from storefront.notification.notification import NotificationChannel, NotificationType
from storefront.shared.money import format_inr


class RefundApprovedTemplate:
    notification_type = NotificationType.REFUND_APPROVED.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        amount = format_inr(context.get("amount", 0))
        return {
            "subject": "Refund APPROVED",
            "body": (
                f"Your refund of {amount} for order #{order_number} has been approved. "
                "The amount will be credited to your original payment method within 5-7 business days."
            ),
            "link": "/dashboard/refunds",
        }


class RefundRejectedTemplate:
    notification_type = NotificationType.REFUND_REJECTED.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        body = (
            f"Your refund request for order #{order_number} has been rejected "
            "as it does not meet our return policy."
        )
        if context.get("notes"):
            body += f"\n\nNotes: {context['notes']}"
        return {"subject": "Refund REJECTED", "body": body, "link": "/dashboard/refunds"}


class RefundCompletedTemplate:
    notification_type = NotificationType.REFUND_COMPLETED.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        amount = format_inr(context.get("amount", 0))
        return {
            "subject": "Refund COMPLETED",
            "body": (
                f"Your refund of {amount} for order #{order_number} has been processed "
                "and transferred to your original payment method."
            ),
            "link": "/dashboard/refunds",
        }
