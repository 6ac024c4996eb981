"""Refund request templates: the customer's receipt and the admin review alert."""

from storefront.notification.notification import NotificationChannel, NotificationType
from storefront.shared.money import format_inr


class RefundRequestedTemplate:
    notification_type = NotificationType.REFUND_REQUESTED.value
    default_channels = [NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        if context.get("kind") == "Return":
            return {
                "subject": "Return Request Submitted",
                "body": (
                    f"Your return request for order #{order_number} has been submitted. "
                    "We will review it within 48 hours."
                ),
                "link": "/dashboard/refunds",
            }
        return {
            "subject": "Refund Requested",
            "body": f"Your refund request for order #{order_number} has been submitted and is under review.",
            "link": "/dashboard/refunds",
        }


class RefundReviewTemplate:
    notification_type = NotificationType.REFUND_REVIEW.value
    default_channels = [NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        kind = (context.get("kind") or "Refund").lower()
        return {
            "subject": f"New {kind} request awaiting review",
            "body": (
                f"A {kind} of {format_inr(context.get('amount', 0))} was requested for order "
                f"#{order_number}.\n\nReason: {context.get('reason', 'N/A')}"
            ),
            "link": f"/admin/refunds/{context.get('refund_id', '')}",
        }
