"""Internal alerts for the operations team."""

from storefront.notification.notification import NotificationChannel, NotificationType
from storefront.shared.money import format_inr


class StockShortfallTemplate:
    notification_type = NotificationType.STOCK_SHORTFALL.value
    default_channels = [NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        product_name = context.get("product_name", "Unknown product")
        return {
            "subject": f"Stock shortfall: {product_name}",
            "body": (
                f"A paid order ({context.get('order_id', 'N/A')}) needed {context.get('requested', 0)} units "
                f"of {product_name} but only {context.get('available', 0)} were in stock. "
                f"{context.get('shortfall', 0)} units must be sourced."
            ),
            "link": f"/admin/products/{context.get('product_id', '')}",
        }


class LatePaymentTemplate:
    notification_type = NotificationType.LATE_PAYMENT.value
    default_channels = [NotificationChannel.IN_APP.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Payment received for cancelled order #{order_number}",
            "body": (
                f"Payment {context.get('gateway_payment_id', 'N/A')} of {format_inr(context.get('total', 0))} "
                f"was captured after order #{order_number} was cancelled. Issue a refund."
            ),
            "link": f"/admin/orders/{context.get('order_id', '')}",
        }
