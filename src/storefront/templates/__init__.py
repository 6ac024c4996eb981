"""Template registry: maps NotificationType to template classes.

Each template knows its default channels and renders subject, body and an
optional in-app link from event context.
"""

from storefront.notification.notification import NotificationType
from storefront.templates.operations import LatePaymentTemplate, StockShortfallTemplate
from storefront.templates.order_cancellation import OrderCancellationTemplate
from storefront.templates.order_confirmation import OrderConfirmationTemplate
from storefront.templates.order_status import (
    DeliveryConfirmationTemplate,
    OrderStatusUpdateTemplate,
    ShippingUpdateTemplate,
)
from storefront.templates.payment_failed import PaymentFailedTemplate
from storefront.templates.refund_decision import (
    RefundApprovedTemplate,
    RefundCompletedTemplate,
    RefundRejectedTemplate,
)
from storefront.templates.refund_request import RefundRequestedTemplate, RefundReviewTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_CONFIRMATION.value: OrderConfirmationTemplate,
    NotificationType.PAYMENT_FAILED.value: PaymentFailedTemplate,
    NotificationType.ORDER_STATUS_UPDATE.value: OrderStatusUpdateTemplate,
    NotificationType.SHIPPING_UPDATE.value: ShippingUpdateTemplate,
    NotificationType.DELIVERY_CONFIRMATION.value: DeliveryConfirmationTemplate,
    NotificationType.ORDER_CANCELLATION.value: OrderCancellationTemplate,
    NotificationType.REFUND_REQUESTED.value: RefundRequestedTemplate,
    NotificationType.REFUND_REVIEW.value: RefundReviewTemplate,
    NotificationType.REFUND_APPROVED.value: RefundApprovedTemplate,
    NotificationType.REFUND_REJECTED.value: RefundRejectedTemplate,
    NotificationType.REFUND_COMPLETED.value: RefundCompletedTemplate,
    NotificationType.STOCK_SHORTFALL.value: StockShortfallTemplate,
    NotificationType.LATE_PAYMENT.value: LatePaymentTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
