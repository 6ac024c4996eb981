"""Operations alert when a paid order could not be fully covered by stock."""

from protean import handle

from storefront.domain import storefront
from storefront.notification.helpers import create_internal_notification
from storefront.notification.notification import Notification, NotificationType
from storefront.product.events import StockShortfallDetected


@storefront.event_handler(part_of=Notification, stream_category="storefront::product")
class StockNotificationHandler:
    @handle(StockShortfallDetected)
    def on_stock_shortfall(self, event: StockShortfallDetected):
        create_internal_notification(
            notification_type=NotificationType.STOCK_SHORTFALL.value,
            context={
                "product_id": str(event.product_id),
                "product_name": event.product_name,
                "order_id": str(event.order_id),
                "requested": event.requested,
                "available": event.available,
                "shortfall": event.shortfall,
            },
            source_event_type="StockShortfallDetected",
            source_event_id=str(event.order_id),
        )
