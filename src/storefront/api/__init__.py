"""Storefront HTTP API package."""

from storefront.api.errors import register_error_handlers
from storefront.api.routes import (
    address_router,
    notification_router,
    order_router,
    payment_router,
    product_router,
    refund_router,
)

__all__ = [
    "address_router",
    "notification_router",
    "order_router",
    "payment_router",
    "product_router",
    "refund_router",
    "register_error_handlers",
]
