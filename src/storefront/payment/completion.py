"""The completion transition shared by the client callback and the webhook.

``complete_payment`` runs inside the caller's Unit of Work, so the intent
guard, the order update and the stock decrements commit or roll back
together. Every aggregate is loaded and mutated before any is written: a
failure part way leaves nothing persisted and the intent still Pending,
ready for the next delivery. Only a Pending intent completes; a Completed or
Failed one is left alone and the caller gets an idempotent outcome.

Notifications are not sent here. ``OrderPaid`` and ``PaymentCaptured`` are
picked up by the notification handlers once the unit commits.
"""

from collections import OrderedDict

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.exceptions import NotFoundError
from storefront.order.order import Order, PaymentStatus
from storefront.payment.intent import PaymentIntent
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


def _quantities_by_product(order):
    quantities = OrderedDict()
    for item in order.items:
        key = str(item.product_id)
        quantities[key] = quantities.get(key, 0) + item.quantity
    return quantities


def _load_products(quantities):
    repo = current_domain.repository_for(Product)
    products = []
    for product_id in quantities:
        try:
            products.append(repo.get(product_id))
        except ObjectNotFoundError as exc:
            raise NotFoundError({"product_id": [f"Product {product_id} not found"]}) from exc
    return products


def complete_payment(intent, gateway_payment_id, source, signature=None, method=None) -> str:
    """Apply the completion transition to ``intent`` and its order.

    Returns ``"completed"``, or ``"already_completed"`` / ``"already_failed"``
    without changing anything when the intent is no longer Pending.
    """
    if not intent.is_pending:
        outcome = "already_completed" if intent.is_completed else "already_failed"
        logger.info(
            "payment_completion_skipped",
            intent_id=str(intent.id),
            intent_status=intent.status,
            gateway_payment_id=gateway_payment_id,
            source=source,
        )
        return outcome

    order_repo = current_domain.repository_for(Order)
    order = order_repo.get(intent.order_id)

    intent.complete(gateway_payment_id=gateway_payment_id, source=source, signature=signature, method=method)

    if order.payment_status in (PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value):
        # Paid through an earlier intent; this capture needs a manual refund.
        logger.warning(
            "order_paid_twice",
            order_id=str(order.id),
            intent_id=str(intent.id),
            gateway_payment_id=gateway_payment_id,
        )
        current_domain.repository_for(PaymentIntent).add(intent)
        return "completed"

    fulfil = order.record_payment(gateway_payment_id, changed_by=source)

    products = []
    if fulfil:
        quantities = _quantities_by_product(order)
        products = _load_products(quantities)
        for product in products:
            product.decrement_stock(quantities[str(product.id)], order.id)
    else:
        logger.warning(
            "payment_received_for_cancelled_order",
            order_id=str(order.id),
            order_number=order.order_number,
            gateway_payment_id=gateway_payment_id,
        )

    current_domain.repository_for(PaymentIntent).add(intent)
    order_repo.add(order)
    product_repo = current_domain.repository_for(Product)
    for product in products:
        product_repo.add(product)

    logger.info(
        "payment_completed",
        intent_id=str(intent.id),
        order_id=str(order.id),
        gateway_payment_id=gateway_payment_id,
        source=source,
    )
    return "completed"
