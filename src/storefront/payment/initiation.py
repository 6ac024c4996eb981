"""Payment intent issuance: command and handler.

Registers the order with the gateway (amount in minor units, receipt = order
number) and records a PENDING PaymentIntent. Asking again while an intent is
still pending returns that intent instead of opening a second gateway order.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import ForbiddenError, InvalidState, NotFoundError
from storefront.gateway import get_gateway
from storefront.order.order import Order, PaymentStatus
from storefront.payment.intent import PaymentIntent
from storefront.settings import get_settings
from storefront.shared.money import to_minor_units

logger = structlog.get_logger(__name__)


@storefront.command(part_of="PaymentIntent")
class CreatePaymentIntent:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


def _intent_response(intent, key_id):
    return {
        "intent_id": str(intent.id),
        "gateway_order_id": intent.gateway_order_id,
        "amount": intent.amount_minor,
        "currency": intent.currency,
        "key_id": key_id,
    }


@storefront.command_handler(part_of=PaymentIntent)
class CreatePaymentIntentHandler:
    @handle(CreatePaymentIntent)
    def create_intent(self, command):
        order_repo = current_domain.repository_for(Order)
        try:
            order = order_repo.get(command.order_id)
        except ObjectNotFoundError as exc:
            raise NotFoundError({"order_id": ["Order not found"]}) from exc

        if not order.is_owned_by(command.customer_id):
            raise ForbiddenError({"order_id": ["Order belongs to another customer"]})
        if order.payment_status in (PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value):
            raise InvalidState({"order_id": ["Order already paid"]})
        if order.is_cancelled:
            raise InvalidState({"order_id": ["Order has been cancelled"]})

        gateway = get_gateway()
        intent_repo = current_domain.repository_for(PaymentIntent)

        existing = intent_repo.pending_for_order(order.id)
        if existing is not None:
            logger.info("payment_intent_reused", intent_id=str(existing.id), order_id=str(order.id))
            return _intent_response(existing, gateway.key_id)

        if order.payment_status == PaymentStatus.FAILED.value:
            order.reopen_payment()
            order_repo.add(order)

        gateway_order = gateway.create_order(
            amount_minor=to_minor_units(order.total),
            currency=get_settings().currency,
            receipt=order.order_number,
            notes={"order_id": str(order.id), "customer_id": str(order.customer_id)},
        )
        intent = PaymentIntent.issue(order, gateway_order)
        intent_repo.add(intent)

        logger.info(
            "payment_intent_created",
            intent_id=str(intent.id),
            order_id=str(order.id),
            gateway_order_id=intent.gateway_order_id,
            amount_minor=intent.amount_minor,
        )
        return _intent_response(intent, gateway.key_id)
