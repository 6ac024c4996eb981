"""Gateway webhook outcomes: commands and handler.

The HTTP boundary (``storefront.payment.reconciliation``) has already
verified the signature and parsed the envelope; these commands carry the
facts the gateway reported.
"""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, PaymentStatus
from storefront.payment.completion import complete_payment
from storefront.payment.intent import CompletionSource, PaymentIntent

logger = structlog.get_logger(__name__)


@storefront.command(part_of="PaymentIntent")
class RecordPaymentCapture:
    gateway_order_id = String(max_length=100)
    gateway_payment_id = String(required=True, max_length=100)
    method = String(max_length=50)


@storefront.command(part_of="PaymentIntent")
class RecordPaymentFailure:
    gateway_order_id = String(max_length=100)
    gateway_payment_id = String(max_length=100)
    reason = String(max_length=500)


def _find_intent(gateway_order_id, gateway_payment_id):
    repo = current_domain.repository_for(PaymentIntent)
    return repo.find_by_gateway_order_id(gateway_order_id) or repo.find_by_gateway_payment_id(gateway_payment_id)


@storefront.command_handler(part_of=PaymentIntent)
class PaymentWebhookHandler:
    @handle(RecordPaymentCapture)
    def record_capture(self, command):
        intent = _find_intent(command.gateway_order_id, command.gateway_payment_id)
        if intent is None:
            logger.warning(
                "webhook_intent_not_found",
                gateway_order_id=command.gateway_order_id,
                gateway_payment_id=command.gateway_payment_id,
            )
            return "unknown_intent"

        return complete_payment(
            intent,
            gateway_payment_id=command.gateway_payment_id,
            source=CompletionSource.WEBHOOK.value,
            method=command.method,
        )

    @handle(RecordPaymentFailure)
    def record_failure(self, command):
        intent = _find_intent(command.gateway_order_id, command.gateway_payment_id)
        if intent is None:
            logger.warning(
                "webhook_intent_not_found",
                gateway_order_id=command.gateway_order_id,
                gateway_payment_id=command.gateway_payment_id,
            )
            return "unknown_intent"

        if intent.is_completed:
            logger.warning(
                "late_payment_failure_ignored",
                intent_id=str(intent.id),
                gateway_payment_id=command.gateway_payment_id,
            )
            return "already_completed"

        reason = command.reason or "Payment failed"
        if not intent.fail(command.gateway_payment_id, reason):
            return "already_failed"

        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(intent.order_id)
        # The order may already be paid through another intent.
        if order.payment_status == PaymentStatus.PENDING.value:
            order.record_payment_failure(reason)
            order_repo.add(order)

        current_domain.repository_for(PaymentIntent).add(intent)

        logger.info("payment_failed", intent_id=str(intent.id), order_id=str(order.id), reason=reason)
        return "failed"
