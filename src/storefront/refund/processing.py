"""Admin refund decisions and completion.

Approving a refund updates the refund and its order in one Unit of Work.
Completion asks the gateway to return the money and only touches the refund.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import GatewayError, InvalidState, NotFoundError
from storefront.gateway import get_gateway
from storefront.order.order import Order
from storefront.payment.intent import PaymentIntent
from storefront.refund.refund import Refund, RefundAction, RefundStatus
from storefront.shared.money import to_minor_units

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Refund")
class ProcessRefund:
    refund_id = Identifier(required=True)
    action = String(required=True, choices=RefundAction)
    processed_by = Identifier(required=True)
    notes = Text()


@storefront.command(part_of="Refund")
class CompleteRefund:
    refund_id = Identifier(required=True)
    completed_by = Identifier(required=True)


def _load_refund(refund_id):
    try:
        return current_domain.repository_for(Refund).get(refund_id)
    except ObjectNotFoundError as exc:
        raise NotFoundError({"refund_id": ["Refund not found"]}) from exc


@storefront.command_handler(part_of=Refund)
class RefundProcessingHandler:
    @handle(ProcessRefund)
    def process_refund(self, command):
        refund = _load_refund(command.refund_id)

        if command.action == RefundAction.APPROVE.value:
            refund.approve(processed_by=command.processed_by, notes=command.notes)

            order_repo = current_domain.repository_for(Order)
            order = order_repo.get(refund.order_id)
            order.mark_refunded(refund.id, processed_by=command.processed_by)
            order_repo.add(order)
        elif command.action == RefundAction.REJECT.value:
            refund.reject(processed_by=command.processed_by, notes=command.notes)
        else:
            raise ValidationError({"action": ["Action must be APPROVE or REJECT"]})

        current_domain.repository_for(Refund).add(refund)

        logger.info(
            "refund_processed",
            refund_id=str(refund.id),
            order_id=str(refund.order_id),
            action=command.action,
            processed_by=str(command.processed_by),
        )
        return refund.status

    @handle(CompleteRefund)
    def complete_refund(self, command):
        refund = _load_refund(command.refund_id)
        if refund.status != RefundStatus.APPROVED.value:
            raise InvalidState({"refund": ["Only approved refunds can be completed"]})

        intent = current_domain.repository_for(PaymentIntent).completed_for_order(refund.order_id)
        if intent is None or not intent.gateway_payment_id:
            raise InvalidState({"refund": ["No captured payment found for this order"]})

        result = get_gateway().create_refund(
            gateway_payment_id=intent.gateway_payment_id,
            amount_minor=to_minor_units(refund.amount),
            notes={"refund_id": str(refund.id), "order_id": str(refund.order_id)},
        )
        if not result.success:
            logger.error("gateway_refund_failed", refund_id=str(refund.id), reason=result.failure_reason)
            raise GatewayError({"refund": [result.failure_reason or "Gateway refused the refund"]})

        refund.complete(gateway_refund_id=result.gateway_refund_id)
        current_domain.repository_for(Refund).add(refund)

        logger.info(
            "refund_completed",
            refund_id=str(refund.id),
            gateway_refund_id=result.gateway_refund_id,
            completed_by=str(command.completed_by),
        )
        return refund.status
