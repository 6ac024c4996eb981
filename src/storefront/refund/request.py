"""Refund and return requests: command and handler."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import DuplicateRefund, NotFoundError
from storefront.order.order import Order
from storefront.refund.refund import Refund, RefundKind
from storefront.settings import get_settings

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Refund")
class RequestRefund:
    order_id = Identifier(required=True)
    requested_by = Identifier(required=True)
    reason = Text(required=True)
    kind = String(choices=RefundKind, default=RefundKind.REFUND.value)
    description = Text()
    is_admin = Boolean(default=False)


@storefront.command_handler(part_of=Refund)
class RequestRefundHandler:
    @handle(RequestRefund)
    def request_refund(self, command):
        order_repo = current_domain.repository_for(Order)
        refund_repo = current_domain.repository_for(Refund)

        try:
            order = order_repo.get(command.order_id)
        except ObjectNotFoundError as exc:
            raise NotFoundError({"order_id": ["Order not found"]}) from exc
        if not command.is_admin and not order.is_owned_by(command.requested_by):
            raise NotFoundError({"order_id": ["Order not found"]})

        if order.refund_id or refund_repo.find_for_order(order.id) is not None:
            raise DuplicateRefund({"order_id": ["A refund has already been requested for this order"]})

        order.assert_payment_completed()
        if command.kind == RefundKind.RETURN.value:
            order.assert_returnable(get_settings().return_window_days)

        refund = Refund.request(
            order,
            reason=command.reason,
            requested_by=command.requested_by,
            kind=command.kind or RefundKind.REFUND.value,
            description=command.description,
        )
        order.link_refund(str(refund.id))

        refund_repo.add(refund)
        order_repo.add(order)

        logger.info(
            "refund_requested",
            refund_id=str(refund.id),
            order_id=str(order.id),
            kind=refund.kind,
            amount=refund.amount,
        )
        return str(refund.id)
