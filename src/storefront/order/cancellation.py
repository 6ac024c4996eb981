"""Order cancellation: command and handler.

Customers may cancel their own orders until they ship; admins may cancel any
order that has not reached a terminal status. A webhook that arrives for a
cancelled order finds nothing left to fulfil and only records the payment.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.order.order import CancellationActor, Order


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requested_by = Identifier(required=True)
    reason = String(max_length=500)
    cancelled_by = String(choices=CancellationActor, default=CancellationActor.CUSTOMER.value)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError as exc:
            raise NotFoundError({"order_id": ["Order not found"]}) from exc

        is_customer = command.cancelled_by == CancellationActor.CUSTOMER.value
        if is_customer and not order.is_owned_by(command.requested_by):
            raise NotFoundError({"order_id": ["Order not found"]})

        order.cancel(
            reason=command.reason or "Cancelled by customer",
            cancelled_by=command.cancelled_by,
            changed_by=str(command.requested_by),
        )
        repo.add(order)
