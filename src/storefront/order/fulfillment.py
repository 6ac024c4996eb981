"""Admin fulfilment transitions: confirm, ship, deliver."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.order.order import Order


@storefront.command(part_of="Order")
class ConfirmOrder:
    order_id = Identifier(required=True)
    changed_by = String(max_length=100, default="admin")


@storefront.command(part_of="Order")
class ShipOrder:
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=100)
    changed_by = String(max_length=100, default="admin")


@storefront.command(part_of="Order")
class DeliverOrder:
    order_id = Identifier(required=True)
    changed_by = String(max_length=100, default="admin")


@storefront.command_handler(part_of=Order)
class FulfillmentHandler:
    def _load(self, order_id):
        try:
            return current_domain.repository_for(Order).get(order_id)
        except ObjectNotFoundError as exc:
            raise NotFoundError({"order_id": ["Order not found"]}) from exc

    @handle(ConfirmOrder)
    def confirm_order(self, command):
        order = self._load(command.order_id)
        order.confirm(changed_by=command.changed_by)
        current_domain.repository_for(Order).add(order)

    @handle(ShipOrder)
    def ship_order(self, command):
        order = self._load(command.order_id)
        order.ship(tracking_number=command.tracking_number, changed_by=command.changed_by)
        current_domain.repository_for(Order).add(order)

    @handle(DeliverOrder)
    def deliver_order(self, command):
        order = self._load(command.order_id)
        order.deliver(changed_by=command.changed_by)
        current_domain.repository_for(Order).add(order)
