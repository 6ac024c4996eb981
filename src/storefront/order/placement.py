"""Order placement: command and handler.

Validates the shipping address and every requested product, freezes the
current catalogue prices onto the order lines and persists a PENDING order.
Stock is only checked here; it is decremented when payment completes.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.address.address import Address
from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.order.numbering import next_order_number
from storefront.order.order import Order, ShippingAddress
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{"product_id", "quantity", "weight"}]
    shipping_address_id = Identifier(required=True)
    notes = Text()


def _load_address(address_id, customer_id):
    try:
        address = current_domain.repository_for(Address).get(address_id)
    except ObjectNotFoundError:
        address = None
    if address is None or not address.belongs_to(customer_id):
        raise ValidationError({"shipping_address_id": ["Invalid shipping address"]})
    return address


def _load_product(product_id):
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError as exc:
        raise NotFoundError({"product_id": [f"Product {product_id} not found"]}) from exc


def _price_lines(requested_items):
    """Price each line. Lines naming the same product are checked against stock together."""
    lines = []
    products = {}
    requested = {}
    for item in requested_items:
        product_id = item.get("product_id")
        quantity = int(item.get("quantity") or 0)
        if not product_id:
            raise ValidationError({"product_id": ["Product is required"]})
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        if product_id not in products:
            products[product_id] = _load_product(product_id)
        product = products[product_id]
        requested[product_id] = requested.get(product_id, 0) + quantity
        product.assert_can_sell(requested[product_id])
        lines.append(
            {
                "product_id": str(product.id),
                "product_name": product.name,
                "quantity": quantity,
                "unit_price": product.price,
                "weight": item.get("weight") or product.weight,
            }
        )
    return lines


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        requested_items = json.loads(command.items) if isinstance(command.items, str) else command.items
        if not requested_items:
            raise ValidationError({"items": ["Cart is empty"]})

        address = _load_address(command.shipping_address_id, command.customer_id)
        lines = _price_lines(requested_items)

        order = Order.place(
            order_number=next_order_number(),
            customer_id=command.customer_id,
            lines=lines,
            shipping_address=ShippingAddress.snapshot(address),
            notes=command.notes,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            total=order.total,
        )
        return str(order.id)
