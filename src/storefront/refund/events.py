"""Domain events for the Refund aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Refund")
class RefundRequested:
    __version__ = 1

    refund_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    kind = String(required=True)
    amount = Float(required=True)
    reason = Text(required=True)
    requested_by = Identifier(required=True)
    requested_at = DateTime(required=True)


@storefront.event(part_of="Refund")
class RefundApproved:
    __version__ = 1

    refund_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    processed_by = Identifier(required=True)
    notes = Text()
    processed_at = DateTime(required=True)


@storefront.event(part_of="Refund")
class RefundRejected:
    __version__ = 1

    refund_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    processed_by = Identifier(required=True)
    notes = Text()
    processed_at = DateTime(required=True)


@storefront.event(part_of="Refund")
class RefundCompleted:
    __version__ = 1

    refund_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    gateway_refund_id = String()
    completed_at = DateTime(required=True)
