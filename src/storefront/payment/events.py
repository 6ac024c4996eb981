"""Domain events for the PaymentIntent aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="PaymentIntent")
class PaymentIntentCreated:
    __version__ = 1

    intent_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    gateway_order_id = String(required=True)
    amount = Float(required=True)
    amount_minor = Integer(required=True)
    currency = String(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="PaymentIntent")
class PaymentCaptured:
    """The intent completed, through either the client callback or a webhook."""

    __version__ = 1

    intent_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    gateway_order_id = String(required=True)
    gateway_payment_id = String(required=True)
    amount = Float(required=True)
    amount_minor = Integer(required=True)
    method = String()
    completed_via = String(required=True)
    captured_at = DateTime(required=True)


@storefront.event(part_of="PaymentIntent")
class PaymentAttemptFailed:
    __version__ = 1

    intent_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    gateway_order_id = String(required=True)
    gateway_payment_id = String()
    reason = String()
    failed_at = DateTime(required=True)
