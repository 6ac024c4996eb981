"""Client-side payment confirmation: command and handler.

After checkout the browser posts back the gateway order id, payment id and
the gateway's signature over ``"<order_id>|<payment_id>"``. The signature is
checked before anything is loaded.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import ForbiddenError, NotFoundError, SignatureMismatch
from storefront.order.order import Order
from storefront.payment.completion import complete_payment
from storefront.payment.intent import CompletionSource, PaymentIntent
from storefront.settings import get_settings
from storefront.shared.signatures import verify_checkout


@storefront.command(part_of="PaymentIntent")
class ConfirmPayment:
    customer_id = Identifier(required=True)
    gateway_order_id = String(required=True, max_length=100)
    gateway_payment_id = String(required=True, max_length=100)
    signature = String(required=True, max_length=255)


@storefront.command_handler(part_of=PaymentIntent)
class ConfirmPaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        secret = get_settings().razorpay_key_secret
        if not verify_checkout(secret, command.gateway_order_id, command.gateway_payment_id, command.signature):
            raise SignatureMismatch({"signature": ["Invalid payment signature"]})

        intent = current_domain.repository_for(PaymentIntent).find_by_gateway_order_id(command.gateway_order_id)
        if intent is None:
            raise NotFoundError({"gateway_order_id": ["Payment not found"]})

        order = current_domain.repository_for(Order).get(intent.order_id)
        if not order.is_owned_by(command.customer_id):
            raise ForbiddenError({"gateway_order_id": ["Payment belongs to another customer"]})

        outcome = complete_payment(
            intent,
            gateway_payment_id=command.gateway_payment_id,
            source=CompletionSource.CLIENT.value,
            signature=command.signature,
        )
        return {
            "order_id": str(intent.order_id),
            "status": outcome,
        }
