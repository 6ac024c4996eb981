"""Reconciliation boundary for the two payment confirmation paths.

Both paths end in ``complete_payment``; whichever arrives first performs the
transition and every later arrival, from either path, only acknowledges.

* ``confirm_client_payment`` serves the browser callback. Domain errors
  propagate to the API layer; anything unexpected becomes
  ``PaymentProcessingFailed`` with the intent left Pending.
* ``receive_webhook`` serves the gateway. It never raises: every outcome is
  a ``WebhookAck`` whose status code tells the gateway whether to redeliver.
"""

import json
from dataclasses import dataclass, field

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.exceptions import ForbiddenError, PaymentProcessingFailed
from storefront.payment.confirmation import ConfirmPayment
from storefront.payment.webhook import RecordPaymentCapture, RecordPaymentFailure
from storefront.settings import get_settings
from storefront.shared.signatures import verify_signature

logger = structlog.get_logger(__name__)

PAYMENT_CAPTURED = "payment.captured"
PAYMENT_FAILED = "payment.failed"


@dataclass(frozen=True)
class WebhookAck:
    status_code: int
    outcome: str
    body: dict = field(default_factory=lambda: {"received": True})


def confirm_client_payment(customer_id, gateway_order_id, gateway_payment_id, signature) -> dict:
    try:
        return current_domain.process(
            ConfirmPayment(
                customer_id=customer_id,
                gateway_order_id=gateway_order_id,
                gateway_payment_id=gateway_payment_id,
                signature=signature,
            ),
            asynchronous=False,
        )
    except (ValidationError, ObjectNotFoundError, ForbiddenError):
        raise
    except Exception as exc:
        logger.exception(
            "payment_confirmation_failed",
            gateway_order_id=gateway_order_id,
            gateway_payment_id=gateway_payment_id,
        )
        raise PaymentProcessingFailed(
            {"payment": ["Payment could not be processed. It will be reconciled automatically."]}
        ) from exc


def _capture_command(entity):
    return RecordPaymentCapture(
        gateway_order_id=entity.get("order_id"),
        gateway_payment_id=entity.get("id"),
        method=entity.get("method"),
    )


def _failure_command(entity):
    return RecordPaymentFailure(
        gateway_order_id=entity.get("order_id"),
        gateway_payment_id=entity.get("id"),
        reason=entity.get("error_description") or entity.get("error_reason"),
    )


_COMMAND_BUILDERS = {
    PAYMENT_CAPTURED: _capture_command,
    PAYMENT_FAILED: _failure_command,
}


def _payment_entity(envelope):
    """Return ``payload.payment.entity``, or None when any level is not an object."""
    node = envelope
    for key in ("payload", "payment", "entity"):
        node = node.get(key)
        if not isinstance(node, dict):
            return None
    return node


def receive_webhook(raw_body: bytes, signature: str | None) -> WebhookAck:
    if not verify_signature(get_settings().razorpay_webhook_secret, raw_body, signature):
        logger.warning("webhook_signature_invalid", signature_present=bool(signature))
        return WebhookAck(status_code=400, outcome="invalid_signature")

    try:
        envelope = json.loads(raw_body)
    except ValueError:
        logger.warning("webhook_body_malformed")
        return WebhookAck(status_code=400, outcome="malformed")
    if not isinstance(envelope, dict):
        logger.warning("webhook_body_malformed")
        return WebhookAck(status_code=400, outcome="malformed")

    event_type = envelope.get("event")
    build_command = _COMMAND_BUILDERS.get(event_type) if isinstance(event_type, str) else None
    if build_command is None:
        logger.info("webhook_event_ignored", event_type=event_type)
        return WebhookAck(status_code=200, outcome="ignored")

    entity = _payment_entity(envelope)
    if entity is None:
        logger.warning("webhook_body_malformed", event_type=event_type)
        return WebhookAck(status_code=400, outcome="malformed")

    log = logger.bind(
        event_type=event_type,
        gateway_order_id=entity.get("order_id"),
        gateway_payment_id=entity.get("id"),
    )

    try:
        outcome = current_domain.process(build_command(entity), asynchronous=False)
    except ValidationError as exc:
        # Redelivering the same payload cannot succeed.
        log.warning("webhook_payload_rejected", errors=exc.messages)
        return WebhookAck(status_code=400, outcome="rejected")
    except Exception:
        log.exception("webhook_processing_failed")
        return WebhookAck(status_code=500, outcome="error")

    log.info("webhook_processed", outcome=outcome)
    return WebhookAck(status_code=200, outcome=outcome)
