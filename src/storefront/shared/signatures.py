"""HMAC-SHA256 signatures used by the payment gateway.

Two payloads are signed with the merchant secret:

* the client checkout callback signs ``"<gateway_order_id>|<gateway_payment_id>"``
* webhooks sign the raw request body, exactly as received

Signatures are lowercase hex digests and are always compared in constant time.
"""

import hashlib
import hmac


def compute_signature(secret: str, payload: bytes | str) -> str:
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_signature(secret: str, payload: bytes | str, signature: str | None) -> bool:
    if not signature:
        return False
    return hmac.compare_digest(compute_signature(secret, payload), signature.strip())


def checkout_payload(gateway_order_id: str, gateway_payment_id: str) -> str:
    return f"{gateway_order_id}|{gateway_payment_id}"


def sign_checkout(secret: str, gateway_order_id: str, gateway_payment_id: str) -> str:
    return compute_signature(secret, checkout_payload(gateway_order_id, gateway_payment_id))


def verify_checkout(secret: str, gateway_order_id: str, gateway_payment_id: str, signature: str | None) -> bool:
    return verify_signature(secret, checkout_payload(gateway_order_id, gateway_payment_id), signature)
