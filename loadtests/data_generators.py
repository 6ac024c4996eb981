"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules and
match the field names expected by the API's Pydantic request schemas. The
gateway-side helpers sign payloads with the same secrets the server reads, so
they only work against a server running the fake gateway.
"""

import json
import os
import random
import uuid

from faker import Faker

from storefront.shared.signatures import compute_signature, sign_checkout

fake = Faker("en_IN")

KEY_SECRET = os.environ.get("RAZORPAY_KEY_SECRET", "storefront_test_secret")
WEBHOOK_SECRET = os.environ.get("RAZORPAY_WEBHOOK_SECRET", KEY_SECRET)

OILS = ["Groundnut", "Sesame", "Coconut", "Mustard", "Sunflower", "Castor"]
SIZES = {"500ml": 260.0, "1L": 450.0, "2L": 880.0, "5L": 2100.0}


# ---------- Identity ----------


def customer_headers() -> dict:
    return {"X-User-Id": f"cust-lt-{uuid.uuid4().hex[:10]}", "X-User-Role": "customer"}


def admin_headers() -> dict:
    return {"X-User-Id": "admin-loadtest", "X-User-Role": "admin"}


def address_data() -> dict:
    """AddressRequest payload."""
    return {
        "name": fake.name()[:150],
        "phone": f"9{random.randint(100000000, 999999999)}",
        "line1": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state()[:100],
        "postal_code": fake.postcode()[:20],
        "country": "India",
    }


# ---------- Products ----------


def product_data(stock: int | None = None) -> dict:
    """AddProductRequest payload for a cold pressed oil."""
    weight, price = random.choice(list(SIZES.items()))
    oil = random.choice(OILS)
    return {
        "name": f"Cold Pressed {oil} Oil {weight}",
        "sku": f"{oil[:3].upper()}-{weight.upper()}-{uuid.uuid4().hex[:6]}",
        "price": price,
        "stock": random.randint(50, 500) if stock is None else stock,
        "weight": weight,
    }


def order_items(product_id: str) -> list[dict]:
    return [{"product_id": product_id, "quantity": random.randint(1, 3)}]


# ---------- Refunds ----------


def refund_reason() -> str:
    return random.choice(
        [
            "The bottle arrived cracked and leaking",
            "Received the wrong size of oil",
            "The seal on the bottle was broken",
            "Ordered twice by mistake, need a refund",
        ]
    )


# ---------- Gateway side ----------


def gateway_payment_id() -> str:
    return f"pay_{uuid.uuid4().hex[:14]}"


def checkout_callback(gateway_order_id: str, payment_id: str) -> dict:
    """ConfirmPaymentRequest payload, as the checkout widget returns it."""
    return {
        "razorpay_order_id": gateway_order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": sign_checkout(KEY_SECRET, gateway_order_id, payment_id),
    }


def webhook(event: str, gateway_order_id: str, payment_id: str, **entity) -> tuple[bytes, dict]:
    """Raw webhook body plus the headers the gateway sends with it."""
    body = json.dumps(
        {
            "entity": "event",
            "event": event,
            "payload": {
                "payment": {
                    "entity": {
                        "id": payment_id,
                        "order_id": gateway_order_id,
                        "method": random.choice(["upi", "card", "netbanking"]),
                        **entity,
                    }
                }
            },
        }
    ).encode("utf-8")
    headers = {
        "Content-Type": "application/json",
        "X-Razorpay-Signature": compute_signature(WEBHOOK_SECRET, body),
    }
    return body, headers
