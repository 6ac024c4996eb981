"""Shared fixtures for storefront tests.

Seeding goes through the same commands the API uses, so every fixture
leaves the aggregates in states the application could have produced.
"""

import json
from uuid import uuid4

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture
from storefront.address.book import RegisterAddress
from storefront.channel import set_email_adapter
from storefront.channel.fake_email import FakeEmailAdapter
from storefront.gateway import set_gateway
from storefront.gateway.fake_adapter import FakeGateway
from storefront.order.placement import PlaceOrder
from storefront.payment.initiation import CreatePaymentIntent
from storefront.product.stocking import AddProduct
from storefront.settings import get_settings
from storefront.shared.signatures import compute_signature, sign_checkout


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture()
def gateway():
    fake = FakeGateway(key_id=get_settings().razorpay_key_id)
    set_gateway(fake)
    return fake


@pytest.fixture()
def mailbox():
    adapter = FakeEmailAdapter()
    set_email_adapter(adapter)
    return adapter


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------
@pytest.fixture()
def add_product():
    def _add(name="Cold Pressed Groundnut Oil", price=450.0, stock=10, weight="1L", sku=None):
        return current_domain.process(
            AddProduct(
                name=name,
                sku=sku or f"SKU-{uuid4().hex[:8].upper()}",
                price=price,
                stock=stock,
                weight=weight,
            ),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def add_address():
    def _add(customer_id="cust-001"):
        return current_domain.process(
            RegisterAddress(
                customer_id=customer_id,
                name="Asha Rao",
                phone="9800000000",
                line1="12 MG Road",
                city="Bengaluru",
                state="Karnataka",
                postal_code="560001",
                country="India",
            ),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def place_order(add_address):
    """Place an order for ``[(product_id, quantity), ...]``."""

    def _place(lines, customer_id="cust-001", address_id=None):
        address_id = address_id or add_address(customer_id)
        items = [{"product_id": product_id, "quantity": quantity} for product_id, quantity in lines]
        return current_domain.process(
            PlaceOrder(customer_id=customer_id, items=json.dumps(items), shipping_address_id=address_id),
            asynchronous=False,
        )

    return _place


@pytest.fixture()
def open_intent(gateway):
    def _open(order_id, customer_id="cust-001"):
        return current_domain.process(
            CreatePaymentIntent(order_id=order_id, customer_id=customer_id),
            asynchronous=False,
        )

    return _open


@pytest.fixture()
def checkout(add_product, place_order, open_intent):
    """A pending order for two units of a 450.00 product with an open intent."""

    def _checkout(customer_id="cust-001", stock=10, quantity=2, price=450.0):
        product_id = add_product(price=price, stock=stock)
        order_id = place_order([(product_id, quantity)], customer_id=customer_id)
        intent = open_intent(order_id, customer_id=customer_id)
        return {"product_id": product_id, "order_id": order_id, "intent": intent}

    return _checkout


# ---------------------------------------------------------------------------
# Gateway-side payloads
# ---------------------------------------------------------------------------
def checkout_signature(gateway_order_id, gateway_payment_id):
    return sign_checkout(get_settings().razorpay_key_secret, gateway_order_id, gateway_payment_id)


def webhook_payload(event, gateway_order_id, gateway_payment_id, **entity):
    """Serialized webhook envelope plus its signature header value."""
    body = json.dumps(
        {
            "entity": "event",
            "event": event,
            "payload": {
                "payment": {
                    "entity": {
                        "id": gateway_payment_id,
                        "order_id": gateway_order_id,
                        "method": "upi",
                        **entity,
                    }
                }
            },
        }
    ).encode("utf-8")
    return body, compute_signature(get_settings().razorpay_webhook_secret, body)


@pytest.fixture()
def sign_checkout_callback():
    return checkout_signature


@pytest.fixture()
def signed_webhook():
    return webhook_payload
