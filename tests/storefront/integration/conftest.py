import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import (
    address_router,
    notification_router,
    order_router,
    payment_router,
    product_router,
    refund_router,
    register_error_handlers,
)


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    for router in (order_router, payment_router, refund_router, notification_router, product_router, address_router):
        app.include_router(router)
    return TestClient(app)


@pytest.fixture()
def api_checkout(client, gateway, add_product, add_address):
    """Place an order and open an intent through the API."""

    def _checkout(quantity=2, price=100.0, stock=10):
        customer = {"X-User-Id": "cust-001"}
        product_id = add_product(price=price, stock=stock)
        address_id = add_address("cust-001")
        order = client.post(
            "/orders",
            json={"items": [{"product_id": product_id, "quantity": quantity}], "shipping_address_id": address_id},
            headers=customer,
        ).json()
        intent = client.post("/payments/intents", json={"order_id": order["id"]}, headers=customer).json()
        return {"product_id": product_id, "order": order, "intent": intent}

    return _checkout


@pytest.fixture()
def api_paid_order(client, api_checkout, signed_webhook):
    placed = api_checkout()
    body, signature = signed_webhook("payment.captured", placed["intent"]["gateway_order_id"], "pay_001")
    response = client.post("/payments/webhook", content=body, headers={"X-Razorpay-Signature": signature})
    assert response.status_code == 200
    return placed
