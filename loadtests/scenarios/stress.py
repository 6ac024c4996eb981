"""Stress scenarios for payment reconciliation.

WebhookStormUser replays the same capture webhook many times in a burst, the
way a gateway does when it believes earlier deliveries failed.
OversellUser sends many buyers after a product with little stock; it ends
with the stock at zero and shortfall alerts in the operations inbox.
"""

from locust import between, task

from loadtests.data_generators import (
    address_data,
    admin_headers,
    customer_headers,
    gateway_payment_id,
    webhook,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState, StockState
from loadtests.scenarios.base import ShopperUser

REPLAYS_PER_PAYMENT = 10


def _open_checkout(client, headers, product_id, quantity=1):
    """Place an order and open an intent; returns (order_id, gateway_order_id)."""
    address = client.post("/addresses", json=address_data(), headers=headers, name="POST /addresses")
    order = client.post(
        "/orders",
        json={"items": [{"product_id": product_id, "quantity": quantity}], "shipping_address_id": address.json().get("id")},
        headers=headers,
        name="POST /orders",
    )
    if order.status_code != 201:
        return None, None
    order_id = order.json()["id"]
    intent = client.post("/payments/intents", json={"order_id": order_id}, headers=headers, name="POST /payments/intents")
    if intent.status_code != 201:
        return order_id, None
    return order_id, intent.json()["gateway_order_id"]


class WebhookStormUser(ShopperUser):
    """Duplicate capture webhooks for one payment, back to back."""

    wait_time = between(0.1, 0.5)

    @task
    def storm(self):
        state = CheckoutState(headers=customer_headers(), product_id=self.pick_product())
        state.order_id, state.gateway_order_id = _open_checkout(self.client, state.headers, state.product_id)
        if not state.gateway_order_id:
            return
        state.payment_id = gateway_payment_id()

        body, headers = webhook("payment.captured", state.gateway_order_id, state.payment_id)
        for _ in range(REPLAYS_PER_PAYMENT):
            with self.client.post(
                "/payments/webhook",
                data=body,
                headers=headers,
                catch_response=True,
                name="POST /payments/webhook (replay)",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Replay rejected: {resp.status_code} - {extract_error_detail(resp)}")


class OversellUser(ShopperUser):
    """Many buyers, one scarce product, payments captured regardless of stock."""

    wait_time = between(0.1, 1.0)
    products_to_seed = 0

    def on_start(self):
        super().on_start()
        self.stock = StockState(initial_stock=5)
        self.stock.product_id = self.seed_product(stock=self.stock.initial_stock)

    @task
    def buy_last_units(self):
        if not self.stock.product_id:
            return
        order_id, gateway_order_id = _open_checkout(
            self.client, customer_headers(), self.stock.product_id, quantity=2
        )
        if not gateway_order_id:
            # Stock already reads zero at checkout; start a new round.
            self.stock.product_id = self.seed_product(stock=self.stock.initial_stock)
            self.stock.order_ids.clear()
            return
        self.stock.order_ids.append(order_id)
        body, headers = webhook("payment.captured", gateway_order_id, gateway_payment_id())
        self.client.post("/payments/webhook", data=body, headers=headers, name="POST /payments/webhook (captured)")

    @task
    def check_operations_inbox(self):
        with self.client.get(
            "/notifications?recipient_id=operations",
            headers=admin_headers(),
            catch_response=True,
            name="GET /notifications (operations)",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Operations inbox failed: {resp.status_code} - {extract_error_detail(resp)}")
