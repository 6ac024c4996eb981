"""Checkout load test scenarios.

Stateful SequentialTaskSet journeys that drive an order from placement to
payment, the way the browser and the gateway do in production.
"""

import random

from locust import SequentialTaskSet, task

from loadtests.data_generators import (
    address_data,
    checkout_callback,
    customer_headers,
    gateway_payment_id,
    order_items,
    webhook,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState


class CheckoutJourney(SequentialTaskSet):
    """Address -> Order -> Payment Intent -> Webhook + Browser Confirmation.

    The webhook and the browser callback race each other; either may land
    first. Both must succeed and the order is paid once.
    """

    def on_start(self):
        self.state = CheckoutState(headers=customer_headers(), product_id=self.user.pick_product())

    @task
    def register_address(self):
        with self.client.post(
            "/addresses",
            json=address_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /addresses",
        ) as resp:
            if resp.status_code == 201:
                self.state.address_id = resp.json()["id"]
            else:
                resp.failure(f"Register address failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def place_order(self):
        with self.client.post(
            "/orders",
            json={"items": order_items(self.state.product_id), "shipping_address_id": self.state.address_id},
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["id"]
            elif resp.status_code == 400:
                # Sold out under load; the journey ends without paying.
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Place order failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def open_payment_intent(self):
        with self.client.post(
            "/payments/intents",
            json={"order_id": self.state.order_id},
            headers=self.state.headers,
            catch_response=True,
            name="POST /payments/intents",
        ) as resp:
            if resp.status_code == 201:
                self.state.gateway_order_id = resp.json()["gateway_order_id"]
                self.state.payment_id = gateway_payment_id()
            else:
                resp.failure(f"Payment intent failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def settle_payment(self):
        steps = [self._deliver_webhook, self._confirm_from_browser]
        random.shuffle(steps)
        for step in steps:
            step()

    def _deliver_webhook(self):
        body, headers = webhook("payment.captured", self.state.gateway_order_id, self.state.payment_id)
        with self.client.post(
            "/payments/webhook",
            data=body,
            headers=headers,
            catch_response=True,
            name="POST /payments/webhook (captured)",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Webhook failed: {resp.status_code} - {extract_error_detail(resp)}")

    def _confirm_from_browser(self):
        with self.client.post(
            "/payments/confirm",
            json=checkout_callback(self.state.gateway_order_id, self.state.payment_id),
            headers=self.state.headers,
            catch_response=True,
            name="POST /payments/confirm",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "Processing"
            else:
                resp.failure(f"Confirm payment failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def check_order(self):
        with self.client.get(
            f"/orders/{self.state.order_id}",
            headers=self.state.headers,
            catch_response=True,
            name="GET /orders/{id}",
        ) as resp:
            if resp.status_code == 200 and resp.json()["payment_status"] != "Completed":
                resp.failure(f"Order not paid after settlement: {resp.json()['payment_status']}")

    @task
    def done(self):
        self.interrupt()


class FailedPaymentJourney(SequentialTaskSet):
    """Order -> Intent -> Failed webhook -> New intent -> Captured webhook."""

    def on_start(self):
        self.state = CheckoutState(headers=customer_headers(), product_id=self.user.pick_product())

    @task
    def place_order(self):
        address = self.client.post("/addresses", json=address_data(), headers=self.state.headers, name="POST /addresses")
        if address.status_code != 201:
            self.interrupt()
        resp = self.client.post(
            "/orders",
            json={"items": order_items(self.state.product_id), "shipping_address_id": address.json()["id"]},
            headers=self.state.headers,
            name="POST /orders",
        )
        if resp.status_code != 201:
            self.interrupt()
        self.state.order_id = resp.json()["id"]

    @task
    def fail_first_attempt(self):
        intent = self.client.post(
            "/payments/intents",
            json={"order_id": self.state.order_id},
            headers=self.state.headers,
            name="POST /payments/intents",
        ).json()
        body, headers = webhook(
            "payment.failed",
            intent["gateway_order_id"],
            gateway_payment_id(),
            error_description="Payment declined by issuing bank",
        )
        self.client.post("/payments/webhook", data=body, headers=headers, name="POST /payments/webhook (failed)")

    @task
    def retry_and_capture(self):
        with self.client.post(
            "/payments/intents",
            json={"order_id": self.state.order_id},
            headers=self.state.headers,
            catch_response=True,
            name="POST /payments/intents (retry)",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Retry intent failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()
            gateway_order_id = resp.json()["gateway_order_id"]

        body, headers = webhook("payment.captured", gateway_order_id, gateway_payment_id())
        self.client.post("/payments/webhook", data=body, headers=headers, name="POST /payments/webhook (captured)")

    @task
    def done(self):
        self.interrupt()
