"""Refund load test scenarios: paid order -> refund request -> admin decision."""

import random

from locust import SequentialTaskSet, task

from loadtests.data_generators import (
    address_data,
    admin_headers,
    customer_headers,
    gateway_payment_id,
    order_items,
    refund_reason,
    webhook,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import RefundState


class RefundJourney(SequentialTaskSet):
    """Paid Order -> Request Refund -> Approve or Reject -> Complete.

    Approved refunds are completed through the gateway; rejected ones stop.
    """

    def on_start(self):
        self.state = RefundState(headers=customer_headers(), product_id=self.user.pick_product())

    @task
    def pay_for_order(self):
        address = self.client.post("/addresses", json=address_data(), headers=self.state.headers, name="POST /addresses")
        order = self.client.post(
            "/orders",
            json={"items": order_items(self.state.product_id), "shipping_address_id": address.json().get("id")},
            headers=self.state.headers,
            name="POST /orders",
        )
        if order.status_code != 201:
            self.interrupt()
        self.state.order_id = order.json()["id"]

        intent = self.client.post(
            "/payments/intents",
            json={"order_id": self.state.order_id},
            headers=self.state.headers,
            name="POST /payments/intents",
        )
        if intent.status_code != 201:
            self.interrupt()
        self.state.gateway_order_id = intent.json()["gateway_order_id"]
        self.state.payment_id = gateway_payment_id()

        body, headers = webhook("payment.captured", self.state.gateway_order_id, self.state.payment_id)
        self.client.post("/payments/webhook", data=body, headers=headers, name="POST /payments/webhook (captured)")

    @task
    def request_refund(self):
        with self.client.post(
            "/refunds",
            json={"order_id": self.state.order_id, "reason": refund_reason()},
            headers=self.state.headers,
            catch_response=True,
            name="POST /refunds",
        ) as resp:
            if resp.status_code == 201:
                self.state.refund_id = resp.json()["id"]
                self.state.refund_status = "Pending"
            else:
                resp.failure(f"Request refund failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def decide(self):
        action = random.choices(["APPROVE", "REJECT"], weights=[4, 1])[0]
        with self.client.patch(
            f"/refunds/{self.state.refund_id}",
            json={"action": action},
            headers=admin_headers(),
            catch_response=True,
            name="PATCH /refunds/{id}",
        ) as resp:
            if resp.status_code == 200:
                self.state.refund_status = resp.json()["status"]
            else:
                resp.failure(f"Process refund failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def complete(self):
        if self.state.refund_status != "Approved":
            self.interrupt()
        with self.client.post(
            f"/refunds/{self.state.refund_id}/complete",
            headers=admin_headers(),
            catch_response=True,
            name="POST /refunds/{id}/complete",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Complete refund failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()
