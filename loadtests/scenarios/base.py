"""Base user that seeds its own products through the admin API."""

import random

from locust import HttpUser, between

from loadtests.data_generators import admin_headers, product_data
from loadtests.helpers.response import extract_error_detail


class ShopperUser(HttpUser):
    abstract = True
    wait_time = between(0.5, 3.0)
    products_to_seed = 3

    def on_start(self):
        self.product_ids = [self.seed_product() for _ in range(self.products_to_seed)]
        self.product_ids = [product_id for product_id in self.product_ids if product_id]

    def seed_product(self, stock: int | None = None) -> str | None:
        with self.client.post(
            "/products",
            json=product_data(stock),
            headers=admin_headers(),
            catch_response=True,
            name="POST /products",
        ) as resp:
            if resp.status_code == 201:
                return resp.json()["product_id"]
            resp.failure(f"Seed product failed: {resp.status_code} - {extract_error_detail(resp)}")
            return None

    def pick_product(self) -> str | None:
        if not self.product_ids:
            self.product_ids = [product_id for product_id in [self.seed_product()] if product_id]
        return random.choice(self.product_ids) if self.product_ids else None
