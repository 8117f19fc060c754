"""Stress test scenarios for stock contention.

LastUnitsRushUser has every user ordering from the same handful of products
at once, so per-product serialization is the bottleneck under test. After
the run, no product's stock may be negative and the confirmed quantities
must match what the stock went down by.
"""

import random

from locust import HttpUser, constant_pacing, task

from loadtests.helpers.response import is_stock_conflict

HOT_PRODUCTS = ["LT-0000", "LT-0001", "LT-0002"]


class LastUnitsRushUser(HttpUser):
    """Stress test: concurrent orders for the same few products."""

    wait_time = constant_pacing(0.1)  # ~10 requests/sec per user

    @task(5)
    def rush_order(self):
        lines = [{"identifier": pid, "quantity": 1} for pid in random.sample(HOT_PRODUCTS, k=random.randint(1, 3))]
        with self.client.post(
            "/orders",
            json={"session_id": "rush", "lines": lines},
            catch_response=True,
            name="[STRESS] POST /orders",
        ) as resp:
            if resp.status_code == 201 or is_stock_conflict(resp):
                resp.success()
            else:
                resp.failure(f"{resp.status_code}")

    @task(1)
    def read_hot_product(self):
        self.client.get(f"/products/{random.choice(HOT_PRODUCTS)}", name="[STRESS] GET /products/{id}")
