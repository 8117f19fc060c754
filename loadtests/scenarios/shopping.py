"""Shopper load test scenarios.

A stateful SequentialTaskSet journey: search the catalog, open a product,
pre-check the cart and submit the order.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import search_term
from loadtests.helpers.response import extract_error_detail, is_stock_conflict
from loadtests.helpers.state import ShopperState


class ShopperJourney(SequentialTaskSet):
    """Search -> Suggest -> View Product -> Check Stock -> Submit Order."""

    def on_start(self):
        self.state = ShopperState()

    @task
    def search(self):
        with self.client.get(
            "/catalog/search",
            params={"query": search_term()},
            catch_response=True,
            name="GET /catalog/search",
        ) as resp:
            if resp.status_code == 200:
                self.state.seen_product_ids = [p["product_id"] for p in resp.json() if p["stock"] > 0]
                if not self.state.seen_product_ids:
                    self.interrupt()
            else:
                resp.failure(f"Search failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def suggest(self):
        self.client.get("/catalog/suggest", params={"prefix": search_term()[:3]}, name="GET /catalog/suggest")

    @task
    def view_product(self):
        product_id = random.choice(self.state.seen_product_ids)
        with self.client.get(
            f"/products/{product_id}",
            catch_response=True,
            name="GET /products/{id}",
        ) as resp:
            if resp.status_code == 200 and resp.json()["stock"] > 0:
                self.state.cart = [{"identifier": product_id, "quantity": random.randint(1, 2)}]
            elif resp.status_code == 200:
                self.interrupt()
            else:
                resp.failure(f"View product failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def check_stock(self):
        with self.client.post(
            "/orders/check",
            json={"lines": self.state.cart},
            catch_response=True,
            name="POST /orders/check",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Check stock failed: {resp.status_code}: {extract_error_detail(resp)}")
            elif not resp.json()["ok"]:
                self.interrupt()

    @task
    def submit_order(self):
        with self.client.post(
            "/orders",
            json={"session_id": f"lt-{id(self)}", "lines": self.state.cart},
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["order_id"])
            elif is_stock_conflict(resp):
                # Losing a race for the last units is a valid outcome
                self.state.rejected_orders += 1
                resp.success()
            else:
                resp.failure(f"Submit order failed: {resp.status_code}: {extract_error_detail(resp)}")
        self.interrupt()


class ShopperUser(HttpUser):
    """Customers browsing and ordering at a human pace."""

    tasks = [ShopperJourney]
    wait_time = between(1, 3)
