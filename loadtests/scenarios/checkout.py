"""Checkout load test scenarios.

``ScarceStockUser`` hammers one product whose stock is far below demand, so
concurrent checkouts race for the last units. A 409 stock conflict is the
expected outcome for the losers and is counted as a success; anything else
that is not a 201 is a failure.

``CartCheckoutJourney`` walks one shopper from an empty cart through
checkout to reading the resulting notification.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import checkout_data, delivery_address, idempotency_key, session_id, user_headers
from loadtests.helpers.response import extract_error_detail, is_stock_conflict
from loadtests.helpers.state import ShopperState, catalog


class ScarceStockUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.headers = user_headers("customer")

    @task
    def checkout_scarce_product(self):
        if not catalog.scarce_product_id:
            return
        with self.client.post(
            "/checkout",
            json=checkout_data([catalog.scarce_product_id], max_quantity=2),
            headers=self.headers,
            catch_response=True,
            name="POST /checkout (scarce)",
        ) as resp:
            if resp.status_code == 201 or is_stock_conflict(resp):
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")


class CartCheckoutJourney(SequentialTaskSet):
    """Add items -> Update quantity -> View cart -> Checkout -> Read notifications."""

    def on_start(self):
        self.state = ShopperState(headers=user_headers("customer"), session_id=session_id())

    @task
    def add_items(self):
        for product_id in random.sample(catalog.product_ids, k=min(3, len(catalog.product_ids))):
            with self.client.post(
                f"/carts/{self.state.session_id}/items",
                json={"productId": product_id, "quantity": random.randint(1, 3)},
                headers=self.state.headers,
                catch_response=True,
                name="POST /carts/{session}/items",
            ) as resp:
                if resp.status_code == 200:
                    self.state.cart_lines = len(resp.json()["lines"])
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def update_quantity(self):
        if not self.state.cart_lines:
            return
        with self.client.get(
            f"/carts/{self.state.session_id}", catch_response=True, name="GET /carts/{session}"
        ) as resp:
            lines = resp.json().get("lines", []) if resp.status_code == 200 else []
        if lines:
            self.client.put(
                f"/carts/{self.state.session_id}/items/{lines[0]['productId']}",
                json={"quantity": lines[0]["quantity"] + 1},
                name="PUT /carts/{session}/items/{product}",
            )

    @task
    def checkout(self):
        with self.client.post(
            f"/carts/{self.state.session_id}/checkout",
            json={"address": delivery_address(), "idempotencyKey": idempotency_key()},
            headers=self.state.headers,
            catch_response=True,
            name="POST /carts/{session}/checkout",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["orderId"])
            elif is_stock_conflict(resp):
                resp.success()
            else:
                resp.failure(f"Cart checkout failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def read_notifications(self):
        self.client.get("/notifications", headers=self.state.headers, name="GET /notifications")
        self.client.put("/notifications/read-all", headers=self.state.headers, name="PUT /notifications/read-all")
        self.interrupt()


class ShopperUser(HttpUser):
    wait_time = between(0.5, 2)
    tasks = [CartCheckoutJourney]
