"""Admin back-office load: browsing the order list and moving orders along."""

import random

from locust import HttpUser, between, task

from loadtests.data_generators import order_filters, user_headers
from loadtests.helpers.response import extract_error_detail

_NEXT_STATUS = {"pending": "processing", "processing": "completed"}


class AdminUser(HttpUser):
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = user_headers("admin")

    @task(3)
    def browse_orders(self):
        self.client.get("/orders", params=order_filters(), headers=self.headers, name="GET /orders")

    @task(1)
    def advance_order(self):
        resp = self.client.get("/orders", params={"status": "pending"}, headers=self.headers, name="GET /orders")
        if resp.status_code != 200 or not resp.json()["items"]:
            return

        order = random.choice(resp.json()["items"])
        with self.client.put(
            f"/orders/{order['id']}/status",
            json={"status": _NEXT_STATUS.get(order["status"], "cancelled")},
            headers=self.headers,
            catch_response=True,
            name="PUT /orders/{id}/status",
        ) as update:
            # Another admin may have moved it first
            if update.status_code in (200, 422):
                update.success()
            else:
                update.failure(f"Status change failed: {update.status_code}: {extract_error_detail(update)}")
