"""Faker-based data generators for Locust load test scenarios.

Payloads pass TaniMart's validation rules (address at most 255 characters,
non-negative integer rupiah prices) and use the camelCase field names of the
API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker("id_ID")

PRODUCE = [
    "Beras Pandan Wangi",
    "Cabai Rawit Merah",
    "Bawang Merah Brebes",
    "Tomat Sayur",
    "Kentang Dieng",
    "Jagung Manis",
    "Kopi Arabika Gayo",
    "Gula Aren",
]


def session_id() -> str:
    return f"sess-lt-{uuid.uuid4().hex[:12]}"


def idempotency_key() -> str:
    return uuid.uuid4().hex


def user_headers(role: str = "customer", user_id: str | None = None) -> dict:
    """Identity headers normally injected by the authentication gateway."""
    return {
        "X-User-Id": user_id or f"{role}-lt-{uuid.uuid4().hex[:8]}",
        "X-User-Name": fake.name(),
        "X-User-Role": role,
    }


def delivery_address() -> str:
    return fake.address().replace("\n", ", ")[:255]


def product_data(stock: int | None = None) -> dict:
    """A product listing with a price in whole rupiah."""
    return {
        "name": f"{random.choice(PRODUCE)} {fake.word().title()}",
        "price": random.randrange(5_000, 150_000, 500),
        "stock": stock if stock is not None else random.randint(50, 500),
        "description": fake.sentence(nb_words=10),
    }


def checkout_data(product_ids: list[str], max_quantity: int = 3) -> dict:
    return {
        "address": delivery_address(),
        "items": [{"productId": pid, "quantity": random.randint(1, max_quantity)} for pid in product_ids],
        "idempotencyKey": idempotency_key(),
    }


def order_filters() -> dict:
    """Random admin order-list filters, sometimes empty."""
    filters = {"page": random.randint(1, 3)}
    if random.random() < 0.3:
        filters["status"] = random.choice(["pending", "processing", "completed", "cancelled"])
    if random.random() < 0.2:
        filters["minPrice"] = random.choice([20_000, 50_000])
    return filters
