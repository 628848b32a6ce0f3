"""TaniMart Load Testing: Locust entry point.

Seeds a small catalog when the run starts, then drives the checkout
scenarios against it.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py --host http://localhost:8000

    # Contended stock only:
    locust -f loadtests/locustfile.py ScarceStockUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

from loadtests.data_generators import product_data, user_headers
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import catalog

# Import all user classes so Locust discovers them
from loadtests.scenarios.admin import AdminUser  # noqa: F401
from loadtests.scenarios.checkout import ScarceStockUser, ShopperUser  # noqa: F401

logger = logging.getLogger("loadtest")

CATALOG_SIZE = 10
SCARCE_STOCK = 25


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400 and response.status_code != 409:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


def _list_product(host, headers, payload):
    resp = requests.post(f"{host}/products", json=payload, headers=headers, timeout=10)
    resp.raise_for_status()
    return resp.json()["id"]


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """List the products every scenario buys from."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")

    seller = user_headers("seller")
    catalog.product_ids = [
        _list_product(environment.host, seller, product_data()) for _ in range(CATALOG_SIZE)
    ]
    catalog.scarce_product_id = _list_product(environment.host, seller, product_data(stock=SCARCE_STOCK))
    print(f"[LOADTEST] Seeded {CATALOG_SIZE} products, scarce product {catalog.scarce_product_id}\n")


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Report what is left of the scarce product; it must never go negative."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if not catalog.scarce_product_id:
        return
    try:
        resp = requests.get(f"{environment.host}/products/{catalog.scarce_product_id}", timeout=5)
        print(f"[LOADTEST] Scarce product stock remaining: {resp.json()['stock']}\n")
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch scarce product: {e}\n")
