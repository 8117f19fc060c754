"""Pharmacy load testing: Locust entry point.

Discovers all user classes from the scenarios package and seeds the catalog
through the reload endpoint before the run starts.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py --host http://localhost:8000

    # Contention stress test:
    locust -f loadtests/locustfile.py LastUnitsRushUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ShopperUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.data_generators import catalog_records
from loadtests.helpers.response import extract_error_detail, is_stock_conflict
from loadtests.scenarios.shopping import ShopperUser  # noqa: F401
from loadtests.scenarios.stress import LastUnitsRushUser  # noqa: F401

logger = logging.getLogger("loadtest")

SEED_PRODUCTS = 200
HOT_PRODUCT_STOCK = 50


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Stock conflicts are expected under contention and are not logged.
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400 and not is_stock_conflict(response):
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Reload a known catalog so every run starts from the same stock."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")

    records = catalog_records(SEED_PRODUCTS)
    for record in records[:3]:
        record["stock"] = HOT_PRODUCT_STOCK

    try:
        resp = requests.post(f"{environment.host}/catalog/reload", json={"records": records}, timeout=30)
        print(f"[LOADTEST] Catalog seeded: {resp.json()}")
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not seed catalog: {e}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the service health and hot-product stock when the test ends."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        health = requests.get(f"{environment.host}/health", timeout=5).json()
        print(f"[LOADTEST] Health: {health}")
        for product_id in ("LT-0000", "LT-0001", "LT-0002"):
            product = requests.get(f"{environment.host}/products/{product_id}", timeout=5).json()
            print(f"  {product_id}: stock={product.get('stock')}")
        print()
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch final state: {e}\n")
