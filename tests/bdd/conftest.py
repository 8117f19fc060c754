"""Shared BDD fixtures and step definitions for the Pharmacy domain."""

import pytest
from pytest_bdd import given, parsers, then

from pharmacy.catalog.cache import CatalogCache
from pharmacy.ordering.facade import OrderFacade
from pharmacy.ordering.reservation import ReservationEngine
from pharmacy.product.product import ProductView


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def facade(store):
    cache = CatalogCache(store, ttl_ms=60_000)
    return OrderFacade(store, cache, ReservationEngine(store, cache))


@pytest.fixture()
def outcome():
    """Container for the result of the When step."""
    return {"result": None, "results": []}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{product_id}" named "{name}" with stock {stock:d}'))
def product_with_stock(store, product_id, name, stock):
    current = list(store.list_products())
    current.append(ProductView(product_id=product_id, name=name, price=10.0, stock=stock))
    store.bulk_replace(current)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the stock of "{product_id}" is {stock:d}'))
def stock_is(store, product_id, stock):
    assert store.find_by_id(product_id).stock == stock


@then(parsers.cfparse('the product "{name}" is controlled'))
def product_is_controlled(store, name):
    assert store.find_by_name_or_id(name).controlled is True


@then(parsers.cfparse('the product "{name}" is not controlled'))
def product_is_not_controlled(store, name):
    assert store.find_by_name_or_id(name).controlled is False
