"""BDD tests for catalog reload."""

import pytest
from pytest_bdd import parsers, scenarios, then, when

from pharmacy.catalog.controlled import flag_controlled_substances
from pharmacy.catalog.reload import reload_catalog

scenarios("features/catalog_reload.feature")

SAMPLE_EXPORT = [
    {"_id": "m-1", "nombre": "Paracetamol 500mg", "precio": 10.0, "stock": 5},
    {"_id": "m-2", "nombre": "Lorazepam 1mg", "precio": "35", "stock": 2},
    {"nombre": "Ibuprofeno 400mg", "precio": 15.5, "stock": "abc"},
]


@pytest.fixture()
def reports():
    return []


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the catalog is reloaded with a record named "{name}" without stock or price'))
def reload_bare_record(store, facade, reports, name):
    reports.append(reload_catalog(store, facade.cache, [{"nombre": name}]))


@when("the catalog is reloaded with the sample export")
def reload_sample(store, facade, reports):
    reports.append(reload_catalog(store, facade.cache, SAMPLE_EXPORT))


@when("controlled substances are flagged")
def flag_controlled(store, facade):
    flag_controlled_substances(store, cache=facade.cache)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the product "{name}" exists with stock {stock:d} and price {price:d}'))
def product_exists(store, name, stock, price):
    product = store.find_by_name_or_id(name)
    assert product.stock == stock
    assert product.price == price


@then(parsers.cfparse("the catalog holds {count:d} products"))
def catalog_holds(store, count):
    assert len(store.list_products()) == count


@then(parsers.cfparse("the last reload removed {count:d} products"))
def last_reload_removed(reports, count):
    assert reports[-1].removed == count
