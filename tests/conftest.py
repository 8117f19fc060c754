import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from pharmacy.domain import pharmacy

    pharmacy.init()
    pharmacy.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from pharmacy.domain import pharmacy
    from pharmacy.utils.db import drop_db, setup_db

    setup_db(pharmacy)

    yield

    drop_db(pharmacy)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    from pharmacy.catalog.cache import reset_catalog_cache
    from pharmacy.ordering.facade import reset_order_facade
    from pharmacy.settings import reset_settings
    from pharmacy.store import reset_store

    reset_order_facade()
    reset_catalog_cache()
    reset_store()
    reset_settings()

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def store():
    """Repository-backed store, registered as the active store."""
    from pharmacy.store import set_store
    from pharmacy.store.repository_adapter import RepositoryProductStore

    repository_store = RepositoryProductStore(timeout=0.5)
    set_store(repository_store)
    return repository_store


@pytest.fixture()
def fake_store():
    """In-memory fake store, registered as the active store."""
    from pharmacy.store import set_store
    from pharmacy.store.fake_adapter import FakeProductStore

    store = FakeProductStore(timeout=0.5)
    set_store(store)
    return store


@pytest.fixture()
def seed(store):
    """Load products into the active repository store: ``seed(("A", "Name", price, stock), ...)``."""
    from pharmacy.product.product import ProductView

    def _seed(*rows):
        views = []
        for row in rows:
            product_id, name, price, stock = row[:4]
            controlled = row[4] if len(row) > 4 else False
            views.append(
                ProductView(product_id=product_id, name=name, price=price, stock=stock, controlled=controlled)
            )
        store.bulk_replace(views)
        return views

    return _seed
