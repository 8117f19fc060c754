"""Concurrent order submissions against the repository-backed store.

Each worker thread pushes its own domain context, the way a request handler
thread would.
"""

import threading

import pytest

from pharmacy.catalog.cache import CatalogCache
from pharmacy.catalog.reload import reload_catalog
from pharmacy.domain import pharmacy
from pharmacy.errors import InsufficientStock
from pharmacy.ordering.facade import OrderFacade, OrderRejection
from pharmacy.ordering.reservation import OrderResult, ReservationEngine
from pharmacy.store.repository_adapter import RepositoryProductStore


@pytest.fixture()
def store():
    from pharmacy.store import set_store

    repository_store = RepositoryProductStore(timeout=5.0)
    set_store(repository_store)
    return repository_store


@pytest.fixture()
def facade(store):
    cache = CatalogCache(store, ttl_ms=60_000)
    return OrderFacade(store, cache, ReservationEngine(store, cache))


def _run_concurrently(count, target):
    barrier = threading.Barrier(count)
    outcomes = [None] * count

    def worker(index):
        with pharmacy.domain_context():
            barrier.wait()
            try:
                outcomes[index] = target(index)
            except Exception as exc:  # noqa: BLE001
                outcomes[index] = exc

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return outcomes


def _lost_on_stock(outcome):
    if isinstance(outcome, InsufficientStock):
        return True
    if isinstance(outcome, OrderRejection):
        return [error["reason"] for error in outcome.errors] == ["insufficient_stock"]
    return False


class TestNoOversell:
    def test_two_orders_for_last_units(self, store, seed, facade):
        seed(("A", "Paracetamol 500mg", 10.0, 5))

        outcomes = _run_concurrently(2, lambda i: facade.submit_order(f"s-{i}", [{"identifier": "A", "quantity": 3}]))

        committed = [o for o in outcomes if isinstance(o, OrderResult)]
        assert len(committed) == 1
        assert committed[0].lines[0].new_stock == 2
        assert sum(1 for o in outcomes if _lost_on_stock(o)) == 1
        assert store.find_by_id("A").stock == 2

    def test_many_single_unit_orders(self, store, seed, facade):
        seed(("A", "Paracetamol 500mg", 10.0, 5))

        outcomes = _run_concurrently(12, lambda i: facade.submit_order(f"s-{i}", [{"identifier": "A", "quantity": 1}]))

        committed = [o for o in outcomes if isinstance(o, OrderResult)]
        assert len(committed) == 5
        assert all(_lost_on_stock(o) for o in outcomes if not isinstance(o, OrderResult))
        assert store.find_by_id("A").stock == 0
        assert sorted(o.lines[0].new_stock for o in committed) == [0, 1, 2, 3, 4]

    def test_orders_across_products_keep_totals(self, store, seed, facade):
        seed(("A", "Paracetamol 500mg", 10.0, 6), ("B", "Ibuprofeno 400mg", 15.0, 6))

        def order(i):
            lines = [{"identifier": "A", "quantity": 1}, {"identifier": "B", "quantity": 1}]
            if i % 2:
                lines.reverse()
            return facade.submit_order(f"s-{i}", lines)

        outcomes = _run_concurrently(8, order)

        committed = [o for o in outcomes if isinstance(o, OrderResult)]
        assert 1 <= len(committed) <= 6
        assert store.find_by_id("A").stock == 6 - len(committed)
        assert store.find_by_id("B").stock == 6 - len(committed)


class TestReloadDuringOrders:
    def test_reload_never_interleaves_with_a_decrement(self, store, seed, facade):
        seed(("A", "Paracetamol 500mg", 10.0, 100))

        def work(i):
            if i == 0:
                return reload_catalog(store, facade.cache, [{"id": "A", "name": "Paracetamol 500mg", "stock": 50}])
            return facade.submit_order(f"s-{i}", [{"identifier": "A", "quantity": 1}])

        outcomes = _run_concurrently(6, work)

        committed_after_reload = 0
        for outcome in outcomes[1:]:
            assert isinstance(outcome, OrderResult)
            if outcome.lines[0].new_stock < 50:
                committed_after_reload += 1

        assert store.find_by_id("A").stock == 50 - committed_after_reload
