"""Configurable in-memory product store for development and testing.

Keeps ProductView records in a dict, with the same per-product locking as the
repository adapter. It can be configured at runtime to simulate an outage or
a rollback that cannot be written back, which the repository adapter cannot
easily be made to do on demand.
"""

import dataclasses
import threading
from collections.abc import Iterable

from pharmacy.errors import InsufficientStock, ProductNotFound, StoreUnavailable
from pharmacy.product.product import ProductView
from pharmacy.store.port import ProductStore, RecordLocks, ReplaceResult


class FakeProductStore(ProductStore):
    """Configurable fake product store."""

    def __init__(self, products: Iterable[ProductView] = (), timeout: float = 2.0) -> None:
        self._records: dict[str, ProductView] = {str(p.product_id): p for p in products}
        self._locks = RecordLocks(timeout=timeout)
        self._reload_lock = threading.Lock()
        self.available: bool = True
        self.fail_restore: bool = False
        self.calls: list[dict] = []

    def configure(self, available: bool = True, fail_restore: bool = False) -> None:
        """Configure store behavior at runtime."""
        self.available = available
        self.fail_restore = fail_restore

    def _check_available(self) -> None:
        if not self.available:
            raise StoreUnavailable("Product store is unavailable")

    def _get(self, product_id: str) -> ProductView:
        record = self._records.get(str(product_id))
        if record is None:
            raise ProductNotFound(f"Product not found: {product_id}", identifier=str(product_id))
        return record

    def find_by_id(self, product_id: str) -> ProductView:
        self._check_available()
        return self._get(product_id)

    def find_by_name_or_id(self, identifier: str) -> ProductView:
        self._check_available()
        record = self._records.get(str(identifier))
        if record is not None:
            return record
        for candidate in list(self._records.values()):
            if candidate.name == identifier:
                return candidate
        raise ProductNotFound(f"Product not found: {identifier}", identifier=str(identifier))

    def list_products(self) -> list[ProductView]:
        self._check_available()
        return sorted(self._records.values(), key=lambda p: p.name)

    def decrement_stock(self, product_id: str, quantity: int, expected_min_stock: int | None = None) -> int:
        self._check_available()
        key = str(product_id)
        self.calls.append({"method": "decrement_stock", "product_id": key, "quantity": quantity})
        required = max(quantity, expected_min_stock or 0)

        with self._locks.hold(key):
            record = self._get(key)
            if record.stock < required:
                raise InsufficientStock(
                    f"Insufficient stock for {record.name}: {record.stock} available, {quantity} requested",
                    identifier=key,
                    available=record.stock,
                )
            updated = dataclasses.replace(record, stock=record.stock - quantity)
            self._records[key] = updated
        return updated.stock

    def restore_stock(self, product_id: str, quantity: int) -> int:
        key = str(product_id)
        self.calls.append({"method": "restore_stock", "product_id": key, "quantity": quantity})
        if self.fail_restore:
            raise StoreUnavailable(f"Could not restore stock for {key}", identifier=key)
        self._check_available()

        with self._locks.hold(key):
            record = self._get(key)
            updated = dataclasses.replace(record, stock=record.stock + quantity)
            self._records[key] = updated
        return updated.stock

    def bulk_replace(self, records: Iterable[ProductView]) -> ReplaceResult:
        self._check_available()
        incoming = {str(r.product_id): r for r in records}

        with self._reload_lock:
            existing = set(self._records)
            with self._locks.hold_all(existing | set(incoming)):
                self._records = dict(incoming)

        return ReplaceResult(
            created=len(set(incoming) - existing),
            updated=len(set(incoming) & existing),
            removed=len(existing - set(incoming)),
        )

    def set_controlled(self, product_id: str, controlled: bool) -> bool:
        self._check_available()
        key = str(product_id)
        with self._locks.hold(key):
            record = self._get(key)
            if record.controlled == bool(controlled):
                return False
            self._records[key] = dataclasses.replace(record, controlled=bool(controlled))
        return True
