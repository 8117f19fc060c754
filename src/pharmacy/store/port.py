"""Product store port (abstract interface).

Defines the contract every product store adapter implements. The store is the
single source of truth for stock: all writes are serialized per product, and
no adapter exposes a stock write that skips that serialization.

- RepositoryProductStore persists Product aggregates through the Protean
  repository (memory, SQLite or PostgreSQL provider).
- FakeProductStore keeps plain records in a dict and can be configured to fail,
  which makes outage and rollback paths testable.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from pharmacy.errors import StoreUnavailable
from pharmacy.product.product import ProductView


@dataclass(frozen=True)
class ReplaceResult:
    """Outcome of a wholesale catalog replacement."""

    created: int = 0
    updated: int = 0
    removed: int = 0

    @property
    def loaded(self) -> int:
        return self.created + self.updated


class RecordLocks:
    """One lock per product id, acquired with a bounded wait.

    A wait that exceeds ``timeout`` seconds raises StoreUnavailable, which
    callers treat as retryable.
    """

    def __init__(self, timeout: float = 2.0) -> None:
        self.timeout = timeout
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _acquire(self, key: str) -> threading.Lock:
        lock = self.lock_for(key)
        if not lock.acquire(timeout=self.timeout):
            raise StoreUnavailable(f"Timed out after {self.timeout}s waiting for product {key}", identifier=key)
        return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._acquire(key)
        try:
            yield
        finally:
            lock.release()

    @contextmanager
    def hold_all(self, keys: Iterable[str]) -> Iterator[None]:
        """Hold the locks of every key at once, acquired in sorted order."""
        acquired = []
        try:
            for key in sorted(set(keys)):
                acquired.append(self._acquire(key))
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


class ProductStore(ABC):
    """Abstract product store interface."""

    @abstractmethod
    def find_by_id(self, product_id: str) -> ProductView:
        """Return the live product record. Raises ProductNotFound."""
        ...

    @abstractmethod
    def find_by_name_or_id(self, identifier: str) -> ProductView:
        """Look the product up by id, falling back to an exact display-name match."""
        ...

    @abstractmethod
    def list_products(self) -> list[ProductView]:
        """Return every product, ordered by name."""
        ...

    @abstractmethod
    def decrement_stock(self, product_id: str, quantity: int, expected_min_stock: int | None = None) -> int:
        """Take ``quantity`` units if stock is at least ``max(quantity, expected_min_stock)``.

        Returns the new stock level. Raises InsufficientStock (carrying the live
        available count) or ProductNotFound; never leaves stock negative.
        """
        ...

    @abstractmethod
    def restore_stock(self, product_id: str, quantity: int) -> int:
        """Give back units taken by ``decrement_stock``. Used only for order rollback."""
        ...

    @abstractmethod
    def bulk_replace(self, records: Iterable[ProductView]) -> ReplaceResult:
        """Replace the whole catalog with ``records``.

        Products missing from ``records`` are removed. The reload holds the
        lock of every product it touches, so it never interleaves with a
        decrement on the same record.
        """
        ...

    @abstractmethod
    def set_controlled(self, product_id: str, controlled: bool) -> bool:
        """Set the controlled-substance flag. Returns True when the value changed."""
        ...
