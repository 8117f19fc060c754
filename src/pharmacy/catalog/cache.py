"""Time-boxed catalog snapshot serving the browse paths (search, autocomplete).

The snapshot is an immutable value replaced wholesale on refresh. Readers take
a reference to the current snapshot and never need a lock; only the refresh
itself is serialized so concurrent stale reads trigger a single store scan.

Reservation decisions never read from here; they go to the ProductStore.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from pharmacy.product.product import ProductView
from pharmacy.settings import get_settings
from pharmacy.store import get_store
from pharmacy.store.port import ProductStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CacheSnapshot:
    products: tuple[ProductView, ...]
    captured_at: float
    ttl_ms: int
    captured_wall: float = field(default_factory=time.time)

    def age_ms(self, now: float) -> float:
        return (now - self.captured_at) * 1000.0

    def is_fresh(self, now: float) -> bool:
        return self.age_ms(now) < self.ttl_ms


class CatalogCache:
    def __init__(
        self,
        store: ProductStore,
        ttl_ms: int = 60_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._snapshot: CacheSnapshot | None = None
        self._refresh_lock = threading.Lock()
        self._generation = 0

    @property
    def snapshot(self) -> CacheSnapshot | None:
        """The last captured snapshot, fresh or not. Does not refresh."""
        return self._snapshot

    def get(self) -> CacheSnapshot:
        """Return a fresh snapshot, rebuilding it from the store when stale or invalidated."""
        current = self._snapshot
        if current is not None and current.is_fresh(self._clock()):
            return current

        with self._refresh_lock:
            # Another reader may have refreshed while we waited
            current = self._snapshot
            if current is not None and current.is_fresh(self._clock()):
                return current

            generation = self._generation
            products = tuple(self.store.list_products())
            snapshot = CacheSnapshot(products=products, captured_at=self._clock(), ttl_ms=self.ttl_ms)
            # An invalidate during the read means the products may predate a write
            if generation == self._generation:
                self._snapshot = snapshot

        logger.debug("Catalog snapshot refreshed", product_count=len(products))
        return snapshot

    def invalidate(self) -> None:
        self._generation += 1
        self._snapshot = None


_current_cache: CatalogCache | None = None


def get_catalog_cache() -> CatalogCache:
    """Return the process-wide catalog cache bound to the active product store."""
    global _current_cache
    if _current_cache is None:
        _current_cache = CatalogCache(get_store(), ttl_ms=get_settings().cache_ttl_ms)
    return _current_cache


def reset_catalog_cache() -> None:
    global _current_cache
    _current_cache = None
