"""Product store factory.

Provides get_store() / set_store() to swap implementations:
- RepositoryProductStore (default) persists through the Protean repository
- FakeProductStore for tests that need to simulate store failures
"""

import os

from pharmacy.settings import get_settings
from pharmacy.store.port import ProductStore

_current_store: ProductStore | None = None


def get_store() -> ProductStore:
    """Return the configured product store (singleton).

    Selected by the PRODUCT_STORE_ADAPTER environment variable.
    """
    global _current_store
    if _current_store is None:
        adapter = os.environ.get("PRODUCT_STORE_ADAPTER", "repository")
        timeout = get_settings().store_timeout_s
        if adapter == "repository":
            from pharmacy.store.repository_adapter import RepositoryProductStore

            _current_store = RepositoryProductStore(timeout=timeout)
        elif adapter == "fake":
            from pharmacy.store.fake_adapter import FakeProductStore

            _current_store = FakeProductStore(timeout=timeout)
        else:
            raise ValueError(f"Unknown product store adapter: {adapter}")
    return _current_store


def set_store(store: ProductStore) -> None:
    """Override the active product store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_store() -> None:
    """Reset to the configured store."""
    global _current_store
    _current_store = None
