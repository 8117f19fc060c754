"""Runtime settings for the pharmacy service, read from environment variables."""

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    cache_ttl_ms: int = 60_000
    store_timeout_s: float = 2.0
    order_prefix: str = "PED"
    search_limit: int = 20
    min_query_length: int = 3
    catalog_path: str | None = None
    pharmacy_phone: str | None = None
    currency: str = "Bs"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            cache_ttl_ms=_env_int("PHARMACY_CACHE_TTL_MS", cls.cache_ttl_ms),
            store_timeout_s=_env_float("PHARMACY_STORE_TIMEOUT_S", cls.store_timeout_s),
            order_prefix=os.environ.get("PHARMACY_ORDER_PREFIX", cls.order_prefix),
            search_limit=_env_int("PHARMACY_SEARCH_LIMIT", cls.search_limit),
            min_query_length=_env_int("PHARMACY_MIN_QUERY_LENGTH", cls.min_query_length),
            catalog_path=os.environ.get("PHARMACY_CATALOG_PATH") or None,
            pharmacy_phone=os.environ.get("PHARMACY_PHONE") or None,
            currency=os.environ.get("PHARMACY_CURRENCY", cls.currency),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them from the environment once."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next call re-reads the environment (useful for tests)."""
    global _settings
    _settings = None
