"""Wholesale catalog reload from a sequence of raw product records.

Records come from a JSON export and may use either English or Spanish keys.
Numeric fields are coerced leniently: anything missing, non-numeric, negative
or NaN becomes 0, so a malformed record still produces a product.
"""

import json
import math
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import structlog

from pharmacy.catalog.cache import CatalogCache
from pharmacy.errors import InvalidInput
from pharmacy.product.product import NAME_MAX_LENGTH, ProductView
from pharmacy.store.port import ProductStore

logger = structlog.get_logger(__name__)

PRODUCT_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_DNS, "products.pharmacy")

_ID_KEYS = ("id", "_id", "product_id")
_NAME_KEYS = ("name", "nombre")
_PRICE_KEYS = ("price", "precio")
_STOCK_KEYS = ("stock",)
_CONTROLLED_KEYS = ("controlled", "controlado")


@dataclass(frozen=True)
class ReloadReport:
    loaded: int
    skipped: int
    removed: int

    def to_dict(self) -> dict:
        return {"loaded": self.loaded, "skipped": self.skipped, "removed": self.removed}


def _first(raw: dict, keys: tuple[str, ...]):
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def coerce_number(value) -> float:
    """Return ``value`` as a non-negative finite float, or 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError:
            return 0.0
    else:
        return 0.0

    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def _coerce_flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "si", "sí")
    return bool(value)


def product_id_for(name: str) -> str:
    """Deterministic id for a record that has none, derived from its name."""
    return str(uuid.uuid5(PRODUCT_NAMESPACE, name.strip().lower()))


def normalize_record(raw) -> ProductView | None:
    """Turn one raw record into a ProductView.

    Returns None when it has no usable name, including names too long to store.
    """
    if not isinstance(raw, dict):
        return None

    name = _first(raw, _NAME_KEYS)
    if not isinstance(name, str) or not name.strip():
        return None
    name = name.strip()
    if len(name) > NAME_MAX_LENGTH:
        return None

    product_id = _first(raw, _ID_KEYS)
    if isinstance(product_id, dict) and "$oid" in product_id:
        # Mongo extended JSON export
        product_id = product_id["$oid"]
    product_id = str(product_id).strip() if product_id not in (None, "") else product_id_for(name)

    return ProductView(
        product_id=product_id,
        name=name,
        price=coerce_number(_first(raw, _PRICE_KEYS)),
        stock=int(coerce_number(_first(raw, _STOCK_KEYS))),
        controlled=_coerce_flag(_first(raw, _CONTROLLED_KEYS) or False),
    )


def load_catalog_file(path) -> list:
    """Read a JSON array of raw product records from ``path``."""
    try:
        with open(Path(path), encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise InvalidInput(f"Catalog file not found: {path}", identifier=str(path)) from None
    except json.JSONDecodeError as exc:
        raise InvalidInput(f"Catalog file is not valid JSON: {exc}", identifier=str(path)) from exc

    if not isinstance(data, list):
        raise InvalidInput("Catalog file must contain a JSON array of records", identifier=str(path))
    return data


def reload_catalog(store: ProductStore, cache: CatalogCache | None, records: Iterable) -> ReloadReport:
    """Replace the whole catalog with ``records``.

    Running it twice with the same records leaves the store unchanged, since
    ids are either given or derived from the name.
    """
    products = []
    skipped = 0
    for raw in records:
        product = normalize_record(raw)
        if product is None:
            skipped += 1
            continue
        products.append(product)

    try:
        result = store.bulk_replace(products)
    finally:
        if cache is not None:
            cache.invalidate()

    report = ReloadReport(loaded=result.loaded, skipped=skipped, removed=result.removed)
    logger.info("Catalog reloaded", loaded=report.loaded, skipped=report.skipped, removed=report.removed)
    return report
