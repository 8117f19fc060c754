"""Advisory catalog queries served from the cached snapshot."""

from pharmacy.catalog.cache import CatalogCache
from pharmacy.product.product import ProductView


def query_catalog(cache: CatalogCache, text: str, controlled_only: bool = False, limit: int = 20) -> list[ProductView]:
    """Case-insensitive substring search on product name.

    Controlled and non-controlled products are searched separately:
    ``controlled_only=True`` returns only controlled products, otherwise only
    non-controlled ones. At most ``limit`` results, in catalog order.
    """
    needle = (text or "").strip().lower()
    results = []
    for product in cache.get().products:
        if product.controlled != controlled_only:
            continue
        if needle in product.name.lower():
            results.append(product)
            if len(results) >= limit:
                break
    return results


def suggest_names(cache: CatalogCache, prefix: str, limit: int = 10) -> list[str]:
    needle = (prefix or "").strip().lower()
    if not needle:
        return []

    names = []
    seen = set()
    for product in cache.get().products:
        if product.name.lower().startswith(needle) and product.name not in seen:
            seen.add(product.name)
            names.append(product.name)
            if len(names) >= limit:
                break
    return names
