"""Controlled-substance classification.

Products whose name mentions one of the listed active ingredients need a
prescription and are kept out of the regular search results.
"""

from collections.abc import Iterable

import structlog

from pharmacy.catalog.cache import CatalogCache
from pharmacy.store.port import ProductStore

logger = structlog.get_logger(__name__)

CONTROLLED_SUBSTANCES = (
    "clonazepam",
    "diazepam",
    "lorazepam",
    "alprazolam",
    "zolpidem",
    "topiramato",
    "metadona",
    "morfina",
    "codeína",
    "oxcodona",
    "hidrocodona",
    "fentanilo",
    "metilfenidato",
    "anfetamina",
    "pregabalina",
)


def is_controlled_name(name: str, keywords: Iterable[str] = CONTROLLED_SUBSTANCES) -> bool:
    lowered = name.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def flag_controlled_substances(
    store: ProductStore,
    keywords: Iterable[str] = CONTROLLED_SUBSTANCES,
    cache: CatalogCache | None = None,
) -> int:
    """Mark matching products as controlled. Returns how many were newly flagged.

    Never clears the flag on products that don't match.
    """
    keywords = tuple(keywords)
    flagged = 0
    for product in store.list_products():
        if product.controlled or not is_controlled_name(product.name, keywords):
            continue
        if store.set_controlled(product.product_id, True):
            flagged += 1
            logger.info("Product flagged as controlled", product_id=product.product_id, name=product.name)

    if flagged and cache is not None:
        cache.invalidate()
    return flagged
