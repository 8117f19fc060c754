"""Product store backed by the Protean repository for the Product aggregate.

Each write runs as load → mutate → ``repo.add`` while holding that product's
lock. ``repo.add`` outside a unit of work commits immediately, so the write is
durable before the lock is released and the next writer always loads the
committed stock.
"""

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

import structlog
from protean.exceptions import DatabaseError, ObjectNotFoundError, TransactionError, ValidationError
from protean.utils.globals import current_domain
from sqlalchemy.exc import SQLAlchemyError

from pharmacy.errors import InsufficientStock, InvalidInput, ProductNotFound, StoreUnavailable
from pharmacy.product.product import Product, ProductView
from pharmacy.store.port import ProductStore, RecordLocks, ReplaceResult

logger = structlog.get_logger(__name__)

PAGE_SIZE = 500

# Failures of the backing provider, as opposed to domain rejections
PROVIDER_ERRORS = (DatabaseError, TransactionError, SQLAlchemyError, OSError)


@contextmanager
def provider_errors(product_id=None) -> Iterator[None]:
    """Re-raise provider failures as retryable StoreUnavailable."""
    try:
        yield
    except PROVIDER_ERRORS as exc:
        logger.error("Product store unreachable", product_id=product_id, error=str(exc))
        raise StoreUnavailable(f"Product store unavailable: {exc}", identifier=product_id) from exc


class RepositoryProductStore(ProductStore):
    def __init__(self, timeout: float = 2.0) -> None:
        self._locks = RecordLocks(timeout=timeout)
        self._reload_lock = threading.Lock()
        self._write_lock = threading.Lock()

    @staticmethod
    def _repo():
        return current_domain.repository_for(Product)

    def _get(self, product_id) -> Product:
        try:
            with provider_errors(str(product_id)):
                return self._repo().get(str(product_id))
        except ObjectNotFoundError:
            raise ProductNotFound(f"Product not found: {product_id}", identifier=str(product_id)) from None

    def _persist(self, product: Product) -> None:
        # The memory provider commits by swapping in a copy of all its data,
        # so two commits must never overlap even for different products.
        with self._write_lock, provider_errors(str(product.product_id)):
            self._repo().add(product)

    def _all(self) -> list[Product]:
        products: list[Product] = []
        offset = 0
        while True:
            with provider_errors():
                page = self._repo()._dao.query.order_by("name").offset(offset).limit(PAGE_SIZE).all()
            products.extend(page.items)
            if len(page.items) < PAGE_SIZE:
                return products
            offset += PAGE_SIZE

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def find_by_id(self, product_id: str) -> ProductView:
        return self._get(product_id).to_view()

    def find_by_name_or_id(self, identifier: str) -> ProductView:
        try:
            return self.find_by_id(identifier)
        except ProductNotFound:
            pass

        with provider_errors(str(identifier)):
            matches = self._repo()._dao.query.filter(name=str(identifier)).all().items
        if not matches:
            raise ProductNotFound(f"Product not found: {identifier}", identifier=str(identifier))
        return matches[0].to_view()

    def list_products(self) -> list[ProductView]:
        return [product.to_view() for product in self._all()]

    # -------------------------------------------------------------------
    # Stock writes
    # -------------------------------------------------------------------
    def decrement_stock(self, product_id: str, quantity: int, expected_min_stock: int | None = None) -> int:
        key = str(product_id)
        required = max(quantity, expected_min_stock or 0)

        with self._locks.hold(key):
            product = self._get(key)
            if product.stock < required:
                raise InsufficientStock(
                    f"Insufficient stock for {product.name}: {product.stock} available, {quantity} requested",
                    identifier=key,
                    available=product.stock,
                )
            new_stock = product.decrement_stock(quantity)
            self._persist(product)

        logger.debug("Stock decremented", product_id=key, quantity=quantity, new_stock=new_stock)
        return new_stock

    def restore_stock(self, product_id: str, quantity: int) -> int:
        key = str(product_id)

        with self._locks.hold(key):
            product = self._get(key)
            new_stock = product.restore_stock(quantity)
            self._persist(product)

        logger.info("Stock restored", product_id=key, quantity=quantity, new_stock=new_stock)
        return new_stock

    # -------------------------------------------------------------------
    # Catalog maintenance
    # -------------------------------------------------------------------
    def bulk_replace(self, records: Iterable[ProductView]) -> ReplaceResult:
        incoming: dict[str, ProductView] = {}
        for record in records:
            incoming[str(record.product_id)] = record

        with self._reload_lock:
            existing = {str(product.product_id) for product in self._all()}
            created = updated = removed = 0

            with self._locks.hold_all(existing | set(incoming)):
                # Build every aggregate first so a bad record rejects the whole reload
                staged: list[Product] = []
                for product_id, record in incoming.items():
                    try:
                        if product_id in existing:
                            product = self._get(product_id)
                            product.replace_details(
                                name=record.name,
                                price=record.price,
                                stock=record.stock,
                                controlled=record.controlled,
                            )
                            updated += 1
                        else:
                            product = Product.register(
                                product_id=product_id,
                                name=record.name,
                                price=record.price,
                                stock=record.stock,
                                controlled=record.controlled,
                            )
                            created += 1
                    except ValidationError as exc:
                        raise InvalidInput(
                            f"Catalog record {product_id} is invalid: {exc}", identifier=product_id
                        ) from exc
                    staged.append(product)

                stale = [self._get(product_id) for product_id in existing - set(incoming)]

                for product in staged:
                    self._persist(product)
                for product in stale:
                    with self._write_lock, provider_errors(str(product.product_id)):
                        self._repo()._dao.delete(product)
                    removed += 1

        result = ReplaceResult(created=created, updated=updated, removed=removed)
        logger.info("Catalog replaced", created=created, updated=updated, removed=removed)
        return result

    def set_controlled(self, product_id: str, controlled: bool) -> bool:
        key = str(product_id)
        with self._locks.hold(key):
            product = self._get(key)
            changed = product.set_controlled(controlled)
            if changed:
                self._persist(product)
        return changed
