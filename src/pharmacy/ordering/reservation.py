"""Reservation engine: commits a validated order against the product store.

State machine::

    VALIDATING -> RESERVING -> COMMITTED
    VALIDATING -> REJECTED
    RESERVING  -> REJECTED      (a decrement lost a race; applied ones rolled back)

One decrement per distinct product, for the aggregated quantity. If any
decrement fails, the decrements already applied are re-incremented in reverse
order and the original failure is raised. A failed re-increment leaves stock
wrong, so it is escalated as InternalInconsistency with the quantities that
could not be given back.

The engine is the only caller of ``decrement_stock`` / ``restore_stock``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

import structlog

from pharmacy.catalog.cache import CatalogCache
from pharmacy.errors import InternalInconsistency, PharmacyError
from pharmacy.ordering.identifiers import OrderIdGenerator
from pharmacy.ordering.validation import ValidationReport
from pharmacy.product.product import ProductView
from pharmacy.store.port import ProductStore

logger = structlog.get_logger(__name__)


def _reason(exc: Exception) -> str:
    if isinstance(exc, PharmacyError):
        return exc.reason
    return type(exc).__name__


class OrderState(Enum):
    VALIDATING = "VALIDATING"
    RESERVING = "RESERVING"
    COMMITTED = "COMMITTED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class CommittedLine:
    product_id: str
    name: str
    quantity: int
    price: float
    new_stock: int

    @property
    def subtotal(self) -> float:
        return round(self.price * self.quantity, 2)

    def to_dict(self) -> dict:
        return {
            "identifier": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": self.price,
            "new_stock": self.new_stock,
        }


@dataclass(frozen=True)
class OrderResult:
    order_id: str
    lines: tuple[CommittedLine, ...]
    state: OrderState = OrderState.COMMITTED

    @property
    def total(self) -> float:
        return round(sum(line.subtotal for line in self.lines), 2)

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "lines": [line.to_dict() for line in self.lines],
            "total": self.total,
        }


class ReservationEngine:
    def __init__(
        self,
        store: ProductStore,
        cache: CatalogCache | None = None,
        ids: OrderIdGenerator | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.ids = ids or OrderIdGenerator()

    def reserve(self, report: ValidationReport) -> OrderResult:
        """Commit an accepted validation report, all or nothing."""
        if not report.accepted:
            raise ValueError("Only an accepted validation report can be reserved")
        return self.commit(report.demand, report.products)

    def commit(self, demand: Mapping[str, int], products: Mapping[str, ProductView]) -> OrderResult:
        logger.info("Order state changed", state=OrderState.RESERVING.value, product_count=len(demand))

        applied: list[tuple[str, int]] = []
        committed: list[CommittedLine] = []
        for product_id, quantity in demand.items():
            try:
                new_stock = self.store.decrement_stock(product_id, quantity)
            except Exception as exc:
                reason = _reason(exc)
                logger.warning(
                    "Reservation failed, rolling back",
                    product_id=product_id,
                    reason=reason,
                    applied=len(applied),
                )
                self._rollback(applied)
                logger.info("Order state changed", state=OrderState.REJECTED.value, reason=reason)
                raise

            applied.append((product_id, quantity))
            product = products[product_id]
            committed.append(
                CommittedLine(
                    product_id=product_id,
                    name=product.name,
                    quantity=quantity,
                    price=product.price,
                    new_stock=new_stock,
                )
            )

        result = OrderResult(order_id=self.ids.next_id(), lines=tuple(committed))
        if self.cache is not None:
            self.cache.invalidate()

        logger.info(
            "Order state changed",
            state=OrderState.COMMITTED.value,
            order_id=result.order_id,
            total=result.total,
        )
        return result

    def _rollback(self, applied: list[tuple[str, int]]) -> None:
        pending: dict[str, int] = {}
        for product_id, quantity in reversed(applied):
            try:
                self.store.restore_stock(product_id, quantity)
            except Exception as exc:
                pending[product_id] = quantity
                logger.error(
                    "Stock restore failed", product_id=product_id, quantity=quantity, reason=_reason(exc)
                )

        if pending:
            logger.critical("Rollback incomplete, stock is inconsistent", pending=pending)
            raise InternalInconsistency(
                f"Could not restore stock for {len(pending)} product(s) after a failed reservation",
                identifier=next(iter(pending)),
                pending=pending,
            )
