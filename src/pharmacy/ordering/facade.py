"""Order intake facade, the single entry point used by the API layer.

``submit_order`` validates every line against live stock and, only when all
lines are admissible, hands the aggregated demand to the ReservationEngine.
A rejected order comes back as an OrderRejection listing every problem;
commit-time failures (a race lost, store timeout, broken rollback) propagate
as exceptions and are never turned into a confirmation.
"""

from dataclasses import dataclass

import structlog

from pharmacy.catalog.cache import CatalogCache, get_catalog_cache
from pharmacy.errors import InvalidInput
from pharmacy.ordering.identifiers import OrderIdGenerator
from pharmacy.ordering.lines import parse_lines
from pharmacy.ordering.reservation import OrderResult, OrderState, ReservationEngine
from pharmacy.ordering.validation import validate_order
from pharmacy.settings import get_settings
from pharmacy.store import get_store
from pharmacy.store.port import ProductStore
from pharmacy.utils.logging import order_context

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderRejection:
    errors: list[dict]

    def to_dict(self) -> dict:
        return {"errors": self.errors}


@dataclass(frozen=True)
class StockCheck:
    lines: list[dict]
    errors: list[dict]

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {"ok": self.ok, "lines": self.lines, "errors": self.errors}


class OrderFacade:
    def __init__(
        self,
        store: ProductStore,
        cache: CatalogCache | None = None,
        engine: ReservationEngine | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.engine = engine or ReservationEngine(store, cache)

    def submit_order(self, session_id, raw_lines) -> OrderResult | OrderRejection:
        with order_context(session_id):
            lines = parse_lines(raw_lines)
            if not lines:
                raise InvalidInput("Order must contain at least one line")

            logger.info("Order state changed", state=OrderState.VALIDATING.value, line_count=len(lines))
            report = validate_order(lines, self.store)
            if not report.accepted:
                logger.info(
                    "Order state changed",
                    state=OrderState.REJECTED.value,
                    error_count=len(report.errors),
                )
                return OrderRejection(errors=report.errors)

            return self.engine.reserve(report)

    def check_stock(self, raw_lines) -> StockCheck:
        """Validate lines without reserving anything."""
        lines = parse_lines(raw_lines)
        if not lines:
            raise InvalidInput("Order must contain at least one line")

        report = validate_order(lines, self.store)
        admissible = [
            {
                "identifier": verdict.product.product_id,
                "name": verdict.product.name,
                "quantity": verdict.quantity,
                "price": verdict.product.price,
                "available": verdict.product.stock,
            }
            for verdict in report.verdicts
            if verdict.admissible
        ]
        return StockCheck(lines=admissible, errors=report.errors)


_current_facade: OrderFacade | None = None


def get_order_facade() -> OrderFacade:
    """Return the process-wide facade wired to the active store and cache."""
    global _current_facade
    if _current_facade is None:
        store = get_store()
        cache = get_catalog_cache()
        ids = OrderIdGenerator(prefix=get_settings().order_prefix)
        _current_facade = OrderFacade(store, cache, ReservationEngine(store, cache, ids))
    return _current_facade


def reset_order_facade() -> None:
    global _current_facade
    _current_facade = None
