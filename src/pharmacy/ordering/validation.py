"""Line-by-line stock validation for a proposed order.

Validation runs in two steps. ``resolve_lines`` reads the live product record
for each line from the store. ``classify_lines`` is pure: given the lines and
what they resolved to, it decides each line's verdict. Quantities for the same
product are summed across lines before they are compared with stock, so
``[A x2, A x2]`` against a stock of 3 is rejected.

Errors are collected for every line; validation never stops at the first.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from pharmacy.errors import InsufficientStock, InvalidInput, InvalidQuantity, PharmacyError, ProductNotFound
from pharmacy.ordering.lines import CartLine
from pharmacy.product.product import ProductView
from pharmacy.store.port import ProductStore


def coerce_quantity(value) -> int:
    """Return ``value`` as a positive int or raise InvalidQuantity.

    Accepts ints, integral floats and numeric strings. Booleans are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidQuantity(f"Quantity must be a positive integer, got {value!r}")

    if isinstance(value, int):
        quantity = value
    elif isinstance(value, float):
        if math.isnan(value) or math.isinf(value) or not value.is_integer():
            raise InvalidQuantity(f"Quantity must be a positive integer, got {value!r}")
        quantity = int(value)
    elif isinstance(value, str):
        text = value.strip()
        try:
            quantity = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                raise InvalidQuantity(f"Quantity must be a positive integer, got {value!r}") from None
            return coerce_quantity(number)
    else:
        raise InvalidQuantity(f"Quantity must be a positive integer, got {value!r}")

    if quantity <= 0:
        raise InvalidQuantity(f"Quantity must be a positive integer, got {value!r}")
    return quantity


@dataclass(frozen=True)
class LineVerdict:
    line: CartLine
    product: ProductView | None = None
    quantity: int | None = None
    error: PharmacyError | None = None

    @property
    def admissible(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ValidationReport:
    verdicts: tuple[LineVerdict, ...]
    demand: dict[str, int] = field(default_factory=dict)
    products: dict[str, ProductView] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return bool(self.verdicts) and all(v.admissible for v in self.verdicts)

    @property
    def errors(self) -> list[dict]:
        return [v.error.to_dict() for v in self.verdicts if v.error is not None]


def resolve_lines(lines: Sequence[CartLine], store: ProductStore) -> list[ProductView | PharmacyError]:
    """Look up the live product for each line, by identifier then by name.

    StoreUnavailable propagates; a missing product becomes a ProductNotFound
    entry for that line.
    """
    resolved: list[ProductView | PharmacyError] = []
    for line in lines:
        candidates = [c for c in (line.identifier, line.name) if c]
        if not candidates:
            resolved.append(InvalidInput("Order line has no product identifier"))
            continue

        product = None
        for candidate in candidates:
            try:
                product = store.find_by_name_or_id(candidate)
                break
            except ProductNotFound:
                continue

        if product is None:
            resolved.append(ProductNotFound(f"Product not found: {line.label}", identifier=line.label))
        else:
            resolved.append(product)
    return resolved


def classify_lines(
    lines: Sequence[CartLine],
    resolved: Sequence[ProductView | PharmacyError],
) -> ValidationReport:
    quantities: list[int | None] = []
    errors: list[PharmacyError | None] = []

    for line, target in zip(lines, resolved, strict=True):
        try:
            quantity = coerce_quantity(line.quantity)
        except InvalidQuantity as exc:
            exc.identifier = line.label
            quantities.append(None)
            errors.append(exc)
            continue

        quantities.append(quantity)
        errors.append(target if isinstance(target, PharmacyError) else None)

    demand: dict[str, int] = {}
    products: dict[str, ProductView] = {}
    for target, quantity, error in zip(resolved, quantities, errors, strict=True):
        if error is not None:
            continue
        products.setdefault(target.product_id, target)
        demand[target.product_id] = demand.get(target.product_id, 0) + quantity

    verdicts = []
    for line, target, quantity, error in zip(lines, resolved, quantities, errors, strict=True):
        product = target if isinstance(target, ProductView) else None
        if error is None:
            live = products[product.product_id]
            total = demand[product.product_id]
            if total > live.stock:
                error = InsufficientStock(
                    f"Insufficient stock for {live.name}. Available: {live.stock}, requested: {total}",
                    identifier=live.product_id,
                    available=live.stock,
                )
        verdicts.append(LineVerdict(line=line, product=product, quantity=quantity, error=error))

    return ValidationReport(verdicts=tuple(verdicts), demand=demand, products=products)


def validate_order(lines: Sequence[CartLine], store: ProductStore) -> ValidationReport:
    return classify_lines(lines, resolve_lines(lines, store))

