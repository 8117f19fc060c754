"""Cart lines as submitted by a client."""

from dataclasses import dataclass
from typing import Any

from pharmacy.errors import InvalidInput

_IDENTIFIER_KEYS = ("identifier", "product_id", "id", "_id")
_NAME_KEYS = ("name", "nombre")
_QUANTITY_KEYS = ("quantity", "cantidad")


@dataclass(frozen=True)
class CartLine:
    """One requested product and quantity.

    ``quantity`` is kept as received; it is coerced and checked during
    validation so that every bad line is reported, not just the first.
    """

    identifier: str
    quantity: Any
    name: str | None = None

    @property
    def label(self) -> str:
        return self.identifier or self.name or ""


def _pick(raw: dict, keys: tuple[str, ...]):
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def parse_lines(raw_lines) -> list[CartLine]:
    """Build CartLines from a list of ``{identifier, quantity}`` mappings.

    Spanish keys (``nombre``, ``cantidad``) are accepted as well.
    """
    if raw_lines is None:
        return []
    if not isinstance(raw_lines, (list, tuple)):
        raise InvalidInput("Order lines must be a list")

    lines = []
    for raw in raw_lines:
        if isinstance(raw, CartLine):
            lines.append(raw)
            continue
        if not isinstance(raw, dict):
            raise InvalidInput(f"Order line must be an object, got {type(raw).__name__}")

        identifier = _pick(raw, _IDENTIFIER_KEYS)
        name = _pick(raw, _NAME_KEYS)
        lines.append(
            CartLine(
                identifier=str(identifier) if identifier is not None else "",
                quantity=_pick(raw, _QUANTITY_KEYS),
                name=str(name) if name is not None else None,
            )
        )
    return lines
