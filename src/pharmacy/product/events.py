"""Domain events for the Product aggregate.

Events are immutable facts about catalog and stock changes. They are stored
alongside the aggregate and give an audit trail of every decrement and every
rollback re-increment.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from pharmacy.domain import pharmacy


@pharmacy.event(part_of="Product")
class ProductRegistered:
    """A product was created by a catalog reload."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)
    controlled = Boolean(default=False)
    registered_at = DateTime(required=True)


@pharmacy.event(part_of="Product")
class ProductDetailsReplaced:
    """A catalog reload overwrote an existing product's details and stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    previous_stock = Integer(required=True)
    stock = Integer(required=True)
    controlled = Boolean(default=False)
    replaced_at = DateTime(required=True)


@pharmacy.event(part_of="Product")
class StockDecremented:
    """Stock was taken for an accepted order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    decremented_at = DateTime(required=True)


@pharmacy.event(part_of="Product")
class StockRestored:
    """A decrement was undone because its order was aborted."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    restored_at = DateTime(required=True)


@pharmacy.event(part_of="Product")
class ControlledFlagChanged:
    """A product was classified as (or cleared from being) a controlled substance."""

    __version__ = 1

    product_id = Identifier(required=True)
    controlled = Boolean(required=True)
    changed_at = DateTime(required=True)
