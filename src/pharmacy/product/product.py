"""Product aggregate root and its immutable read view.

Stock Model:
    stock:      units on the shelf that can still be sold
    controlled: requires a prescription; searched separately from OTC products

Stock only changes through ``decrement_stock`` and ``restore_stock``, and only
the ProductStore calls them, under that product's lock.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from pharmacy.domain import pharmacy
from pharmacy.product.events import (
    ControlledFlagChanged,
    ProductDetailsReplaced,
    ProductRegistered,
    StockDecremented,
    StockRestored,
)

NAME_MAX_LENGTH = 255


@dataclass(frozen=True)
class ProductView:
    """Point-in-time copy of a product, safe to share between threads."""

    product_id: str
    name: str
    price: float
    stock: int
    controlled: bool = False

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": self.price,
            "stock": self.stock,
            "controlled": self.controlled,
        }


@pharmacy.aggregate
class Product:
    """A sellable pharmacy product with its shelf stock."""

    product_id = Identifier(identifier=True, required=True)
    name = String(required=True, max_length=NAME_MAX_LENGTH)
    price = Float(default=0.0, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    controlled = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def name_must_not_be_blank(self):
        if not self.name or not self.name.strip():
            raise ValidationError({"name": ["Product name must not be blank"]})

    @invariant.post
    def stock_must_not_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": [f"Stock cannot be negative: {self.stock}"]})

    @classmethod
    def register(cls, product_id, name, price=0.0, stock=0, controlled=False):
        now = datetime.now(UTC)
        product = cls(
            product_id=product_id,
            name=name,
            price=price,
            stock=stock,
            controlled=controlled,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product_id),
                name=name,
                price=price,
                stock=stock,
                controlled=controlled,
                registered_at=now,
            )
        )
        return product

    def replace_details(self, name, price, stock, controlled):
        """Overwrite catalog data during a reload."""
        previous_stock = self.stock
        now = datetime.now(UTC)

        self.name = name
        self.price = price
        self.stock = stock
        self.controlled = controlled
        self.updated_at = now

        self.raise_(
            ProductDetailsReplaced(
                product_id=str(self.product_id),
                name=name,
                price=price,
                previous_stock=previous_stock,
                stock=stock,
                controlled=controlled,
                replaced_at=now,
            )
        )

    def decrement_stock(self, quantity):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if self.stock < quantity:
            raise ValidationError({"stock": [f"Insufficient stock: {self.stock} available, {quantity} requested"]})

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = previous - quantity
        self.updated_at = now

        self.raise_(
            StockDecremented(
                product_id=str(self.product_id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                decremented_at=now,
            )
        )
        return self.stock

    def restore_stock(self, quantity):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = previous + quantity
        self.updated_at = now

        self.raise_(
            StockRestored(
                product_id=str(self.product_id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                restored_at=now,
            )
        )
        return self.stock

    def set_controlled(self, controlled):
        """Change the controlled flag. Returns False when it already had that value."""
        if bool(self.controlled) == bool(controlled):
            return False

        now = datetime.now(UTC)
        self.controlled = bool(controlled)
        self.updated_at = now
        self.raise_(
            ControlledFlagChanged(
                product_id=str(self.product_id),
                controlled=self.controlled,
                changed_at=now,
            )
        )
        return True

    def to_view(self) -> ProductView:
        return ProductView(
            product_id=str(self.product_id),
            name=self.name,
            price=float(self.price or 0.0),
            stock=int(self.stock or 0),
            controlled=bool(self.controlled),
        )
