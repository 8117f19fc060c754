"""Error taxonomy for catalog lookups, stock reservation and order intake.

Every error carries a stable ``reason`` code that is returned to clients
verbatim, so client-side handling does not depend on message wording.
"""


class PharmacyError(Exception):
    """Base class for all pharmacy domain errors."""

    reason = "error"

    def __init__(self, message: str, identifier: str | None = None):
        super().__init__(message)
        self.message = message
        self.identifier = identifier

    def to_dict(self) -> dict:
        return {"identifier": self.identifier, "reason": self.reason, "message": self.message}


class InvalidInput(PharmacyError):
    """Malformed request data: empty order, unusable line, bad query."""

    reason = "invalid_input"


class InvalidQuantity(InvalidInput):
    reason = "invalid_quantity"


class ProductNotFound(PharmacyError):
    reason = "product_not_found"


class InsufficientStock(PharmacyError):
    """Requested quantity exceeds the live stock of a product."""

    reason = "insufficient_stock"

    def __init__(self, message: str, identifier: str | None = None, available: int = 0):
        super().__init__(message, identifier)
        self.available = available

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["available"] = self.available
        return data


class StoreUnavailable(PharmacyError):
    """The product store could not be reached within its timeout. Safe to retry."""

    reason = "store_unavailable"
    retryable = True


class InternalInconsistency(PharmacyError):
    """A rollback failed part-way; stock for the listed products may be wrong."""

    reason = "internal_inconsistency"

    def __init__(self, message: str, identifier: str | None = None, pending: dict | None = None):
        super().__init__(message, identifier)
        self.pending = dict(pending or {})
