"""Pydantic request/response schemas for the Pharmacy API.

These are external contracts, separate from the internal ProductView and
OrderResult types. Order line quantities are accepted as-is so that a bad
quantity is reported per line instead of failing the whole request body.
"""

from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class OrderLineSchema(BaseModel):
    identifier: str | int | None = None
    name: str | None = None
    quantity: Any = None


class SubmitOrderRequest(BaseModel):
    session_id: str | None = None
    lines: list[OrderLineSchema] = Field(default_factory=list)


class CheckStockRequest(BaseModel):
    lines: list[OrderLineSchema] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Order Response Schemas
# ---------------------------------------------------------------------------
class CommittedLineResponse(BaseModel):
    identifier: str
    name: str
    quantity: int
    price: float
    new_stock: int


class OrderConfirmationResponse(BaseModel):
    order_id: str
    lines: list[CommittedLineResponse]
    total: float
    handoff_url: str | None = None


class CheckedLineResponse(BaseModel):
    identifier: str
    name: str
    quantity: int
    price: float
    available: int


class StockCheckResponse(BaseModel):
    ok: bool
    lines: list[CheckedLineResponse]
    errors: list[dict]


# ---------------------------------------------------------------------------
# Catalog Schemas
# ---------------------------------------------------------------------------
class ProductResponse(BaseModel):
    product_id: str
    name: str
    price: float
    stock: int
    controlled: bool = False


class SuggestionsResponse(BaseModel):
    suggestions: list[str]


class ReloadCatalogRequest(BaseModel):
    records: list[dict] | None = None


class ReloadReportResponse(BaseModel):
    loaded: int
    skipped: int
    removed: int


class FlagControlledResponse(BaseModel):
    flagged: int
