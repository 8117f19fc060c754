"""FastAPI routes for the Pharmacy service: orders, catalog and products."""

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from pharmacy.api.schemas import (
    CheckStockRequest,
    FlagControlledResponse,
    OrderConfirmationResponse,
    ProductResponse,
    ReloadCatalogRequest,
    ReloadReportResponse,
    StockCheckResponse,
    SubmitOrderRequest,
    SuggestionsResponse,
)
from pharmacy.catalog.cache import get_catalog_cache
from pharmacy.catalog.controlled import flag_controlled_substances
from pharmacy.catalog.reload import load_catalog_file, reload_catalog
from pharmacy.catalog.search import query_catalog, suggest_names
from pharmacy.errors import InvalidInput
from pharmacy.ordering.facade import OrderRejection, get_order_facade
from pharmacy.ordering.handoff import build_handoff_message, handoff_link
from pharmacy.settings import get_settings
from pharmacy.store import get_store

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderConfirmationResponse)
async def submit_order(body: SubmitOrderRequest) -> OrderConfirmationResponse:
    lines = [line.model_dump() for line in body.lines]
    outcome = get_order_facade().submit_order(body.session_id, lines)

    if isinstance(outcome, OrderRejection):
        return JSONResponse(status_code=409, content={"error": "Order rejected", "errors": outcome.errors})

    settings = get_settings()
    handoff_url = None
    if settings.pharmacy_phone:
        message = build_handoff_message(outcome, settings.currency)
        handoff_url = handoff_link(settings.pharmacy_phone, message)

    return OrderConfirmationResponse(**outcome.to_dict(), handoff_url=handoff_url)


@order_router.post("/check", response_model=StockCheckResponse)
async def check_stock(body: CheckStockRequest) -> StockCheckResponse:
    lines = [line.model_dump() for line in body.lines]
    result = get_order_facade().check_stock(lines)
    return StockCheckResponse(**result.to_dict())


# ---------------------------------------------------------------------------
# Catalog Router
# ---------------------------------------------------------------------------
catalog_router = APIRouter(prefix="/catalog", tags=["catalog"])


@catalog_router.get("/search", response_model=list[ProductResponse])
async def search_catalog(query: str = "", controlled: bool = False) -> list[ProductResponse]:
    settings = get_settings()
    text = query.strip()
    if len(text) < settings.min_query_length:
        raise InvalidInput(
            f"Search query must be at least {settings.min_query_length} characters",
            identifier=text,
        )

    products = query_catalog(get_catalog_cache(), text, controlled_only=controlled, limit=settings.search_limit)
    return [ProductResponse(**product.to_dict()) for product in products]


@catalog_router.get("/suggest", response_model=SuggestionsResponse)
async def suggest(prefix: str = "", limit: int = 10) -> SuggestionsResponse:
    return SuggestionsResponse(suggestions=suggest_names(get_catalog_cache(), prefix, limit=max(1, min(limit, 50))))


@catalog_router.post("/reload", response_model=ReloadReportResponse)
async def reload(body: ReloadCatalogRequest | None = Body(default=None)) -> ReloadReportResponse:
    records = body.records if body is not None else None
    if records is None:
        path = get_settings().catalog_path
        if not path:
            raise InvalidInput("No records given and no catalog file configured")
        records = load_catalog_file(path)

    report = reload_catalog(get_store(), get_catalog_cache(), records)
    return ReloadReportResponse(**report.to_dict())


@catalog_router.post("/controlled", response_model=FlagControlledResponse)
async def flag_controlled() -> FlagControlledResponse:
    flagged = flag_controlled_substances(get_store(), cache=get_catalog_cache())
    return FlagControlledResponse(flagged=flagged)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = get_store().find_by_id(product_id)
    return ProductResponse(**product.to_dict())
