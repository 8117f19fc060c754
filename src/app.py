"""Pharmacy FastAPI application.

Serves order submission, stock pre-checks and catalog queries over HTTP.
Every request runs inside the pharmacy domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied.
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from pharmacy.domain import pharmacy

pharmacy.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Pharmacy API",
    description="Catalog search, stock reservation and order intake",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the pharmacy domain context for each request."""
    with pharmacy.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from pharmacy.api import (  # noqa: E402
    catalog_router,
    order_router,
    product_router,
    register_pharmacy_exception_handlers,
)

app.include_router(order_router)
app.include_router(catalog_router)
app.include_router(product_router)

register_exception_handlers(app)
register_pharmacy_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    from pharmacy.catalog.cache import get_catalog_cache

    snapshot = get_catalog_cache().get()
    captured_at = datetime.fromtimestamp(snapshot.captured_wall, UTC).isoformat()
    return JSONResponse(
        content={
            "status": "ok",
            "domain": pharmacy.name,
            "catalog": {
                "product_count": len(snapshot.products),
                "snapshot_captured_at": captured_at,
            },
        }
    )
