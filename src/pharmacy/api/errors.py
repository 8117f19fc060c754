"""Maps pharmacy domain errors to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pharmacy.errors import (
    InsufficientStock,
    InternalInconsistency,
    InvalidInput,
    PharmacyError,
    ProductNotFound,
    StoreUnavailable,
)

STATUS_CODES = {
    InvalidInput: 400,
    ProductNotFound: 404,
    InsufficientStock: 409,
    StoreUnavailable: 503,
    InternalInconsistency: 500,
}


def status_for(exc: PharmacyError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return 500


def error_body(exc: PharmacyError) -> dict:
    body = {"error": exc.message, "reason": exc.reason, "identifier": exc.identifier}
    if isinstance(exc, InsufficientStock):
        body["available"] = exc.available
    if isinstance(exc, StoreUnavailable):
        body["retryable"] = True
    return body


async def pharmacy_error_handler(request: Request, exc: PharmacyError) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content=error_body(exc))


def register_pharmacy_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PharmacyError, pharmacy_error_handler)
