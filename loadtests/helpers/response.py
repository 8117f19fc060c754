"""Response error extraction for load test observability.

Parses Pharmacy API error responses into human-readable messages.
Handles three response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Rejected orders (409): {"error": "Order rejected", "errors": [{"identifier": ..., "reason": ...}]}
- Domain errors (400/404/409/503): {"error": "msg", "reason": "..."}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON, return raw text truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    # Pydantic validation errors: {"detail": [{"loc": [...], "msg": "..."}]}
    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    # Rejected order: one entry per offending line
    if isinstance(body.get("errors"), list):
        return " | ".join(f"{e.get('identifier')}: {e.get('reason')}" for e in body["errors"])

    if "error" in body:
        reason = body.get("reason")
        return f"{reason}: {body['error']}" if reason else str(body["error"])

    # Unknown shape, stringify and truncate
    return str(body)[:300]


def is_stock_conflict(response: Response) -> bool:
    """True when the order lost to another buyer, which is expected under load."""
    if response.status_code != 409:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    reasons = {e.get("reason") for e in body.get("errors", [])} or {body.get("reason")}
    return reasons == {"insufficient_stock"}
