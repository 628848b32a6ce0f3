"""Response error extraction for load test observability.

Parses TaniMart API error responses into human-readable messages.
Handles these response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Domain validation (422): {"errors": {"field": "msg"}}
- Other domain errors (403/404/409/503): {"error": "code", "detail": "..."} or
  {"error": "stock_conflict", "productId": "..."}
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
        # Not JSON; return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if isinstance(body.get("errors"), dict):
        return " | ".join(f"{k}: {v}" for k, v in body["errors"].items())

    if "error" in body:
        if body["error"] == "stock_conflict":
            return f"stock_conflict: product {body.get('productId')}"
        detail = body.get("detail")
        return f"{body['error']}: {detail}" if detail else str(body["error"])

    # Unknown shape
    return str(body)[:300]


def is_stock_conflict(response: Response) -> bool:
    if response.status_code != 409:
        return False
    try:
        return response.json().get("error") == "stock_conflict"
    except ValueError:
        return False
