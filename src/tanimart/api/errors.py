"""HTTP mapping for TaniMart's error types."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from tanimart.shared.errors import AuthorizationError, PersistenceError, StockConflictError

logger = structlog.get_logger(__name__)


def _first_messages(messages):
    errors = {}
    for field, value in (messages or {}).items():
        if isinstance(value, (list, tuple)):
            errors[field] = str(value[0]) if value else ""
        else:
            errors[field] = str(value)
    return errors


async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"errors": _first_messages(exc.messages)})


async def stock_conflict_handler(request: Request, exc: StockConflictError):
    return JSONResponse(
        status_code=409,
        content={
            "error": "stock_conflict",
            "productId": exc.product_id,
            "requested": exc.requested,
            "available": exc.available,
        },
    )


async def authorization_error_handler(request: Request, exc: AuthorizationError):
    logger.info("Request refused", path=request.url.path, reason=str(exc))
    return JSONResponse(status_code=403, content={"error": "forbidden", "detail": str(exc)})


async def not_found_handler(request: Request, exc: ObjectNotFoundError):
    return JSONResponse(status_code=404, content={"error": "not_found", "detail": str(exc)})


async def persistence_error_handler(request: Request, exc: PersistenceError):
    return JSONResponse(status_code=503, content={"error": "persistence_failure"})


def register_exception_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then TaniMart's on top of them."""
    register_protean_handlers(app)

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(StockConflictError, stock_conflict_handler)
    app.add_exception_handler(AuthorizationError, authorization_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
