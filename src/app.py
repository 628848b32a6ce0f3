"""TaniMart FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the tanimart domain context, with the caller id bound to the
log context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from domain.toml.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tanimart.domain import tanimart  # noqa: E402
from tanimart.utils.logging import add_context, clear_context, get_logger

tanimart.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="TaniMart API",
    description="Agricultural marketplace: carts, checkout, orders and notifications",
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
    """Push the tanimart domain context and bind the caller for logging."""
    clear_context()
    add_context(
        path=request.url.path,
        method=request.method,
        user_id=request.headers.get("x-user-id"),
    )
    with tanimart.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from tanimart.api.catalog import product_router  # noqa: E402
from tanimart.api.errors import register_exception_handlers  # noqa: E402
from tanimart.api.notifications import router as notification_router  # noqa: E402
from tanimart.api.ordering import cart_router, checkout_router, order_router  # noqa: E402

app.include_router(checkout_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(notification_router)
app.include_router(product_router)

register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": {"name": tanimart.name},
        }
    )
