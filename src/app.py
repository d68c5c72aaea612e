"""Cartxis FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

import uuid

import structlog

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (projectors fire in UoW)
#   - "production" → event_processing = "async" (projectors fire via Engine)
from catalog.domain import catalog  # noqa: E402
from customers.domain import customers  # noqa: E402
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sales.domain import sales  # noqa: E402
from shared.api import register_error_handlers
from shared.logging import add_context, clear_context, configure_logging

configure_logging()

logger = structlog.get_logger(__name__)

catalog.init()
customers.init()
sales.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
# Order matters: a customer's order history lives in sales, not customers.
_ROUTE_DOMAIN_MAP = [
    ("/api/v1/customers/", "/orders", sales),
    ("/api/v1/customers", None, customers),
    ("/api/v1/products", None, catalog),
    ("/api/v1/categories", None, catalog),
    ("/api/v1/carts", None, sales),
    ("/api/v1/checkout", None, sales),
    ("/api/v1/wishlist", None, sales),
    ("/api/v1/orders", None, sales),
    ("/api/v1/admin", None, sales),
]


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, suffix, domain in _ROUTE_DOMAIN_MAP:
        if path.startswith(prefix) and (suffix is None or path.rstrip("/").endswith(suffix)):
            return domain
    return None


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Cartxis API",
    description="E-commerce platform: Catalog, Customers and Sales domains",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    clear_context()
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    add_context(request_id=request_id, method=request.method, path=request.url.path)

    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
    else:
        # No domain match: health check, docs, etc.
        response = await call_next(request)

    response.headers["X-Request-ID"] = request_id
    logger.info("Request completed", status_code=response.status_code)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from catalog.api.routes import category_router, product_router  # noqa: E402
from customers.api.routes import router as customers_router  # noqa: E402
from sales.api.admin import (  # noqa: E402
    credit_memo_admin_router,
    invoice_admin_router,
    order_admin_router,
    shipment_admin_router,
    transaction_admin_router,
)
from sales.api.storefront import (  # noqa: E402
    cart_router,
    checkout_router,
    customer_order_router,
    order_router,
    wishlist_router,
)

# Sales' customer routes are registered first so /customers/{id}/orders wins
app.include_router(customer_order_router)
app.include_router(customers_router)
app.include_router(product_router)
app.include_router(category_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(wishlist_router)
app.include_router(order_router)
app.include_router(order_admin_router)
app.include_router(invoice_admin_router)
app.include_router(shipment_admin_router)
app.include_router(credit_memo_admin_router)
app.include_router(transaction_admin_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "catalog": {"name": catalog.name},
                "customers": {"name": customers.name},
                "sales": {"name": sales.name},
            },
        }
    )
