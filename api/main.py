"""
api/main.py -- FastAPI application entry point for Lampshop Admin.

Run with:  uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware    -- adds CORS headers for the admin frontend origins
  2. SlowAPIMiddleware -- enforces per-route rate limits from api.limiter

Lifespan builds every shared object once and hangs it on app.state:
  app.state.auth_gate -- AuthGate (token issue / verify)
  app.state.products  -- ProductStore
  app.state.orders    -- OrderStore
  app.state.catalog   -- CategoryCatalog (reference data)
  app.state.notifier  -- ChangeNotifier for order status changes
Route handlers read them from request.app.state; there is no module-level
mutable state. Everything is in memory and is lost on restart.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.categories import router as categories_router
from api.routes.orders import router as orders_router
from api.routes.products import router as products_router
from auth.credentials import StaticCredentialProvider
from auth.tokens import AuthGate
from catalog.notifier import HttpChangeNotifier, build_notifier
from catalog.reference import CategoryCatalog
from catalog.seed import seed_demo_data
from catalog.store import OrderStore, ProductStore
from core.config import get_settings

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("lampshop.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the auth gate, stores, reference catalog and notifier.

    Everything before yield runs on startup; everything after yield runs on
    shutdown.
    """
    logger.info("Lampshop Admin API starting up")
    app.state.auth_gate = AuthGate(
        secret_key=_settings.secret_key,
        credentials=StaticCredentialProvider(_settings.admin_username, _settings.admin_password),
        ttl_seconds=_settings.token_expire_seconds,
    )
    app.state.products = ProductStore()
    app.state.orders = OrderStore()
    if _settings.seed_demo_data:
        seed_demo_data(app.state.products, app.state.orders)
        logger.info(
            "Demo data loaded (%d product(s), %d order(s))",
            app.state.products.count(),
            app.state.orders.count(),
        )
    app.state.catalog = CategoryCatalog()
    app.state.notifier = build_notifier(_settings.notify_url, timeout=_settings.notify_timeout_seconds)
    logger.info("Order notifications: %s", type(app.state.notifier).__name__)

    yield

    if isinstance(app.state.notifier, HttpChangeNotifier):
        app.state.notifier.close()
    logger.info("Lampshop Admin API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Lampshop Admin API",
    description="Back-office API for the Lampshop catalog: products, orders and category metadata.",
    version=_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Register in the order you want the request to encounter them:
# CORS -> SlowAPI.
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "Content-Type", "Authorization"],
    expose_headers=["Content-Length"],
    max_age=12 * 3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
#
# Paths are unversioned: the admin frontend calls /login, /products, ...
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(categories_router, tags=["Categories"])
app.include_router(products_router, tags=["Products"])
app.include_router(orders_router, tags=["Orders"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="rate_limited",
                message="Too many requests.",
                detail=str(exc),
            )
        ).model_dump(),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or path params fail validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with detail=ErrorDetail(...).model_dump()
    (a dict). When detail is already a structured dict, use it directly as the
    error field rather than stringifying it.
    """
    headers = getattr(exc, "headers", None)
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=headers,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is logged only, never written to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable.
# No rate limit and no auth -- monitoring must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/health", include_in_schema=True, tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return liveness, version and the number of live records per store."""
    return HealthResponse(
        version=_VERSION,
        counts={
            "products": request.app.state.products.count(),
            "orders": request.app.state.orders.count(),
        },
    )
