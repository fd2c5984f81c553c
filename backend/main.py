"""
Storefront Admin API — FastAPI Application

Admin endpoints for order lifecycle management (status changes, refunds,
audit timeline), coupons, inventory, notifications and dashboard stats.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from domain.responses import error_response
from routes import coupons, dashboard, health, inventory, notifications, orders

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: validate settings, create DB tables."""
    # Ensure data/ directory exists for SQLite
    if settings.database_url.startswith("sqlite:///./"):
        os.makedirs("data", exist_ok=True)

    settings.validate_production_settings()

    from database import init_db, engine
    await init_db()
    logger.info("Database initialized")

    yield  # app runs here

    await engine.dispose()
    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="Storefront Admin API",
    description="Order lifecycle, refunds, coupons, inventory, notifications and dashboard for storefront administrators",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(orders.router)
app.include_router(coupons.router)
app.include_router(dashboard.router)
app.include_router(inventory.router)
app.include_router(notifications.router)


# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Last-resort handler: anything unexpected becomes a 500 envelope.

    Never return raw exception details to clients; the full traceback is
    logged server-side.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response("internal_server_error", "Internal server error"),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Wrap HTTPException and DomainError in the error envelope.

    The status code is kept; DomainError subclasses also carry a code and details.
    """
    # DomainError (a subclass of HTTPException) carries structured info
    if hasattr(exc, "message") and hasattr(exc, "details"):
        error_code = exc.__class__.__name__.replace("Error", "").lower()
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(error_code, exc.message, exc.details),
        )

    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response("http_error", message, detail if not isinstance(detail, str) else None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    """Wrap FastAPI's 422 body validation errors in the standard envelope."""
    return JSONResponse(
        status_code=422,
        content=error_response(
            "request_validation",
            "Request validation failed",
            {"errors": jsonable_encoder(exc.errors())},
        ),
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
