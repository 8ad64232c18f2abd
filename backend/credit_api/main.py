"""
Credit API - FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers;
       the module-level `app` is what uvicorn serves
       (uvicorn credit_api.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                      FastAPI App                          │
    │                                                           │
    │  Middleware Chain:                                        │
    │  ┌──────────┐ ┌──────────────┐ ┌──────────┐ ┌──────────┐  │
    │  │  Req ID  │→│  Rate Limit  │→│ Logging  │→│  CORS    │  │
    │  └──────────┘ └──────────────┘ └──────────┘ └──────────┘  │
    │                                                           │
    │  Routers (/Users):                                        │
    │  ┌────────┐ ┌──────────┐ ┌────────┐ ┌──────────────┐      │
    │  │ users  │ │ contacts │ │  auth  │ │ transactions │      │
    │  └────────┘ └──────────┘ └────────┘ └──────────────┘      │
    │  + /health, /hello                                        │
    │                                                           │
    │  Exception Handlers:                                      │
    │  ┌─────────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ NotFound→404 │ DB→500 │ other→500  │  │
    │  └─────────────────────────────────────────────────────┘  │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log the effective database backend
    Shutdown: dispose the database engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from credit_api import __version__
from credit_api.config import settings
from credit_api.database import dispose_engine
from credit_api.exceptions import (
    CreditApiError,
    NotFoundError,
    ValidationError,
)
from credit_api.middleware.logging import RequestLoggingMiddleware
from credit_api.middleware.rate_limit import RateLimitMiddleware
from credit_api.middleware.request_id import RequestIDMiddleware, request_id_var
from credit_api.routes import auth, contacts, health, transactions, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] credit_api.services.transaction_service: ...

    Called once at startup, before anything logs. Third-party loggers that
    report every query or connection are raised to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Credit API %s starting up...", __version__)
    # Never log the full URL: it carries the database password
    backend = settings.database_url.split("://", 1)[0]
    logger.info("Database backend: %s", backend)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Credit API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
) -> JSONResponse:
    """
    Build the ErrorResponse body shared by every handler below.

    The catch-all 500 is rendered by Starlette's ServerErrorMiddleware, outside
    every user middleware, so the X-Request-ID header is set here as well.
    """
    rid = request_id_var.get("")
    content = {"error": error, "message": message, "request_id": rid}
    if details:
        content["details"] = details
    headers = {"X-Request-ID": rid} if rid else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP status codes and one JSON error shape.

    Handler hierarchy:
        RequestValidationError  → 400 (schema: missing field, wrong type)
        ValidationError         → 400 (business rule, incl. insufficient credit)
        NotFoundError           → 404
        CreditApiError (base)   → 500 (DatabaseError included)
        Exception (fallback)    → 500 (stack trace logged, never returned)
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed request: reported as 400 rather than FastAPI's default 422."""
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return _error_response(
            400, "validation_error", "The request is invalid.", {"errors": errors}
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning(
            "[%s] %s %s rejected: %s",
            request_id_var.get(""),
            request.method,
            request.url.path,
            exc.message,
        )
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(CreditApiError)
    async def handle_app_error(request: Request, exc: CreditApiError):
        # Context may hold driver messages; it is logged but never returned
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), exc, exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Tests build their own instance through this factory and override
    get_db_session to point at a temporary database.
    """
    app = FastAPI(
        title="User Management API",
        description=(
            "Users, their contacts, and credit transactions between a user and "
            "their contacts, with username/password login."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → RateLimit → Logging → CORS.
    # RequestID must be outermost: BaseHTTPMiddleware runs call_next in a
    # child task, so a request ID set further in would not reach the
    # catch-all 500 handler.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Location", "Retry-After"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    # auth first: /Users/login and /Users/reset-password are fixed paths
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(contacts.router)
    app.include_router(transactions.router)
    app.include_router(health.router)

    return app


app = create_app()
