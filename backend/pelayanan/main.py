"""
Pelayanan Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn pelayanan.main:app) and by the tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────────┐ ┌─────────────┐ ┌──────────────────┐   │
    │  │ Req ID   │→│  Logging    │→│  CORS            │   │
    │  └──────────┘ └─────────────┘ └──────────────────┘   │
    │                                                      │
    │  Routes:                                             │
    │  ┌────────────────────┐ ┌──────────────┐ ┌────────┐  │
    │  │ /api/submissions/* │ │ /api/admin/* │ │/health │  │
    │  └────────────────────┘ └──────────────┘ └────────┘  │
    │                                                      │
    │  app.state: database (engine + sessions),            │
    │             dispatchers (WhatsApp, email)            │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Report configuration problems (non-fatal)
    3. Create the Database handle, connect with retries, sync tables
    4. Build the notification dispatchers
    Shutdown:
    1. Dispose the database engine (only if this lifespan created it)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pelayanan import __version__
from pelayanan.config import settings
from pelayanan.database import Database
from pelayanan.exceptions import (
    AuditLogError,
    AuthenticationError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    StatusConflictError,
    ValidationError,
)
from pelayanan.middleware.cors import SubmissionCORSMiddleware
from pelayanan.middleware.logging import RequestLoggingMiddleware
from pelayanan.middleware.request_id import RequestIDMiddleware, request_id_var
from pelayanan.routes import admin, health, submissions
from pelayanan.services.notification_service import NotificationDispatchers

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Terjadi kesalahan internal server"
INVALID_REQUEST = "Data permintaan tidak valid"
INVALID_STATUS = "Status tidak valid"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Pelayanan Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # The service still runs; affected channels log FAILED attempts
        logger.warning("%s", str(e))

    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database.from_settings(settings)
        await app.state.database.connect()
        if settings.db_auto_create_tables:
            await app.state.database.create_tables()

    if getattr(app.state, "dispatchers", None) is None:
        app.state.dispatchers = NotificationDispatchers.from_settings(settings)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Pelayanan Backend shutting down...")
    if owns_database:
        await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error body.

    Handler hierarchy:
        ValidationError       → 400
        RequestValidationError → 400 (malformed JSON or field types)
        AuthenticationError   → 401
        ForbiddenError        → 403
        NotFoundError         → 404
        StatusConflictError   → 409
        AuditLogError         → 500 (generic message)
        DatabaseError         → 500 (generic message)
        Exception (fallback)  → 500 (generic message, stack trace logged)

    Internal details (SQL, stack traces, failed channels) never reach the
    response body; they are logged server-side with the request id.
    """

    def error_body(code: str, message: str, details: Optional[dict] = None) -> dict:
        body = {"error": code, "message": message, "request_id": request_id_var.get("")}
        if details:
            body["details"] = details
        return body

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # A PATCH body carries only `status`, so any body problem is an invalid status
        message = INVALID_STATUS if request.method == "PATCH" else INVALID_REQUEST
        errors = [
            {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
            for error in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", message, {"errors": errors}),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return JSONResponse(status_code=403, content=error_body("forbidden", exc.message))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=error_body("not_found", exc.message))

    @app.exception_handler(StatusConflictError)
    async def handle_conflict(request: Request, exc: StatusConflictError):
        logger.warning("[%s] Status conflict: %s", request_id_var.get(""), exc.context)
        return JSONResponse(
            status_code=409,
            content=error_body("conflict", exc.message, exc.context),
        )

    @app.exception_handler(AuditLogError)
    async def handle_audit_log_error(request: Request, exc: AuditLogError):
        logger.error(
            "[%s] Notification audit trail incomplete: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", GENERIC_SERVER_ERROR),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("internal_server_error", GENERIC_SERVER_ERROR),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    database: Optional[Database] = None,
    dispatchers: Optional[NotificationDispatchers] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database:    pre-built handle (tests). When None the lifespan creates
                     one from settings at startup and disposes it on shutdown.
        dispatchers: notification channels (tests inject fakes). When None the
                     lifespan builds the WhatsApp and email dispatchers.
    """
    app = FastAPI(
        title="Pelayanan API",
        description=(
            "Public-service submission tracking: citizens file requests and track "
            "them by code; administrators update status and citizens are notified "
            "over WhatsApp and email."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.dispatchers = dispatchers

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in REVERSE order of addition: RequestID → Logging → CORS
    # OPTIONS on /api/submissions/{id} bypasses the origin check (route answers it)
    app.add_middleware(
        SubmissionCORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(submissions.router)
    app.include_router(admin.router)
    app.include_router(health.router)

    return app


# uvicorn expects `pelayanan.main:app` to be importable
app = create_app()
