"""
TraceNotes Backend - FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the tracer and the storage backend (unless the
       caller injects its own), wires them into one NoteService, registers
       middleware, exception handlers, and routes, and returns the app.
Who:   uvicorn (`uvicorn tracenotes.main:app`) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → CORS           │
    │                                                     │
    │  Routes:                                            │
    │    POST /api/notes  GET /api/notes  GET /api/receive│
    │    GET /health                                      │
    │                                                     │
    │  Exception Handlers:                                │
    │    InputError→400  NotFoundError→404  Storage→500   │
    │                                                     │
    │  app.state: settings, tracer, tracer_provider,      │
    │             note_store, note_service                │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → settings validation → store.startup()
    Shutdown: store.close() → tracer provider flush/shutdown
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.trace import Tracer

from tracenotes import __version__
from tracenotes.config import Settings, settings
from tracenotes.exceptions import InputError, NotFoundError, StorageError
from tracenotes.middleware.logging import RequestLoggingMiddleware
from tracenotes.middleware.request_id import RequestIDMiddleware, request_id_var
from tracenotes.routes import health, notes, receive
from tracenotes.services.note_service import NoteService
from tracenotes.storage import NoteStore, build_note_store
from tracenotes.tracing import build_tracer_provider, get_tracer

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] tracenotes.access: POST /api/notes 200 ...
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Third-party loggers that log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings
    store: NoteStore = app.state.note_store

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("TraceNotes Backend %s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: the service still answers with a working configuration
        logger.warning("Configuration warning: %s", str(e))

    if app_settings.storage_backend == "memory":
        logger.warning(
            "STORAGE_BACKEND=memory: notes are kept in process memory and lost on restart"
        )

    await store.startup()
    logger.info("Storage backend: %s", store.db_system)
    logger.info("Trace exporter: %s", app_settings.trace_exporter)
    logger.info(
        "Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port
    )
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("TraceNotes Backend shutting down...")
    await store.close()

    # Only a provider built by create_app() is ours to shut down
    provider = app.state.tracer_provider
    if provider is not None:
        provider.shutdown()

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the error taxonomy to HTTP responses.

    Handler hierarchy:
        InputError    → 400 Bad Request (details returned to the client)
        NotFoundError → 404 Not Found
        StorageError  → 500 Internal Server Error (details logged only)
        Exception     → 500 Internal Server Error (unexpected errors)

    Status codes come from each error's ErrorKind.
    """

    @app.exception_handler(InputError)
    async def handle_input_error(request: Request, exc: InputError):
        rid = request_id_var.get("")
        logger.warning("[%s] Input error: %s", rid, exc.message)
        return JSONResponse(
            status_code=exc.kind.http_status,
            content={
                "error": "input_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=exc.kind.http_status,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=exc.kind.http_status,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500 for the client, full stack trace in the log."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    store: Optional[NoteStore] = None,
    tracer: Optional[Tracer] = None,
    app_settings: Settings = settings,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store:  Storage backend; built from `app_settings` when omitted
        tracer: The tracer every operation uses; when omitted a TracerProvider
                is built from `app_settings` and owned (shut down) by the app
        app_settings: Settings to configure the app with

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    tracer_provider = None
    if tracer is None:
        tracer_provider = build_tracer_provider(app_settings)
        tracer = get_tracer(tracer_provider)

    if store is None:
        store = build_note_store(app_settings, tracer)

    app = FastAPI(
        title="TraceNotes API",
        description="Stores short text notes; every request and storage call is traced.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.tracer = tracer
    app.state.tracer_provider = tracer_provider
    app.state.note_store = store
    app.state.note_service = NoteService(store=store, tracer=tracer)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(receive.router)
    app.include_router(health.router)

    return app


# uvicorn expects `tracenotes.main:app` to be importable
app = create_app()
