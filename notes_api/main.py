"""
Notes API - FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings) opens the NoteStore, registers
       middleware, exception handlers, and routers, and returns the app.
Who:   Called by the entry point (__main__.py) and by the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐                   │
    │  │ Req ID   │→│  Logging        │                   │
    │  └──────────┘ └─────────────────┘                   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌───────────────┐ ┌────────────┐  │
    │  │ POST /write  │ │ /notes[/name] │ │ GET /health│  │
    │  └──────────────┘ └───────────────┘ └────────────┘  │
    │                                                     │
    │  Exception Handlers (plain-text bodies):            │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ Exists→400 │ NotFound→404   │   │
    │  │ StorageFailure→500 │ unexpected→500          │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from notes_api import __version__
from notes_api.config import Settings
from notes_api.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    StorageFailureError,
    ValidationError,
)
from notes_api.middleware.logging import RequestLoggingMiddleware
from notes_api.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)
from notes_api.routes import health, notes, upload_form
from notes_api.services.note_store import NoteStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] notes_api.access: GET /notes 200 ...

    Output goes to stderr, which is also where fatal startup diagnostics land.
    Safe to call more than once: force=True replaces any earlier handlers.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    # The access middleware already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    logger.info("Notes API %s starting up...", __version__)
    logger.info("Cache directory: %s", app.state.note_store.root)
    logger.info("Server running at http://%s:%d", settings.host, settings.port)
    logger.info("API docs: http://%s:%d/docs", settings.host, settings.port)

    yield

    logger.info("Notes API shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes with plain-text bodies.

    Handler table:
        ValidationError         → 400 (message names the broken rule)
        RequestValidationError  → 400 (missing/malformed request fields)
        AlreadyExistsError      → 400 "Note already exists"
        NotFoundError           → 404 "Not Found"
        StorageFailureError     → 500 "Internal Server Error"
        Exception (fallback)    → 500 "Internal Server Error"

    Paths and OS errors are logged server-side only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return PlainTextResponse(exc.message, status_code=400)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ):
        rid = request_id_var.get("")
        fields = sorted(
            {str(error["loc"][-1]) for error in exc.errors() if error.get("loc")}
        )
        logger.warning("[%s] Invalid request fields: %s", rid, ", ".join(fields))
        message = "Invalid request"
        if fields:
            message = f"Missing or invalid fields: {', '.join(fields)}"
        return PlainTextResponse(message, status_code=400)

    @app.exception_handler(AlreadyExistsError)
    async def handle_already_exists(request: Request, exc: AlreadyExistsError):
        rid = request_id_var.get("")
        logger.info("[%s] Note already exists: %s", rid, exc.name)
        return PlainTextResponse(exc.message, status_code=400)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return PlainTextResponse("Not Found", status_code=404)

    @app.exception_handler(StorageFailureError)
    async def handle_storage_failure(request: Request, exc: StorageFailureError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage failure: %s | Context: %s", rid, exc.message, exc.context)
        return PlainTextResponse("Internal Server Error", status_code=500)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs in the outermost error middleware, after RequestIDMiddleware
        # has unwound; request.state shares the scope and still has the ID
        rid = getattr(request.state, "request_id", "") or request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, exc, exc_info=exc)
        headers = {REQUEST_ID_HEADER: rid} if rid else None
        return PlainTextResponse("Internal Server Error", status_code=500, headers=headers)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Settings) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Opens the NoteStore first, so a cache directory that cannot be created
    fails here, before any socket is bound.

    Raises:
        StorageFailureError if the cache directory cannot be created.
    """
    note_store = NoteStore.open(settings.cache)

    app = FastAPI(
        title="Notes API",
        description="CRUD service for plain-text notes stored as files in a cache directory.",
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.note_store = note_store

    # Middleware executes in reverse order of addition: RequestID → Logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(upload_form.router)
    app.include_router(notes.router)
    app.include_router(health.router)

    return app
