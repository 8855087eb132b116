"""
NoteBrief Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (uvicorn notebrief.main:app) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Access Log → GZip → CORS      │
    │                                                          │
    │  Routes:                                                 │
    │   POST /api/summarize           POST /api/upload-and-... │
    │   GET  /api/summaries           GET  /api/debug/models   │
    │   GET  /health                                           │
    │                                                          │
    │  Exception Handlers:                                     │
    │   Validation→400 │ Disabled→403 │ Summarization→500/503  │
    │   Extraction→500 │ Database→500 │ anything else→500      │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   logging, configuration check (missing API key is fatal)
    Shutdown:  close the Gemini HTTP client, dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from notebrief import __version__
from notebrief.config import settings
from notebrief.database import dispose_engine
from notebrief.exceptions import (
    DatabaseError,
    ExtractionError,
    FeatureDisabledError,
    NoteBriefError,
    SummarizationError,
    ValidationError,
)
from notebrief.middleware.logging import RequestLoggingMiddleware
from notebrief.middleware.request_id import RequestIDMiddleware, current_request_id
from notebrief.routes import health, models, summaries, summarize
from notebrief.services.gemini_client import gemini_client

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Errore interno del server"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] notebrief.services.model_registry: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every request at INFO/DEBUG
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup and shutdown procedures.

    Raises:
        ValueError: GEMINI_API_KEY is missing. Every summarize request would
                    fail, so the server refuses to start.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("NoteBrief Backend %s starting up (%s)...", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.critical("Configuration error: %s", e)
        raise

    logger.info("Gemini endpoint: %s", settings.gemini_base_url)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("NoteBrief Backend shutting down...")
    await gemini_client.aclose()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(request: Request, exc: NoteBriefError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "request_id": current_request_id(request),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to `{error, message, request_id}` responses.

    `message` is always the exception's fixed, user-safe Italian text.
    Context dicts, provider messages and stack traces are logged only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning(
            "[%s] Validation error: %s | %s", current_request_id(request), exc.message, exc.context
        )
        return _error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # Malformed JSON or wrongly typed fields; same 400 shape as our own checks
        rid = current_request_id(request)
        logger.warning("[%s] Request validation failed: %s", rid, exc.errors())
        return JSONResponse(
            status_code=400,
            content={
                "error": ValidationError.error_code,
                "message": "Richiesta non valida",
                "request_id": rid,
            },
        )

    @app.exception_handler(FeatureDisabledError)
    async def handle_feature_disabled(request: Request, exc: FeatureDisabledError):
        logger.warning(
            "[%s] Disabled endpoint called: %s", current_request_id(request), request.url.path
        )
        return _error_response(request, exc)

    @app.exception_handler(SummarizationError)
    async def handle_summarization_error(request: Request, exc: SummarizationError):
        """Discovery, transport, generation and empty-summary failures."""
        logger.error(
            "[%s] %s: %s | Context: %s",
            current_request_id(request),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _error_response(request, exc)

    @app.exception_handler(ExtractionError)
    async def handle_extraction_error(request: Request, exc: ExtractionError):
        logger.error(
            "[%s] Extraction error | Context: %s", current_request_id(request), exc.context
        )
        return _error_response(request, exc)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            current_request_id(request),
            exc.message,
            exc.context,
        )
        return _error_response(request, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = current_request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": INTERNAL_ERROR_MESSAGE,
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routes."""
    app = FastAPI(
        title="NoteBrief API",
        description=(
            "Summarizes text, PDF, Markdown and image notes into 3-5 Italian "
            "sentences with Google Gemini, and keeps a per-user history."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added executes first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(summarize.router)
    app.include_router(summaries.router)
    app.include_router(models.router)
    app.include_router(health.router)

    return app


app = create_app()
