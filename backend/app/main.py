"""
Patient Notes Backend — FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn app.main:app`, or the `patient-notes-api` script);
       tests call create_app() with their own repository.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌──────┐    │
    │  │  Req ID  │→│  Logging    │→│ GZip │→│ CORS │    │
    │  └──────────┘ └─────────────┘ └──────┘ └──────┘    │
    │                                                     │
    │  Routes:                                            │
    │  POST /notes   GET /notes/all   GET /notes/{id}     │
    │  GET /notes/patients/all        GET /health         │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation/MissingPatientId→400 │ Persistence→500  │
    │  anything else→500 (logged, message not leaked)     │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration
    3. Build the NoteRepository selected by STORAGE_BACKEND (unless injected)
    4. Optionally create the relational schema (DB_CREATE_SCHEMA=true)

    Shutdown:
    1. Close the repository it built (disposes the connection pool)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings, settings as default_settings
from app.exceptions import (
    MissingPatientIdError,
    PatientNotesError,
    PersistenceError,
    UnknownError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.repositories import NoteRepository, create_note_repository
from app.routes import health, notes
from app.schemas.note import ErrorResponse
from app.services.note_service import NoteService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once during app startup, before the repository is built.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, config check, repository construction.
    Shutdown: close the repository if this lifespan created it.
    """
    cfg: Settings = app.state.settings
    setup_logging(cfg.log_level)
    logger.info("=" * 60)
    logger.info("Patient Notes backend starting up...")

    try:
        cfg.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    owned: Optional[NoteRepository] = None
    if getattr(app.state, "note_service", None) is None:
        owned = create_note_repository(cfg)
        if cfg.db_create_schema and hasattr(owned, "create_schema"):
            await owned.create_schema()
            logger.info("Relational schema ensured")
        app.state.note_service = NoteService(owned)

    logger.info("Storage backend: %s", cfg.storage_backend)
    logger.info("Server ready at http://%s:%d", cfg.backend_host, cfg.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    logger.info("Patient Notes backend shutting down...")
    if owned is not None:
        await owned.close()
        app.state.note_service = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    details: Optional[List[Dict[str, str]]] = None,
) -> JSONResponse:
    rid = _request_id(request)
    body = ErrorResponse(error=error, details=details, request_id=rid or None)
    # The catch-all handler runs outside RequestIDMiddleware, so the header is set here too
    headers = {"X-Request-ID": rid} if rid else None
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=headers,
    )


def _request_validation_details(exc: RequestValidationError) -> List[Dict[str, str]]:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        details.append({"field": loc[-1] if loc else "body", "message": err.get("msg", "Invalid value")})
    return details


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the `{success: false}` envelope.

    Handler hierarchy:
        ValidationError         → 400 with field details
        RequestValidationError  → 400 (unparseable or non-object body)
        MissingPatientIdError   → 400
        PersistenceError        → 500, generic message
        PatientNotesError       → 500, generic message
        Exception (fallback)    → 500, logged with traceback as UnknownError

    Security: internal details (driver errors, stack traces) are logged
    server-side only, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error on fields %s", _request_id(request), exc.fields)
        return _error_response(request, 400, exc.message, exc.details or None)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Malformed request body", _request_id(request))
        return _error_response(request, 400, "Validation failed", _request_validation_details(exc))

    @app.exception_handler(MissingPatientIdError)
    async def handle_missing_patient_id(request: Request, exc: MissingPatientIdError):
        logger.warning("[%s] %s (type=%s)", _request_id(request), exc.message, exc.note_type)
        return _error_response(request, 400, exc.message)

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error(
            "[%s] Persistence error: %s | Context: %s", _request_id(request), exc.message, exc.context
        )
        return _error_response(request, 500, "Internal server error")

    @app.exception_handler(PatientNotesError)
    async def handle_app_error(request: Request, exc: PatientNotesError):
        logger.error("[%s] Application error: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return _error_response(request, 500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        wrapped = UnknownError(context={"original_error": type(exc).__name__})
        logger.error(
            "[%s] Unexpected error (%s): %s",
            _request_id(request),
            wrapped.context["original_error"],
            str(exc),
            exc_info=exc,
        )
        return _error_response(request, 500, wrapped.message)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[NoteRepository] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:   Configuration; defaults to the environment-loaded singleton
        repository: Pre-built backend. When given, the app uses it as-is and
                    never closes it; otherwise the lifespan builds one from
                    settings and closes it on shutdown.
    """
    cfg = settings or default_settings

    app = FastAPI(
        title="Patient Notes API",
        description=(
            "Record initial, interim and discharge notes for patients, list notes "
            "per patient or globally, and browse known patients."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.note_service = NoteService(repository) if repository is not None else None

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in REVERSE order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured host/port."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
        log_level=default_settings.log_level.lower(),
    )


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `app.main:app` to be importable
app = create_app()
