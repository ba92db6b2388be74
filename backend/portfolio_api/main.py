"""
Portfolio API — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware registration, route mounting,
       error mapping and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn portfolio_api.main:app) or the
       `portfolio-api` console script.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │   /api/projects   /api/feedback   /api/hire-me           │
    │   /uploads/{path} /health                                │
    │                                                          │
    │  Exception Handlers:                                     │
    │   ValidationError→400 │ NotFound→404 │ everything else→500│
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → storage directory → connect to MongoDB + indexes
    Shutdown: close the MongoDB client
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from portfolio_api import __version__
from portfolio_api.config import settings
from portfolio_api.database import Database
from portfolio_api.exceptions import NotFoundError, PortfolioError, ValidationError
from portfolio_api.middleware.logging import RequestLoggingMiddleware
from portfolio_api.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, current_request_id
from portfolio_api.routes import feedback, health, hire_requests, projects, uploads

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong!"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # RequestLoggingMiddleware replaces uvicorn's access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Ensure the upload directory exists
        3. Open the shared database handle (ping + indexes); a failure here
           aborts startup
    Shutdown:
        1. Close the database handle
    """
    setup_logging()
    logger.info("Portfolio API %s starting up...", __version__)

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", storage.resolve())

    database: Database = app.state.database
    try:
        await database.connect()
    except Exception as e:
        logger.error("Failed to connect to MongoDB: %s", str(e))
        raise

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Portfolio API shutting down...")
    await database.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _server_error(rid: str, detail: str) -> JSONResponse:
    # The Exception handler runs in ServerErrorMiddleware, outside RequestIDMiddleware
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": GENERIC_FAILURE_MESSAGE,
            "detail": detail,
            "request_id": rid,
        },
        headers={REQUEST_ID_HEADER: rid} if rid else None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every error kind to a status code and a JSON body.

    Handler hierarchy:
        ValidationError (incl. UploadRejectedError) → 400, per-field `errors`
        RequestValidationError (path/body shape)    → 400, per-field `errors`
        NotFoundError                               → 404
        PortfolioError (Database/FileStorage)       → 500, fixed message + detail
        Exception (fallback)                        → 500, fixed message + detail

    Stack traces are logged server-side only; the 500 body carries just the
    error text.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = current_request_id(request)
        logger.warning("[%s] Validation error: %s %s", rid, exc.message, exc.errors)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "errors": exc.errors,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = current_request_id(request)
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or str(err.get("loc", [""])[0]),
                "message": err.get("msg", "Invalid value"),
                "location": str(err.get("loc", ["body"])[0]),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation error: %s", rid, errors)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Validation failed",
                "errors": errors,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = current_request_id(request)
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(PortfolioError)
    async def handle_application_error(request: Request, exc: PortfolioError):
        rid = current_request_id(request)
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return _server_error(rid, exc.context.get("original_error", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = current_request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _server_error(rid, str(exc))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Handle to use instead of one built from settings
                  (tests pass one backed by an in-memory client).
    """
    app = FastAPI(
        title="Portfolio API",
        description=(
            "Backend for a portfolio site: projects with images, visitor feedback "
            "with moderation, and hire-me requests."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.database = database or Database()

    # Middleware executes in reverse order of addition:
    # Request ID → Logging → GZip → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(projects.router)
    app.include_router(feedback.router)
    app.include_router(hire_requests.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run(
        "portfolio_api.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


# uvicorn expects `portfolio_api.main:app` to be importable
app = create_app()
