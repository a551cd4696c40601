"""
QuickAI Backend - FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn quickai.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────────┐ ┌──────┐ ┌──────┐         │
    │  │  Req ID  │→│  Access Log  │→│ GZip │→│ CORS │         │
    │  └──────────┘ └──────────────┘ └──────┘ └──────┘         │
    │                                                          │
    │  Routes:                                                 │
    │  ┌───────────────────────────┐ ┌───────┐ ┌─────────────┐ │
    │  │ POST /api/ai/* (6, auth)  │ │ GET / │ │ GET /health │ │
    │  └───────────────────────────┘ └───────┘ └─────────────┘ │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ Auth→401 │ /api/ai validation/upstream→200 │ *→500 │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, config check, Cloudinary credentials, upload spool dir
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from quickai import __version__
from quickai.config import settings
from quickai.database import dispose_engine
from quickai.exceptions import AuthenticationError, UpstreamFailureError
from quickai.middleware.logging import RequestLoggingMiddleware
from quickai.middleware.request_id import RequestIDMiddleware, request_id_var
from quickai.routes import ai, health
from quickai.schemas.action import describe_validation_error
from quickai.services.asset_service import configure_cloudinary

logger = logging.getLogger(__name__)

ACTION_PREFIX = "/api/ai"


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

    # Third-party libraries that log every request at INFO/DEBUG
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx", "cloudinary"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup before the yield, shutdown after it."""
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("QuickAI Backend %s starting up...", __version__)

    # Missing secrets are reported, not fatal: / and /health keep answering
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    configure_cloudinary()

    spool = Path(settings.upload_root)
    spool.mkdir(parents=True, exist_ok=True)
    logger.info("Upload spool directory: %s", spool.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("QuickAI Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _envelope(message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exceptions that can escape a route to the JSON envelope.

    Handler hierarchy:
        AuthenticationError     → 401 {success: false, message}
        RequestValidationError  → 200 envelope under /api/ai, FastAPI's 422 elsewhere
        UpstreamFailureError    → 200 envelope (raised by the auth dependency
                                  when the Clerk usage lookup fails)
        Exception (fallback)    → 500 generic envelope, stack trace logged

    Action handlers themselves never raise; these cover what happens before
    or around them.
    """

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        rid = request_id_var.get("")
        logger.info("[%s] Unauthenticated %s %s", rid, request.method, request.url.path)
        return _envelope(exc.message, status_code=401)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        if not request.url.path.startswith(ACTION_PREFIX):
            return await request_validation_exception_handler(request, exc)

        rid = request_id_var.get("")
        message = describe_validation_error(exc.errors())
        logger.warning("[%s] Invalid payload on %s: %s", rid, request.url.path, message)
        return _envelope(message)

    @app.exception_handler(UpstreamFailureError)
    async def handle_upstream_failure(request: Request, exc: UpstreamFailureError):
        rid = request_id_var.get("")
        logger.error("[%s] Upstream failure: %s | Context: %s", rid, exc.message, exc.context)
        return _envelope(exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _envelope(
            "An unexpected error occurred. Please try again or contact support.",
            status_code=500,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers."""
    app = FastAPI(
        title="QuickAI API",
        description=(
            "Usage-gated AI actions: article and blog-title writing, image generation, "
            "background and object removal, and resume review."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
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
    app.include_router(health.router)
    app.include_router(ai.router)

    return app


app = create_app()
