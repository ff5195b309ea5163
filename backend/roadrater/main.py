"""
RoadRater Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the persistence gateway, registers middleware,
       exception handlers and routers, and returns the app.
Who:   uvicorn (`uvicorn roadrater.main:app`) or the `roadrater` console
       script; tests call create_app() with their own settings/gateway.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware:  Request ID → Logging → GZip → CORS     │
    │                                                      │
    │  Routes:                                             │
    │   /health  /auth/*  /roads  /roads/{id}  /top5       │
    │   /ratings  /ratings/{segmentId}                     │
    │                                                      │
    │  Exception Handlers:                                 │
    │   RoadRaterError → STATUS_BY_KIND (400/401/404/409/500)
    │   RequestValidationError → 400                       │
    │   HTTPException → its status                         │
    │   Exception → 500                                    │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, optional schema bootstrap
    Shutdown: dispose the gateway's connection pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from roadrater import __version__
from roadrater.config import Settings, get_settings
from roadrater.database import Database, create_database
from roadrater.exceptions import GENERIC_INTERNAL_MESSAGE, RoadRaterError
from roadrater.middleware.logging import RequestLoggingMiddleware
from roadrater.middleware.request_id import REQUEST_ID_HEADER, RequestIDLogFilter, RequestIDMiddleware, request_id_var
from roadrater.responses import error_from_exception, error_response
from roadrater.routes import auth, health, ratings, roads

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure the root logger for the whole process.

    Format: 2025-12-01T10:00:00 [INFO] roadrater.access [a1b2c3d4] POST /ratings 201 ...
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(settings.log_level)
    logger.info("RoadRater backend starting (env=%s)", settings.app_env)

    if settings.auto_create_schema:
        await database.create_schema()
        logger.info("Database schema ensured")

    logger.info("Listening on http://%s:%d", settings.host, settings.port)

    yield

    logger.info("RoadRater backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure onto the error envelope.

    Handler hierarchy:
        RoadRaterError          → STATUS_BY_KIND[exc.kind]
        RequestValidationError  → 400 (malformed JSON / wrong body shape)
        HTTPException           → its own status (unknown route → 404)
        Exception (fallback)    → 500, stack trace logged server-side only
    """

    @app.exception_handler(RoadRaterError)
    async def handle_app_error(request: Request, exc: RoadRaterError):
        return error_from_exception(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request to %s", rid, request.url.path)
        details = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return error_response("Invalid request body", 400, details)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response("Not found", 404, {"path": request.url.path})
        return error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(GENERIC_INTERNAL_MESSAGE, 500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Assemble the application.

    Args:
        settings: defaults to the process-wide settings
        database: defaults to a gateway built from `settings`
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="RoadRater API",
        description="Crowdsourced road-quality ratings: browse segments, rate them, see the leaderboard.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or create_database(settings)

    # Last added runs first: RequestID → Logging → GZip → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.allow_any_origin else settings.cors_origins_list,
        allow_credentials=not settings.allow_any_origin,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(roads.router)
    app.include_router(ratings.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve `app` with the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("roadrater.main:app", host=settings.host, port=settings.port)
