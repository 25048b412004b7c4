"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that wires the form source, object store, submission
    pipeline and auth cache once
  - CORS middleware
  - Global exception handlers (FormError, ValueError, KeyError, Exception)
  - All API routes mounted under ``/api/v1``
  - Local attachment files served under ``/uploads`` (local backend only)
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``holoforms-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text

from holoforms.auth_cache import InMemoryAuthCache
from holoforms.errors import FormError
from holoforms.submission import SubmissionPipeline
from holoforms_db.adapters import DatabaseFormSource, DatabaseResponseSink
from holoforms_db.engine import dispose_engine, get_engine, get_session_factory
from holoforms_db.repository import FormRepository

from holoforms_server.config import ServerSettings, load_settings
from holoforms_server.errors import (
    form_error_handler,
    generic_error_handler,
    key_error_handler,
    value_error_handler,
)
from holoforms_server.routes import register_routes
from holoforms_server.storage import build_object_store

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan — runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Wire shared collaborators at startup, tear down on shutdown.

    Startup:
      1. Build the object store selected by ``STORAGE_BACKEND``
      2. Build DB-backed FormSource / ResponseSink and the pipeline
      3. Stash them on ``app.state`` for dependency injection

    Shutdown:
      1. Dispose the database engine's connection pool
    """
    settings: ServerSettings = app.state.settings
    session_factory = get_session_factory()
    repository = FormRepository()

    store = build_object_store(settings)
    app.state.repository = repository
    app.state.form_source = DatabaseFormSource(session_factory, repository)
    app.state.submission_pipeline = SubmissionPipeline(
        store, DatabaseResponseSink(session_factory, repository),
    )
    app.state.auth_cache = InMemoryAuthCache()
    logger.info("Form engine ready (storage=%s)", settings.storage_backend)

    yield

    await dispose_engine()
    logger.info("Database engine disposed")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    if settings is None:
        settings = load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Holoforms API Server",
        description="Multi-page public forms: builder, submissions and exports",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings so the lifespan handler can read them
    app.state.settings = settings

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(FormError, form_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe — verifies DB connectivity."""
        try:
            engine = get_engine()
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ok"}
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            return {"status": "error", "detail": "database unavailable"}

    register_routes(app)

    # --- Locally stored attachments ---
    if settings.storage_backend == "local":
        mount_path = urlparse(settings.public_storage_base_url).path.rstrip("/") or "/uploads"
        app.mount(
            mount_path,
            StaticFiles(directory=settings.local_storage_path, check_dir=False),
            name="uploads",
        )

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn holoforms_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``holoforms-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "holoforms_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
