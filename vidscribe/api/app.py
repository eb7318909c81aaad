"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, error handlers,
routers, and the health endpoint. The module-level ``app`` instance
allows ``uvicorn vidscribe.api.app:app --reload``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vidscribe import __version__
from vidscribe.api.dependencies import build_pipeline
from vidscribe.api.middleware.error_handler import register_error_handlers
from vidscribe.api.routes import upload, videos
from vidscribe.core.config import get_settings
from vidscribe.core.exceptions import ConfigurationError
from vidscribe.core.models import HealthResponse
from vidscribe.core.utils import configure_logging
from vidscribe.services.storage.database import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    Startup: validate required credentials (missing ones are fatal), create
    the pooled database engine and tables, and wire the ingestion pipeline.
    Shutdown: dispose the database engine.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    missing = settings.missing_credentials()
    if missing:
        logger.critical("Refusing to start, missing configuration: %s", ", ".join(missing))
        raise ConfigurationError(missing)

    await init_db()
    app.state.pipeline = build_pipeline(settings)
    logger.info(
        "VidScribe ready (stt=%s, llm=%s)", settings.stt_provider, settings.llm_provider
    )
    yield
    await close_db()


def create_app() -> FastAPI:
    """Build and return a fully configured FastAPI application.

    Returns:
        FastAPI: The configured application, ready for ``uvicorn``.
    """

    app = FastAPI(
        title="VidScribe",
        description="Record or upload a short video, transcribe it, and tag it.",
        version=__version__,
        lifespan=lifespan,
    )

    # -- CORS --
    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Error handlers --
    register_error_handlers(app)

    # -- Health check --
    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__, timestamp=datetime.now(UTC))

    # -- REST routes --
    app.include_router(upload.router)
    app.include_router(videos.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "vidscribe.api.app:app",
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )
