"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, error handlers,
routers, and the banner/health endpoints. The module-level ``app``
instance allows ``uvicorn speechpad.api.app:app --reload``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from speechpad import __version__
from speechpad.api.middleware.error_handler import register_error_handlers
from speechpad.api.routes import save, transcribe
from speechpad.core.config import configure_logging, get_settings
from speechpad.core.models import BannerResponse, HealthResponse
from speechpad.services.storage.database import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    Startup: configure logging, create the row-store tables if needed.
    Shutdown: dispose the DB engine.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    await init_db()
    logger.info(
        "SpeechPad API ready (strategy=%s, provider=%s)",
        settings.transcription_strategy,
        settings.transcription_provider,
    )
    yield
    await close_db()


def create_app() -> FastAPI:
    """Build and return a fully configured FastAPI application."""

    app = FastAPI(
        title="SpeechPad",
        description="Upload or record audio, transcribe it, edit and save the text.",
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

    # -- Banner and health check (root-level, not under /api) --
    @app.get("/", response_model=BannerResponse, tags=["system"])
    async def banner() -> BannerResponse:
        return BannerResponse(message="SpeechPad API is running")

    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__, timestamp=datetime.now(UTC))

    # -- REST routes --
    app.include_router(transcribe.router, prefix="/api")
    app.include_router(save.router, prefix="/api")

    return app


app = create_app()
