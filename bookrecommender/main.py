"""FastAPI application factory — entry point for BookRecommender."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from bookrecommender import __version__
from bookrecommender.adapters.llm import close_llm_adapters
from bookrecommender.api.routes.auth import router as auth_router
from bookrecommender.api.routes.books import router as books_router
from bookrecommender.api.routes.library import router as library_router
from bookrecommender.api.routes.recommendations import router as recommendations_router
from bookrecommender.config import settings
from bookrecommender.database import engine
from bookrecommender.domain.models import Base

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown events."""
    logger.info("BookRecommender starting up (environment=%s)...", settings.environment)
    logger.info("Database backend: %s", make_url(settings.database_url).get_backend_name())
    logger.info("LLM provider: %s", settings.llm_provider.value)
    logger.info("CORS allowed origins: %s", ", ".join(settings.cors_origins))
    if settings.create_schema_on_startup:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")
    yield
    await close_llm_adapters()
    await engine.dispose()
    logger.info("BookRecommender shutting down...")


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="BookRecommender",
        description="Personal reading library with AI book recommendations",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware ──────────────────────────────────
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routes ─────────────────────────────────────
    application.include_router(auth_router)
    application.include_router(books_router)
    application.include_router(library_router)
    application.include_router(recommendations_router)

    # ── Health Check ───────────────────────────────
    @application.get("/api/health", tags=["System"])
    async def health() -> dict[str, str]:
        return {
            "status": "healthy",
            "service": "bookrecommender",
            "environment": settings.environment,
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return application


app = create_app()
