"""FastAPI application factory.

Main entry point for the SparkSkool Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sparkskool import __version__
from sparkskool.config import get_data_dir, load_app_config
from sparkskool.web.routes import (
    health_router,
    grading_router,
    questions_router,
    answer_keys_router,
    slides_router,
    materials_router,
    notes_router,
    chat_router,
    lessons_router,
    games_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config = load_app_config()
    logger.info(
        "api_startup",
        provider=config.default_provider,
        data_dir=str(get_data_dir().absolute()),
        cache_configured=bool(config.cache.get_url() and config.cache.get_token()),
    )
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="SparkSkool API",
        description="Teaching assistant API: grading, slides, notes, chat and classroom games",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(grading_router)
    app.include_router(questions_router)
    app.include_router(answer_keys_router)
    app.include_router(slides_router)
    app.include_router(materials_router)
    app.include_router(notes_router)
    app.include_router(chat_router)
    app.include_router(lessons_router)
    app.include_router(games_router)

    return app


# Default app instance for uvicorn
app = create_app()
