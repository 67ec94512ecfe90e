"""
Main application entry point for the BrainBolt quiz engine.

This module builds the FastAPI application: it opens the database and the
caches on startup, wires the quiz orchestrator, and registers the routers
and exception handlers.

Usage:
    - Direct: python -m brainbolt.main
    - ASGI server: uvicorn brainbolt.main:app
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from brainbolt import __version__
from brainbolt.api import include_routers, register_exception_handlers
from brainbolt.common.cache import build_caches
from brainbolt.common.logger import ROOT_LOGGER_NAME, app_logger, configure_logger
from brainbolt.common.redis import check_redis_connection, close_redis_client, get_redis_client
from brainbolt.config import Settings, get_settings
from brainbolt.database.init_db import Database
from brainbolt.domain.questions import QuestionCatalog
from brainbolt.quiz.orchestrator import build_orchestrator

# Setup module logger
logger = app_logger.getChild("main")


def create_app(settings: Optional[Settings] = None, catalog: Optional[QuestionCatalog] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings to use (defaults to the process-wide settings)
        catalog: Question catalog (defaults to the SQL catalog)

    Returns:
        Configured application
    """
    settings = settings or get_settings()
    configure_logger(
        name=ROOT_LOGGER_NAME,
        level=settings.LOG_LEVEL,
        use_json=settings.LOG_JSON,
        log_file=settings.LOG_FILE
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database.from_url(
            settings.DATABASE_URL,
            echo=settings.SQL_ECHO,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT
        )
        try:
            if settings.DB_CREATE_SCHEMA:
                await database.create_schema()

            cache, ranked_cache = build_caches(settings)
            if settings.CACHE_USE_REDIS:
                if not await check_redis_connection(get_redis_client(settings.REDIS_URL)):
                    logger.warning("Redis is unreachable, serving from the database only")

            app.state.settings = settings
            app.state.database = database
            app.state.cache = cache
            app.state.orchestrator = build_orchestrator(settings, database, cache, ranked_cache, catalog=catalog)
            logger.info("Application startup complete")

            yield
        finally:
            if settings.CACHE_USE_REDIS:
                await close_redis_client()
            await database.dispose()
            logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Adaptive quiz sessions, scoring and leaderboards",
        version=__version__,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.CORS_ORIGIN.split(",") if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    include_routers(app)
    return app


app = create_app()

# Entry point for running the application directly
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info(f"Starting server on {settings.HOST}:{settings.PORT}")

    uvicorn.run(
        "brainbolt.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
