"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from questlog.achievements.catalog import seed_achievements
from questlog.achievements.router import router as achievements_router
from questlog.auth.router import router as auth_router
from questlog.config import get_settings
from questlog.database import close_db, create_schema, get_session, init_db
from questlog.gamification.router import router as gamification_router
from questlog.health.router import router as health_router
from questlog.labels.router import router as labels_router
from questlog.middleware import setup_middleware
from questlog.redis_client import close_redis, init_redis
from questlog.tasks.router import router as tasks_router
from questlog.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await create_schema()
    await init_redis(settings.redis_url)

    if settings.seed_achievements:
        async for db in get_session():
            await seed_achievements(db)

    logger.info("startup_complete", environment=settings.environment)
    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Questlog API",
        description="Gamified task tracking: tasks, XP, levels and achievements",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    for router in (
        auth_router,
        users_router,
        tasks_router,
        labels_router,
        achievements_router,
        gamification_router,
    ):
        app.include_router(router, prefix=settings.api_prefix)

    return app


app = create_app()
