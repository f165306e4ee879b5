"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from playhub.auth.router import router as auth_router
from playhub.config import get_settings
from playhub.credits.router import router as credits_router
from playhub.database import close_db, get_session, init_db
from playhub.health.router import router as health_router
from playhub.matches.router import router as matches_router
from playhub.middleware import setup_middleware
from playhub.redis_client import close_redis, init_redis
from playhub.rewards.router import router as rewards_router
from playhub.rewards.seed import seed_tasks
from playhub.subscriptions.router import router as subscriptions_router
from playhub.tournaments.router import router as tournaments_router
from playhub.users.router import router as users_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.redis_url:
        await init_redis(settings.redis_url, settings.redis_max_connections)

    # Seed task definitions (idempotent)
    try:
        async for db in get_session():
            await seed_tasks(db)
            break
    except Exception:
        logging.getLogger(__name__).warning("Task seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="PlayHub API",
        description="Backend API for PlayHub: coins, rewards, subscriptions and tournaments",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(credits_router)
    app.include_router(rewards_router)
    app.include_router(subscriptions_router)
    app.include_router(tournaments_router)
    app.include_router(matches_router)

    return app


app = create_app()
