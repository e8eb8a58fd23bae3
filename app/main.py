# app/main.py

from contextlib import asynccontextmanager
import logging
from typing import Optional
from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from app.config import DASHBOARD_CACHE_TTL_SECONDS, LOG_LEVEL
from app.database import engine
from app.errors import register_error_handlers
from app.middleware.response_cache import cache_middleware
from app.routers import admin, applications, consultations, dashboard, notifications, stream
from app.services.cache import Cache
from app.services.cache_factory import build_cache
from app.services.cache_sweeper import CacheSweeper

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(cache: Optional[Cache] = None, sweeper: Optional[CacheSweeper] = None) -> FastAPI:
    """
    Build the API with its own cache instance.

    The cache is created here (not at import time) and shared by the response-cache
    middleware, the sweeper and the admin routes through app.state.
    """
    cache = cache if cache is not None else build_cache()
    sweeper = sweeper or CacheSweeper(cache)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: start cache sweeper
        await sweeper.start()
        try:
            yield
        finally:
            # Shutdown: stop cache sweeper
            await sweeper.stop()

    app = FastAPI(
        title="Concierge API",
        lifespan=lifespan,
        middleware=[
            cache_middleware(cache, ttl_seconds=DASHBOARD_CACHE_TTL_SECONDS, path_prefixes=("/api/dashboard",)),
        ],
    )
    app.state.cache = cache
    app.state.sweeper = sweeper

    register_error_handlers(app)
    app.include_router(dashboard.router)
    app.include_router(applications.router)
    app.include_router(consultations.router)
    app.include_router(stream.router)
    app.include_router(notifications.router)
    app.include_router(admin.router)

    @app.get("/health")
    def health_check():
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "ok", "db": "connected", "cache": {"size": cache.size()}}
        except SQLAlchemyError as e:
            logger.warning("Health check: database unavailable: %s", e)
            return {"status": "error", "db": str(e), "cache": {"size": cache.size()}}

    return app


app = create_app()
