"""
Account auth service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_middleware
from api.routes import router as api_router
from auth.cache import InMemorySessionCache, RedisSessionCache, SessionCache
from auth.routes import router as user_router
from auth.tokens import TokenIssuer, TokenSettings
from config.settings import Settings, config
from database.session import dispose_engine, init_db

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("sqlalchemy.engine", "redis", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def build_session_cache(settings: Settings) -> SessionCache:
    if settings.redis_enabled:
        logger.info("Session cache: Redis at %s", settings.redis_url)
        return RedisSessionCache.from_url(settings.redis_url, settings.cache_timeout_seconds)
    logger.info("Session cache: in-process (Redis disabled)")
    return InMemorySessionCache(settings.cache_timeout_seconds)


def create_app(
    settings: Settings = config,
    session_cache: Optional[SessionCache] = None,
    create_schema: bool = True,
) -> FastAPI:
    if settings.jwt_secret == Settings.model_fields["jwt_secret"].default:
        logger.warning("JWT_SECRET is the built-in default, set it before deploying")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_schema:
            await init_db()
        logger.info("Application ready to accept requests.")
        yield
        await app.state.session_cache.close()
        await dispose_engine()

    app = FastAPI(
        title="Account Auth Service",
        version="1.0.0",
        description="Create account, login and identity check.",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.token_issuer = TokenIssuer(
        TokenSettings(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expiry_seconds=settings.jwt_expiry_seconds,
        )
    )
    if session_cache is None:
        session_cache = build_session_cache(settings)
    app.state.session_cache = session_cache

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)

    # Routes
    app.include_router(user_router, prefix="/v1/user")
    app.include_router(api_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        log_level="debug" if config.debug else "info",
    )
