"""
FastAPI dependencies for authentication.

Wiring is explicit: the settings, token issuer and session cache are built
once by ``main.create_app`` and stored on ``app.state``; the directory and
service are assembled per request around the request's DB session.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.cache import SessionCache
from auth.directory import UserDirectory
from auth.errors import InvalidTokenError
from auth.models import CachedUser
from auth.service import AuthService
from auth.tokens import CLAIM_SUB, TokenIssuer
from database.session import get_db_session

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_session_cache(request: Request) -> SessionCache:
    return request.app.state.session_cache


def get_directory(session: AsyncSession = Depends(db_session)) -> UserDirectory:
    return UserDirectory(session)


def get_auth_service(
    request: Request,
    directory: UserDirectory = Depends(get_directory),
    issuer: TokenIssuer = Depends(get_token_issuer),
    cache: SessionCache = Depends(get_session_cache),
) -> AuthService:
    return AuthService(
        directory=directory,
        issuer=issuer,
        cache=cache,
        cache_ttl_ms=request.app.state.settings.session_cache_ttl_ms,
        bcrypt_rounds=request.app.state.settings.bcrypt_rounds,
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
    cache: SessionCache = Depends(get_session_cache),
    directory: UserDirectory = Depends(get_directory),
) -> CachedUser:
    """
    Resolve the Bearer token into the authenticated user.

    Reads through the session cache first and falls back to the directory,
    so a deleted account stops authenticating once its cache entry expires.
    """
    if credentials is None:
        raise InvalidTokenError("Missing Bearer token")

    claims = issuer.decode(credentials.credentials)
    user_id = str(claims[CLAIM_SUB])

    cached = await cache.get(user_id)
    if cached is not None:
        return cached

    try:
        user = await directory.get_by_id(user_id)
    except ValueError as exc:
        raise InvalidTokenError() from exc
    if user is None:
        logger.warning("Token subject %s has no account", user_id)
        raise InvalidTokenError()
    return CachedUser.from_user(user)
