"""
Account API routes — create, login, whoami.

Route prefix: /v1/user

Routes are registered from ``ROUTES`` (path, method, handler, options) rather
than decorators so the whole surface is visible in one table.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Tuple

from fastapi import APIRouter, Depends, Header
from fastapi.responses import PlainTextResponse

from auth.dependencies import get_auth_service, get_current_user
from auth.models import CachedUser, LoginRequest, LoginResponse, RegisterRequest, UserResponse
from auth.service import AuthService

logger = logging.getLogger(__name__)


async def create(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Create a new account."""
    return await service.register(req.email, req.password)


async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Login with email + password."""
    return await service.login(req.email, req.password)


async def whoami(
    user: CachedUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
    authorization: str | None = Header(
        None,
        alias="Authorization",
        description="Authorization Bearer JWT token.",
        examples=["Bearer aaaabbbbccccddddeee....zz"],
    ),
) -> PlainTextResponse:
    """Respond with the authenticated user's email address."""
    return PlainTextResponse(await service.whoami(user))


ROUTES: List[Tuple[str, str, Callable[..., Any], Dict[str, Any]]] = [
    (
        "/create",
        "POST",
        create,
        {
            "response_model": UserResponse,
            "responses": {409: {"description": "An account with that email already exists"}},
        },
    ),
    (
        "/login",
        "POST",
        login,
        {
            "response_model": LoginResponse,
            "responses": {401: {"description": "Failed to authenticate"}},
        },
    ),
    (
        "/whoami",
        "GET",
        whoami,
        {
            "response_class": PlainTextResponse,
            "responses": {
                200: {
                    "description": "Responds with the user's email address",
                    "content": {"text/plain": {"example": "user@test.com"}},
                },
                401: {"description": "Missing or invalid token"},
            },
        },
    ),
]


def build_router() -> APIRouter:
    router = APIRouter(tags=["user"])
    for path, method, handler, options in ROUTES:
        router.add_api_route(path, handler, methods=[method], **options)
    return router


router = build_router()
