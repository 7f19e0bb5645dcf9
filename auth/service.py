"""
Authentication workflow — register, login, whoami.

Each operation is one linear chain of awaits:

    register: directory lookup → hash → create
    login:    directory lookup → verify → sign → cache (best effort)
    whoami:   project the already-resolved user's email
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from auth.cache import SessionCache
from auth.errors import AuthenticationFailedError, DuplicateAccountError
from auth.models import CachedUser, LoginResponse, User, UserResponse
from auth.password import BCRYPT_ROUNDS, hash_password, verify_password
from auth.tokens import CLAIM_EMAIL, CLAIM_SUB, TokenIssuer

logger = logging.getLogger(__name__)

SESSION_CACHE_TTL_MS = 5000


class Directory(Protocol):
    async def find_by_email(self, email: str) -> list[User]: ...

    async def create(self, email: str, password_hash: str) -> User: ...


class AuthService:
    def __init__(
        self,
        directory: Directory,
        issuer: TokenIssuer,
        cache: SessionCache,
        cache_ttl_ms: int = SESSION_CACHE_TTL_MS,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ):
        self._directory = directory
        self._issuer = issuer
        self._cache = cache
        self._cache_ttl_ms = cache_ttl_ms
        self._bcrypt_rounds = bcrypt_rounds

    async def register(self, email: str, password: str) -> UserResponse:
        """
        Create an account and return only its id.

        Raises ``DuplicateAccountError`` when the email is taken, either by
        the lookup or by the directory's unique constraint on insert.
        """
        existing = await self._directory.find_by_email(email)
        if existing:
            logger.warning("Register rejected, account exists: %s", email)
            raise DuplicateAccountError()

        password_hash = await asyncio.to_thread(hash_password, password, self._bcrypt_rounds)
        user = await self._directory.create(email, password_hash)

        logger.info("Registered user %s", user.user_id)
        return UserResponse(id=str(user.user_id))

    async def login(self, email: str, password: str) -> LoginResponse:
        """
        Verify credentials and issue a token.

        Zero matches, several matches and a wrong password all raise the same
        ``AuthenticationFailedError``.
        """
        matches = await self._directory.find_by_email(email)
        if len(matches) != 1:
            logger.warning("Login failed for %s (%d matching accounts)", email, len(matches))
            raise AuthenticationFailedError()
        user = matches[0]

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            logger.warning("Login failed for %s (bad password)", email)
            raise AuthenticationFailedError()

        token = self._issuer.sign({CLAIM_SUB: str(user.user_id), CLAIM_EMAIL: user.email})

        cached = await self._cache.set(str(user.user_id), CachedUser.from_user(user), self._cache_ttl_ms)
        if not cached:
            logger.warning("Session cache not populated for %s", user.user_id)

        logger.info("Login: %s", user.user_id)
        return LoginResponse(token=token)

    async def whoami(self, user: User | CachedUser) -> str:
        return user.email
