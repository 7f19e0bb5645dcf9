"""
Session cache — ``user_id -> CachedUser`` with a time-to-live.

Every failure is soft: ``set`` returns ``False`` and ``get`` returns ``None``
after logging a warning, so a cache outage never fails a login or an
authenticated request.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from redis.asyncio import Redis
from redis.exceptions import RedisError

from auth.models import CachedUser

logger = logging.getLogger(__name__)

# Included in every Redis key. Bump when CachedUser fields change so entries
# written with the previous shape are never read; they expire via TTL.
CACHE_SCHEMA_VERSION = 1


class SessionCache(ABC):
    def __init__(self, timeout_seconds: float = 1.0):
        self._timeout = timeout_seconds

    @abstractmethod
    async def _set(self, key: str, value: CachedUser, ttl_ms: int) -> None:
        ...

    @abstractmethod
    async def _get(self, key: str) -> Optional[CachedUser]:
        ...

    async def set(self, key: str, value: CachedUser, ttl_ms: int) -> bool:
        """Upsert ``value`` under ``key`` for ``ttl_ms`` milliseconds."""
        try:
            await asyncio.wait_for(self._set(key, value, ttl_ms), self._timeout)
        except (RedisError, asyncio.TimeoutError, OSError) as exc:
            logger.warning("Session cache SET failed for %s: %s", key, exc)
            return False
        logger.debug("session_cache_set key=%s ttl_ms=%d", key, ttl_ms)
        return True

    async def get(self, key: str) -> Optional[CachedUser]:
        """Return the cached projection, or ``None`` on miss/expiry/failure."""
        try:
            value = await asyncio.wait_for(self._get(key), self._timeout)
        except (RedisError, asyncio.TimeoutError, OSError, ValueError, TypeError) as exc:
            logger.warning("Session cache GET failed for %s: %s", key, exc)
            return None
        logger.debug("session_cache_%s key=%s", "hit" if value else "miss", key)
        return value

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class InMemorySessionCache(SessionCache):
    """Process-local cache, used when Redis is disabled and in tests."""

    def __init__(
        self,
        timeout_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(timeout_seconds)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, CachedUser]] = {}

    async def _set(self, key: str, value: CachedUser, ttl_ms: int) -> None:
        now = self._clock()
        self._evict_expired(now)
        self._entries[key] = (now + ttl_ms / 1000.0, value)

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]

    async def _get(self, key: str) -> Optional[CachedUser]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def __len__(self) -> int:
        return len(self._entries)


class RedisSessionCache(SessionCache):
    """Redis-backed cache; entries expire server-side via ``PSETEX``."""

    def __init__(self, client: Redis, timeout_seconds: float = 1.0):
        super().__init__(timeout_seconds)
        self._redis = client

    @classmethod
    def from_url(cls, url: str, timeout_seconds: float = 1.0) -> "RedisSessionCache":
        return cls(Redis.from_url(url), timeout_seconds)

    @staticmethod
    def cache_key(user_id: str) -> str:
        return f"session:v{CACHE_SCHEMA_VERSION}:user:{user_id}"

    async def _set(self, key: str, value: CachedUser, ttl_ms: int) -> None:
        await self._redis.psetex(self.cache_key(key), ttl_ms, value.to_json())

    async def _get(self, key: str) -> Optional[CachedUser]:
        data = await self._redis.get(self.cache_key(key))
        if not data:
            return None
        return CachedUser.from_json(data)

    async def ping(self) -> bool:
        try:
            return bool(await asyncio.wait_for(self._redis.ping(), self._timeout))
        except (RedisError, asyncio.TimeoutError, OSError):
            return False

    async def close(self) -> None:
        await self._redis.aclose()
        logger.info("Redis connection closed")
