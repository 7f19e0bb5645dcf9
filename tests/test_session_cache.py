"""
Tests for the session cache implementations.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from auth.cache import CACHE_SCHEMA_VERSION, InMemorySessionCache, RedisSessionCache
from auth.models import CachedUser

USER = CachedUser(id="6f1c3f2e-8a43-4d55-9a55-1f0f9c1b2a10", email="a@b.com")


class TestInMemorySessionCache:
    @pytest.mark.asyncio
    async def test_get_before_ttl(self, session_cache, clock):
        assert await session_cache.set(USER.id, USER, 5000) is True
        clock.advance(4.999)
        assert await session_cache.get(USER.id) == USER

    @pytest.mark.asyncio
    async def test_absent_after_ttl(self, session_cache, clock):
        await session_cache.set(USER.id, USER, 5000)
        clock.advance(5.0)
        assert await session_cache.get(USER.id) is None
        assert len(session_cache) == 0

    @pytest.mark.asyncio
    async def test_set_overwrites_and_refreshes_ttl(self, session_cache, clock):
        await session_cache.set(USER.id, USER, 5000)
        clock.advance(4)
        updated = CachedUser(id=USER.id, email="new@b.com")
        await session_cache.set(USER.id, updated, 5000)
        clock.advance(4)
        assert await session_cache.get(USER.id) == updated

    @pytest.mark.asyncio
    async def test_miss(self, session_cache):
        assert await session_cache.get("nobody") is None

    @pytest.mark.asyncio
    async def test_expired_entries_swept_on_set(self, session_cache, clock):
        for i in range(1000):
            await session_cache.set(f"user-{i}", USER, 5000)
        clock.advance(3600)

        await session_cache.set(USER.id, USER, 5000)

        assert len(session_cache) == 1
        assert await session_cache.get(USER.id) == USER


class TestRedisSessionCache:
    def _client(self):
        client = MagicMock()
        client.psetex = AsyncMock()
        client.get = AsyncMock(return_value=None)
        client.ping = AsyncMock(return_value=True)
        client.aclose = AsyncMock()
        return client

    @pytest.mark.asyncio
    async def test_set_uses_millisecond_expiry(self):
        client = self._client()
        cache = RedisSessionCache(client)

        assert await cache.set(USER.id, USER, 5000) is True

        key, ttl, payload = client.psetex.await_args.args
        assert key == f"session:v{CACHE_SCHEMA_VERSION}:user:{USER.id}"
        assert ttl == 5000
        assert json.loads(payload) == {"id": USER.id, "email": "a@b.com"}

    @pytest.mark.asyncio
    async def test_get_hit(self):
        client = self._client()
        client.get.return_value = USER.to_json().encode()
        cache = RedisSessionCache(client)

        assert await cache.get(USER.id) == USER

    @pytest.mark.asyncio
    async def test_get_miss(self):
        cache = RedisSessionCache(self._client())
        assert await cache.get(USER.id) is None

    @pytest.mark.asyncio
    async def test_set_failure_is_soft(self):
        client = self._client()
        client.psetex.side_effect = RedisConnectionError("down")
        cache = RedisSessionCache(client)

        assert await cache.set(USER.id, USER, 5000) is False

    @pytest.mark.asyncio
    async def test_get_failure_is_a_miss(self):
        client = self._client()
        client.get.side_effect = RedisConnectionError("down")
        cache = RedisSessionCache(client)

        assert await cache.get(USER.id) is None

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_a_miss(self):
        client = self._client()
        client.get.return_value = b"{not json"
        cache = RedisSessionCache(client)

        assert await cache.get(USER.id) is None

    @pytest.mark.asyncio
    async def test_slow_set_times_out(self):
        client = self._client()

        async def hang(*args):
            await asyncio.sleep(10)

        client.psetex.side_effect = hang
        cache = RedisSessionCache(client, timeout_seconds=0.01)

        assert await cache.set(USER.id, USER, 5000) is False

    @pytest.mark.asyncio
    async def test_ping_failure(self):
        client = self._client()
        client.ping.side_effect = RedisConnectionError("down")
        assert await RedisSessionCache(client).ping() is False
