"""
Shared fixtures: an in-memory SQLite directory, a fake clock for TTL checks
and an ASGI client wired to a fresh app.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth.cache import InMemorySessionCache
from auth.tokens import TokenIssuer, TokenSettings
from config.settings import Settings
from database.models import Base
from database.session import configure_engine, dispose_engine

TEST_SECRET = "test-secret-key-with-enough-length-for-hs256"


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_cache(clock: FakeClock) -> InMemorySessionCache:
    return InMemorySessionCache(clock=clock)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TokenSettings(secret=TEST_SECRET))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        redis_enabled=False,
        database_url="sqlite+aiosqlite://",
    )


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(
    engine: AsyncEngine,
    settings: Settings,
    session_cache: InMemorySessionCache,
) -> AsyncGenerator[AsyncClient, None]:
    from main import create_app

    configure_engine(engine)
    app = create_app(settings, session_cache=session_cache, create_schema=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await dispose_engine()
