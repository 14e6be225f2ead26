"""Test configuration and fixtures."""

import pytest
from typing import AsyncGenerator
from unittest.mock import AsyncMock, patch
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from fastapi.testclient import TestClient

from bulletin.core.config import settings
from bulletin.db.redis import RedisManager
from bulletin.db.store import MessageStore
from bulletin.models.database import Base
from bulletin.models.message import MessageBoundary
from bulletin.services.message_service import MessageService

# Keep unit runs independent of Redis and an OTLP collector
settings.cache_enabled = False
settings.rate_limit_enabled = False
settings.tracing_enabled = False


@pytest.fixture
def database_url(tmp_path) -> str:
    """File-backed SQLite so every session sees the same data."""
    return f"sqlite+aiosqlite:///{tmp_path / 'bulletin.db'}"


@pytest.fixture
async def session_factory(database_url) -> AsyncGenerator[async_sessionmaker, None]:
    """Create an engine with a fresh schema for each test."""
    engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def store(session_factory) -> MessageStore:
    return MessageStore(session_factory)


@pytest.fixture
def cache() -> AsyncMock:
    """Redis manager stand-in that always misses."""
    mock_cache = AsyncMock(spec=RedisManager)
    mock_cache.get.return_value = None
    mock_cache.set.return_value = True
    mock_cache.delete_prefix.return_value = 0
    return mock_cache


@pytest.fixture
def service(store, cache) -> MessageService:
    return MessageService(store, cache=cache)


@pytest.fixture
def client(database_url, monkeypatch) -> TestClient:
    """Test client running the full app lifespan against a temporary database."""
    from bulletin.main import app

    monkeypatch.setattr(settings, "database_url", database_url)

    with patch("bulletin.main.init_redis", new_callable=AsyncMock):
        with TestClient(app) as test_client:
            yield test_client


@pytest.fixture
def make_message():
    """Factory for message payloads."""
    def _make(
        target: str = "target.user@example.com",
        sender: str = "sender.user@example.com",
        title: str = "Hello",
        urgent=False,
        extra_attributes=None,
    ) -> MessageBoundary:
        return MessageBoundary(
            target=target,
            sender=sender,
            title=title,
            urgent=urgent,
            extra_attributes=extra_attributes,
        )
    return _make
