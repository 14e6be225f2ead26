import pytest
from unittest.mock import patch

from bulletin.db.session import DatabaseManager


def test_database_manager_init():
    """Test initialization of DatabaseManager."""
    manager = DatabaseManager()
    assert manager.engine is None

    with patch("bulletin.db.session.create_async_engine") as mock_create:
        manager.init_db("sqlite+aiosqlite:///:memory:")

    mock_create.assert_called_once()
    assert mock_create.call_args.args[0] == "sqlite+aiosqlite:///:memory:"
    assert "pool_size" not in mock_create.call_args.kwargs
    assert manager.engine is not None
    assert manager.async_session_factory is not None


def test_database_manager_pool_settings_for_postgres():
    manager = DatabaseManager()

    with patch("bulletin.db.session.create_async_engine") as mock_create:
        manager.init_db("postgresql+asyncpg://u:p@db:5432/bulletin")

    kwargs = mock_create.call_args.kwargs
    assert kwargs["pool_pre_ping"] is True
    assert "pool_size" in kwargs


@pytest.mark.asyncio
async def test_health_check(database_url):
    manager = DatabaseManager()
    assert await manager.health_check() is False

    manager.init_db(database_url)
    try:
        assert await manager.health_check() is True
    finally:
        await manager.close()
