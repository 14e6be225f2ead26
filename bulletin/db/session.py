"""
Database session management and initialization.
Provides async database sessions with connection pooling.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from bulletin.core.config import settings
from bulletin.core.observability import get_logger
from bulletin.models.database import Base

logger = get_logger(__name__)


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self):
        """Initialize database manager."""
        self.engine = None
        self.async_session_factory = None

    def init_db(self, database_url: str = None):
        """Initialize database engine and session factory."""
        url = str(database_url or settings.database_url)
        engine_kwargs = {
            "echo": settings.debug,
        }

        # Only add pool parameters for non-SQLite databases
        if not url.startswith("sqlite"):
            engine_kwargs.update({
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_max_overflow,
                "pool_timeout": settings.db_pool_timeout,
                "pool_pre_ping": True,
                "pool_recycle": 3600,
            })

        self.engine = create_async_engine(url, **engine_kwargs)

        self.async_session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
            autocommit=False,
        )

        logger.info("Database engine initialized", dialect=self.engine.dialect.name)

    async def create_tables(self):
        """Create all database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")

    async def close(self):
        """Close database connections."""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connections closed")

    async def health_check(self) -> bool:
        """
        Check database health.

        Returns:
            bool: True if database is healthy
        """
        if self.engine is None:
            return False
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False


# Global database manager instance
db_manager = DatabaseManager()


async def init_database():
    """Initialize database on application startup."""
    db_manager.init_db()
    await db_manager.create_tables()
    logger.info("Database initialized successfully")


async def close_database():
    """Close database connections on application shutdown."""
    await db_manager.close()
