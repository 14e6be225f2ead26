"""Database connection, store and cache management."""

from bulletin.db.session import (
    db_manager,
    init_database,
    close_database,
)
from bulletin.db.redis import (
    redis_manager,
    init_redis,
    close_redis,
)
from bulletin.db.store import (
    MessageStore,
    MessageFilter,
    PageRequest,
    DEFAULT_SORT,
)

__all__ = [
    "db_manager",
    "init_database",
    "close_database",
    "redis_manager",
    "init_redis",
    "close_redis",
    "MessageStore",
    "MessageFilter",
    "PageRequest",
    "DEFAULT_SORT",
]
