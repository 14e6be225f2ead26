"""
Message store adapter.

A single parameterized query (filter descriptor + fixed sort + page) backs
every list operation, so new search modes only need a new filter value.
"""

from dataclasses import dataclass
from typing import AsyncIterator, Optional
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bulletin.core.exceptions import StoreError
from bulletin.core.observability import get_logger, MetricsCollector
from bulletin.models.database import MessageRecord


logger = get_logger(__name__)


@dataclass(frozen=True)
class MessageFilter:
    """Equality filter on the indexed message fields. Empty means all messages."""
    target: Optional[str] = None
    sender: Optional[str] = None
    urgent_only: bool = False


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page index and positive page length."""
    page: int
    size: int

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(frozen=True)
class SortOrder:
    field: str
    descending: bool = False


# Newest first, id as tie-break so that pages never overlap
DEFAULT_SORT = (
    SortOrder("publication_timestamp", descending=True),
    SortOrder("id"),
)


class MessageStore:
    """Persists message records and runs paged, sorted lookups."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @staticmethod
    def build_page_query(message_filter: MessageFilter, page_request: PageRequest):
        """Build the SELECT for one page of records matching the filter."""
        stmt = select(MessageRecord)

        if message_filter.urgent_only:
            stmt = stmt.where(MessageRecord.urgent.is_(True))
        if message_filter.target is not None:
            stmt = stmt.where(MessageRecord.target == message_filter.target)
        if message_filter.sender is not None:
            stmt = stmt.where(MessageRecord.sender == message_filter.sender)

        order_by = []
        for order in DEFAULT_SORT:
            column = getattr(MessageRecord, order.field)
            order_by.append(column.desc() if order.descending else column.asc())

        return (
            stmt.order_by(*order_by)
            .offset(page_request.offset)
            .limit(page_request.size)
        )

    async def find_page(
        self,
        message_filter: MessageFilter,
        page_request: PageRequest
    ) -> AsyncIterator[MessageRecord]:
        """
        Stream one page of records in the fixed sort order.

        Records are yielded as the cursor produces them. Closing the
        iterator early closes the cursor and the session.
        """
        stmt = self.build_page_query(message_filter, page_request)

        try:
            async with self.session_factory() as session:
                result = await session.stream_scalars(stmt)
                try:
                    async for record in result:
                        yield record
                finally:
                    await result.close()
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("find_page", e) from e

    async def find_by_id(self, message_id: str) -> Optional[MessageRecord]:
        try:
            async with self.session_factory() as session:
                return await session.get(MessageRecord, message_id)
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("find_by_id", e) from e

    async def save(self, record: MessageRecord) -> MessageRecord:
        """Insert a new record. The record carries its own id."""
        try:
            async with self.session_factory() as session:
                session.add(record)
                await session.commit()
                return record
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("save", e) from e

    async def delete_all(self) -> int:
        """Remove every record and return how many were deleted."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(delete(MessageRecord))
                await session.commit()
                return result.rowcount
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("delete_all", e) from e

    @staticmethod
    def _store_error(operation: str, error: Exception) -> StoreError:
        MetricsCollector.track_store_error(operation)
        logger.error("Message store operation failed", operation=operation, error=str(error))
        return StoreError(f"Message store {operation} failed: {error}", operation=operation)
