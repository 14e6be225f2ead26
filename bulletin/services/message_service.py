"""
Message service: validation, query resolution, persistence and mapping
for every bulletin operation.
"""

import uuid
from contextlib import aclosing
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from bulletin.core.config import settings
from bulletin.core.exceptions import ValidationError
from bulletin.core.observability import (
    get_logger, MetricsCollector, trace_operation, monitor_performance
)
from bulletin.db.redis import RedisManager, redis_manager
from bulletin.db.store import MessageStore
from bulletin.models.message import MessageBoundary, MessageView
from bulletin.services.converter import MessageConverter
from bulletin.services.query import (
    ResolvedQuery, SearchMode, resolve_query, resolve_search
)
from bulletin.services.validation import is_blank, validate_email, validate_required


logger = get_logger(__name__)

CACHE_PREFIX = "message:"


class MessageService:
    """
    Service for bulletin message operations.

    List operations validate their arguments when called and return an
    async iterator; the store is only queried once iteration starts, and
    each view is yielded as soon as its record arrives. Closing the
    iterator early stops the underlying fetch.
    """

    def __init__(
        self,
        store: MessageStore,
        converter: Optional[MessageConverter] = None,
        cache: Optional[RedisManager] = None
    ):
        """
        Initialize message service.

        Args:
            store: Message store adapter
            converter: Record/view converter
            cache: Redis manager used for the by-id cache
        """
        self.store = store
        self.converter = converter or MessageConverter()
        self.cache = cache if cache is not None else redis_manager

    @trace_operation("create_message")
    @monitor_performance("create_message")
    async def create(self, boundary: Optional[MessageBoundary]) -> MessageView:
        """
        Validate, normalize and persist a new message.

        Args:
            boundary: Client payload

        Returns:
            The created message view
        """
        if boundary is None:
            raise ValidationError("Message body is required")

        target = validate_email("target", boundary.target)
        sender = validate_email("sender", boundary.sender)
        validate_required("title", boundary.title)

        if boundary.urgent is None:
            raise ValidationError("Urgent field is required")

        normalized = boundary.model_copy(update={"target": target, "sender": sender})
        extra_attributes = dict(boundary.extra_attributes) if boundary.extra_attributes else {}

        record = self.converter.to_record(
            normalized,
            message_id=str(uuid.uuid4()),
            publication_timestamp=datetime.now(timezone.utc),
            urgent=boundary.urgent,
            extra_attributes=extra_attributes,
        )
        saved = await self.store.save(record)

        MetricsCollector.track_created(saved.urgent)
        logger.info("Message created", message_id=saved.id, urgent=saved.urgent)

        return self.converter.to_view(saved)

    def get_all(self, page: Optional[int] = None, size: Optional[int] = None) -> AsyncIterator[MessageView]:
        return self._stream(resolve_query(SearchMode.ALL, None, page, size))

    def get_by_recipient(
        self,
        recipient_email: Optional[str],
        page: Optional[int] = None,
        size: Optional[int] = None
    ) -> AsyncIterator[MessageView]:
        return self._stream(resolve_query(SearchMode.BY_RECIPIENT, recipient_email, page, size))

    def get_by_sender(
        self,
        sender_email: Optional[str],
        page: Optional[int] = None,
        size: Optional[int] = None
    ) -> AsyncIterator[MessageView]:
        return self._stream(resolve_query(SearchMode.BY_SENDER, sender_email, page, size))

    def get_urgent(self, page: Optional[int] = None, size: Optional[int] = None) -> AsyncIterator[MessageView]:
        return self._stream(resolve_query(SearchMode.BY_URGENT, None, page, size))

    def get_urgent_by_recipient(
        self,
        recipient_email: Optional[str],
        page: Optional[int] = None,
        size: Optional[int] = None
    ) -> AsyncIterator[MessageView]:
        return self._stream(
            resolve_query(SearchMode.URGENT_ONLY_BY_RECIPIENT, recipient_email, page, size)
        )

    def get_urgent_by_sender(
        self,
        sender_email: Optional[str],
        page: Optional[int] = None,
        size: Optional[int] = None
    ) -> AsyncIterator[MessageView]:
        return self._stream(
            resolve_query(SearchMode.URGENT_ONLY_BY_SENDER, sender_email, page, size)
        )

    def search(
        self,
        search: Optional[str],
        value: Optional[str] = None,
        page: Optional[int] = None,
        size: Optional[int] = None
    ) -> AsyncIterator[MessageView]:
        """
        Dispatch a raw search request to the matching operation.

        Raises ValidationError immediately for unknown modes, missing values
        and bad paging. A byId search yields zero or one message.
        """
        query = resolve_search(search, value, page, size)
        if query.is_lookup:
            return self._lookup(query.message_id)
        return self._stream(query)

    @trace_operation("get_message")
    async def get_by_id(self, message_id: Optional[str]) -> Optional[MessageView]:
        """
        Get message by ID.

        Returns:
            The message view, or None when no such message exists
        """
        if is_blank(message_id):
            raise ValidationError("id value is required")

        cache_key = f"{CACHE_PREFIX}{message_id}"
        if settings.cache_enabled:
            cached = await self.cache.get(cache_key)
            MetricsCollector.track_cache_operation("get", cached is not None)
            if cached is not None:
                logger.debug("Message cache hit", message_id=message_id)
                return MessageView.model_validate(cached)

        view = self.converter.to_view(await self.store.find_by_id(message_id))

        if view is not None and settings.cache_enabled:
            await self.cache.set(cache_key, view.to_wire(), ttl=settings.message_cache_ttl)

        return view

    @trace_operation("delete_all_messages")
    @monitor_performance("delete_all_messages")
    async def delete_all(self) -> None:
        deleted = await self.store.delete_all()
        evicted = await self.cache.delete_prefix(CACHE_PREFIX)
        logger.info("All messages deleted", deleted=deleted, cache_evicted=evicted)

    async def _stream(self, query: ResolvedQuery) -> AsyncIterator[MessageView]:
        mode = query.mode.value
        MetricsCollector.track_query(mode)
        logger.debug(
            "Streaming messages",
            mode=mode,
            page=query.page_request.page,
            size=query.page_request.size
        )

        records = self.store.find_page(query.message_filter, query.page_request)
        async with aclosing(records):
            async for record in records:
                MetricsCollector.track_streamed(mode)
                yield self.converter.to_view(record)

    async def _lookup(self, message_id: str) -> AsyncIterator[MessageView]:
        MetricsCollector.track_query(SearchMode.BY_ID.value)
        view = await self.get_by_id(message_id)
        if view is not None:
            MetricsCollector.track_streamed(SearchMode.BY_ID.value)
            yield view
