"""
API endpoints for message operations.

Results are streamed as server-sent events, one message per event.
"""

import json
from contextlib import aclosing
from typing import AsyncGenerator, AsyncIterator, Optional

from fastapi import APIRouter, Body, Depends, Query, Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from bulletin.core.config import settings
from bulletin.core.observability import get_logger
from bulletin.db.session import db_manager
from bulletin.db.store import MessageStore
from bulletin.models.message import MessageBoundary, MessageView
from bulletin.services.message_service import MessageService


logger = get_logger(__name__)
router = APIRouter()


def get_message_store() -> MessageStore:
    return MessageStore(db_manager.async_session_factory)


def get_message_service(store: MessageStore = Depends(get_message_store)) -> MessageService:
    return MessageService(store)


def format_event(view: MessageView) -> str:
    return f"data: {json.dumps(view.to_wire())}\n\n"


async def _events(first: MessageView, views: AsyncIterator[MessageView]) -> AsyncIterator[str]:
    async with aclosing(views):
        yield format_event(first)
        async for view in views:
            yield format_event(view)


async def stream_response(views: AsyncGenerator[MessageView, None]) -> Response:
    """
    Turn a message iterator into an event-stream response.

    The first message is pulled before the response starts so that store
    failures still produce an error status instead of a truncated stream.
    The iterator is also closed as a background task, which runs even when
    the client disconnects before the body is iterated.
    """
    try:
        first = await views.__anext__()
    except StopAsyncIteration:
        return Response(media_type=settings.stream_media_type)

    return StreamingResponse(
        _events(first, views),
        media_type=settings.stream_media_type,
        background=BackgroundTask(views.aclose),
    )


@router.post("")
async def create_message(
    body: Optional[MessageBoundary] = Body(None),
    service: MessageService = Depends(get_message_service)
):
    """
    Create a new message.

    Emits exactly one event carrying the created message.
    """
    view = await service.create(body)
    return StreamingResponse(iter([format_event(view)]), media_type=settings.stream_media_type)


@router.get("")
async def search_messages(
    search: Optional[str] = Query(None, description="Search mode"),
    value: Optional[str] = Query(None, description="Search value (email or id)"),
    page: int = Query(settings.default_page, description="Zero-based page index"),
    size: int = Query(settings.default_page_size, description="Page size"),
    service: MessageService = Depends(get_message_service)
):
    """
    List messages, optionally filtered by a search mode.

    Supported modes: byRecipient, bySender, byId, byUrgent,
    urgentOnlyByRecipient, urgentOnlyBySender. Without a mode all
    messages are listed. Ordered newest first, then by id.
    """
    views = service.search(search, value, page, size)
    return await stream_response(views)


@router.delete("")
async def delete_all_messages(service: MessageService = Depends(get_message_service)):
    """Delete every message."""
    await service.delete_all()
    return Response(status_code=200)
