"""Business logic services."""

from bulletin.services.message_service import MessageService
from bulletin.services.converter import MessageConverter
from bulletin.services.query import SearchMode, resolve_query, resolve_search

__all__ = [
    "MessageService",
    "MessageConverter",
    "SearchMode",
    "resolve_query",
    "resolve_search",
]
