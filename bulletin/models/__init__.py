"""Database and boundary models package."""

from bulletin.models.database import Base, MessageRecord
from bulletin.models.message import MessageBoundary, MessageView

__all__ = [
    "Base",
    "MessageRecord",
    "MessageBoundary",
    "MessageView",
]
