"""
Mapping between boundary payloads, persisted records and outward views.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bulletin.models.database import MessageRecord
from bulletin.models.message import MessageBoundary, MessageView


class MessageConverter:
    """Stateless converter; safe to share across requests."""

    def to_record(
        self,
        boundary: MessageBoundary,
        message_id: str,
        publication_timestamp: datetime,
        urgent: bool,
        extra_attributes: Dict[str, Any]
    ) -> MessageRecord:
        """Build a new record from a validated payload plus server-assigned fields."""
        return MessageRecord(
            id=message_id,
            target=boundary.target,
            sender=boundary.sender,
            title=boundary.title,
            publication_timestamp=publication_timestamp,
            urgent=urgent,
            extra_attributes=extra_attributes,
        )

    def to_view(self, record: Optional[MessageRecord]) -> Optional[MessageView]:
        if record is None:
            return None

        timestamp = record.publication_timestamp
        # SQLite drops tzinfo; timestamps are always written in UTC
        if timestamp is not None and timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        return MessageView(
            id=record.id,
            target=record.target,
            sender=record.sender,
            title=record.title,
            publication_timestamp=timestamp,
            urgent=bool(record.urgent),
            extra_attributes=dict(record.extra_attributes or {}),
        )
