"""
Database models for the bulletin service.
Defines the persisted message record.
"""

from sqlalchemy import Column, String, DateTime, Boolean, JSON, Index, Text
from sqlalchemy.orm import declarative_base


Base = declarative_base()


class MessageRecord(Base):
    """
    Persisted form of a bulletin message.

    Records are written once by the message service and never updated;
    they are removed only by a bulk delete.
    """
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True)
    target = Column(String(320), nullable=False, index=True)
    sender = Column(String(320), nullable=False, index=True)
    title = Column(Text, nullable=False)
    publication_timestamp = Column(DateTime(timezone=True), nullable=False)
    urgent = Column(Boolean, nullable=False, index=True)

    # Free-form attributes, stored as-is
    extra_attributes = Column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_message_publication_order", "publication_timestamp", "id"),
    )

    def __repr__(self):
        return f"<MessageRecord(id={self.id}, target={self.target}, urgent={self.urgent})>"
