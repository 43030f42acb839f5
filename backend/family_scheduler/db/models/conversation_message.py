"""Conversation transcript ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from family_scheduler.db.base import Base
from family_scheduler.db.types import PortableJSON


class ConversationMessage(Base):
    __tablename__ = "conversation_messages"
    __table_args__ = (Index("ix_conversation_messages_conversation_id", "conversation_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    conversation_id = Column(
        UUID(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    )
    turn_number = Column(Integer, nullable=False)
    role = Column(String(16), nullable=False)
    # Assistant rows hold display text only; tagged payloads are stripped before storage.
    content = Column(Text, nullable=False)
    metadata_json = Column("metadata", PortableJSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
