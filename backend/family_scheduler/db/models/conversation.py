"""Conversation ORM model: one household planning thread and its schedule store."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, Integer, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from family_scheduler.db.base import Base
from family_scheduler.db.types import PortableJSON


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    partner_a_name = Column(Text, nullable=False, server_default=sa_text("'Partner A'"))
    partner_b_name = Column(Text, nullable=False, server_default=sa_text("'Partner B'"))
    calendar_id = Column(Text, nullable=False, server_default=sa_text("'primary'"))
    # Calendar snapshot sent to the model with each turn.
    calendar_events = Column(PortableJSON, nullable=False, default=list)
    event_labels = Column(PortableJSON, nullable=False, default=dict)
    # Schedule store: list of ScheduleDay dicts sorted by date.
    schedule_days = Column(PortableJSON, nullable=False, default=list)
    summary = Column(PortableJSON, nullable=True)
    pending_calendar_events = Column(PortableJSON, nullable=True)
    turn_count = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))
    last_merged_turn = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
