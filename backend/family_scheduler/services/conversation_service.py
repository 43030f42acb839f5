"""Helpers for working with conversations and their transcripts."""
from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from family_scheduler.db.models.agent_action_log import AgentActionLog
from family_scheduler.db.models.conversation import Conversation
from family_scheduler.db.models.conversation_message import ConversationMessage
from family_scheduler.services.calendar_events import DEMO_CALENDAR_EVENTS


def create_conversation(
    db: Session,
    *,
    partner_a_name: str = "Partner A",
    partner_b_name: str = "Partner B",
    calendar_id: str = "primary",
    calendar_events: Optional[List[Dict[str, Any]]] = None,
) -> Conversation:
    """Create a conversation seeded with the demo calendar unless events are supplied."""
    conversation = Conversation(
        partner_a_name=partner_a_name,
        partner_b_name=partner_b_name,
        calendar_id=calendar_id,
        calendar_events=list(calendar_events) if calendar_events is not None else [dict(e) for e in DEMO_CALENDAR_EVENTS],
        event_labels={},
        schedule_days=[],
        turn_count=0,
        last_merged_turn=0,
    )
    db.add(conversation)
    db.flush()
    return conversation


def get_conversation(db: Session, conversation_id: UUID) -> Optional[Conversation]:
    return db.get(Conversation, conversation_id)


def partner_names(conversation: Conversation) -> tuple[str, str]:
    return (conversation.partner_a_name or "Partner A", conversation.partner_b_name or "Partner B")


def allocate_turn(db: Session, conversation: Conversation) -> int:
    """Reserve the next monotonic turn number for this conversation.

    The increment happens in a single UPDATE so concurrent turns on the same
    conversation never receive the same number.
    """
    table = Conversation.__table__
    turn_number = db.execute(
        update(table)
        .where(table.c.id == conversation.id)
        .values(turn_count=table.c.turn_count + 1)
        .returning(table.c.turn_count)
    ).scalar_one()
    db.expire(conversation, ["turn_count"])
    return turn_number


def add_message(
    db: Session,
    conversation: Conversation,
    *,
    role: str,
    content: str,
    turn_number: int,
    metadata: Optional[Dict[str, Any]] = None,
) -> ConversationMessage:
    message = ConversationMessage(
        conversation_id=conversation.id,
        role=role,
        content=content,
        turn_number=turn_number,
        metadata_json=metadata,
    )
    db.add(message)
    db.flush()
    return message


def list_messages(db: Session, conversation_id: UUID) -> List[ConversationMessage]:
    return (
        db.query(ConversationMessage)
        .filter(ConversationMessage.conversation_id == conversation_id)
        # "user" sorts after "assistant", so descending role keeps the question ahead of its reply.
        .order_by(ConversationMessage.turn_number, ConversationMessage.role.desc())
        .all()
    )


def history_for_prompt(db: Session, conversation_id: UUID) -> List[Dict[str, str]]:
    return [{"role": message.role, "content": message.content} for message in list_messages(db, conversation_id)]


def log_action(
    db: Session,
    conversation: Conversation,
    *,
    action_type: str,
    payload: Dict[str, Any],
    reason: Optional[str] = None,
    turn_number: Optional[int] = None,
) -> AgentActionLog:
    entry = AgentActionLog(
        conversation_id=conversation.id,
        turn_number=turn_number,
        action_type=action_type,
        action_payload=payload,
        reason=reason,
    )
    db.add(entry)
    return entry
