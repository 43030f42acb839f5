"""Turn numbering and stale-merge handling when turns on one conversation overlap."""
from __future__ import annotations

from uuid import UUID

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from family_scheduler.db.models.agent_action_log import AgentActionLog
from family_scheduler.db.models.conversation import Conversation
from family_scheduler.db.models.conversation_message import ConversationMessage
from family_scheduler.services import model_gateway
from family_scheduler.services.conversation_service import allocate_turn, create_conversation
from family_scheduler.services.model_gateway import UpstreamResult
from family_scheduler.services.schedule_store import load_days
from family_scheduler.services.turn_service import run_turn


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Conversation.__table__.create(bind=engine)
    ConversationMessage.__table__.create(bind=engine)
    AgentActionLog.__table__.create(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _new_conversation(SessionLocal) -> UUID:
    with SessionLocal() as session:
        conversation = create_conversation(session, calendar_events=[])
        session.commit()
        return conversation.id


def _reply(text: str) -> UpstreamResult:
    return UpstreamResult(200, {"content": [{"type": "text", "text": text}]})


def test_sessions_with_stale_counters_get_distinct_turns(session_factory) -> None:
    conversation_id = _new_conversation(session_factory)

    with session_factory() as first, session_factory() as second:
        first_view = first.get(Conversation, conversation_id)
        second_view = second.get(Conversation, conversation_id)
        assert first_view.turn_count == second_view.turn_count == 0

        first_turn = allocate_turn(first, first_view)
        first.commit()
        second_turn = allocate_turn(second, second_view)
        second.commit()

        assert (first_turn, second_turn) == (1, 2)
        assert second_view.turn_count == 2


def test_older_turn_finishing_last_is_discarded(session_factory, monkeypatch) -> None:
    conversation_id = _new_conversation(session_factory)
    later_results = []

    def overlapping_send(body):
        # A newer turn starts and completes while the older one waits on the model.
        monkeypatch.setattr(model_gateway, "send_request", lambda _: _reply('Newer.<SCHEDULE>[{"date":"2026-03-02","blocks":[{"t":"Newer"}]}]</SCHEDULE>'))
        with session_factory() as other:
            later_results.append(run_turn(other, other.get(Conversation, conversation_id), "second"))
        return _reply('Older.<SCHEDULE>[{"date":"2026-03-02","blocks":[{"t":"Older"}]}]</SCHEDULE>')

    monkeypatch.setattr(model_gateway, "send_request", overlapping_send)

    with session_factory() as session:
        conversation = session.get(Conversation, conversation_id)
        older = run_turn(session, conversation, "first")

        assert later_results[0].turn_number == 2
        assert later_results[0].merged_dates == ["2026-03-02"]
        assert older.turn_number == 1
        assert older.stale is True
        assert older.merged_dates == []
        assert [day.blocks[0].title for day in load_days(conversation)] == ["Newer"]
        assert conversation.last_merged_turn == 2
