"""Conversation, turn and schedule endpoints."""
from __future__ import annotations

from time import perf_counter
from typing import List, Sequence
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from family_scheduler.api.schemas.conversation import (
    ConversationCreateRequest,
    ConversationResponse,
    EventLabelsRequest,
    EventLabelsResponse,
    MessagePayload,
    TurnRequest,
    TurnResponse,
)
from family_scheduler.api.schemas.schedule import (
    ScheduleBlockView,
    ScheduleDay,
    ScheduleDayView,
    ScheduleResponse,
)
from family_scheduler.db.deps import get_db
from family_scheduler.db.models.conversation import Conversation
from family_scheduler.observability.metrics import log_metric
from family_scheduler.observability.tracing import trace
from family_scheduler.services.conversation_service import (
    create_conversation,
    get_conversation,
    list_messages,
    partner_names,
)
from family_scheduler.services.schedule_normalizer import classify_who, color_for_role
from family_scheduler.services.schedule_store import load_days
from family_scheduler.services.turn_service import run_turn

router = APIRouter()


@router.post(
    "/conversations",
    response_model=ConversationResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["conversations"],
)
def create_conversation_endpoint(
    payload: ConversationCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> ConversationResponse:
    request_id = getattr(request.state, "request_id", None)
    with trace("conversation.create", metadata={"seeded": payload.calendar_events is not None}, request_id=request_id):
        conversation = create_conversation(
            db,
            partner_a_name=payload.partner_a_name.strip(),
            partner_b_name=payload.partner_b_name.strip(),
            calendar_id=payload.calendar_id.strip(),
            calendar_events=payload.calendar_events,
        )
        db.commit()
        db.refresh(conversation)

    log_metric("conversation.created", 1)
    return _conversation_response(db, conversation, request_id)


@router.get("/conversations/{conversation_id}", response_model=ConversationResponse, tags=["conversations"])
def get_conversation_endpoint(
    conversation_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
) -> ConversationResponse:
    request_id = getattr(request.state, "request_id", None)
    conversation = _require_conversation(db, conversation_id)
    return _conversation_response(db, conversation, request_id)


@router.post("/conversations/{conversation_id}/turns", response_model=TurnResponse, tags=["conversations"])
def post_turn(
    conversation_id: UUID,
    payload: TurnRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> TurnResponse:
    """Send one user message to the assistant and merge any schedule it returns."""
    request_id = getattr(request.state, "request_id", None)
    message = payload.message.strip()
    if not message:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="message must not be empty")

    conversation = _require_conversation(db, conversation_id)
    start = perf_counter()
    result = run_turn(
        db,
        conversation,
        message,
        calendar_events=payload.calendar_events,
        request_id=request_id,
    )
    log_metric("turn.latency_ms", (perf_counter() - start) * 1000, metadata={"outcome": result.outcome.value})

    return TurnResponse(
        conversation_id=result.conversation_id,
        turn_number=result.turn_number,
        reply=result.reply,
        outcome=result.outcome.value,
        view=result.view,
        merged_dates=result.merged_dates,
        recovered=result.recovered,
        stale=result.stale,
        schedule=schedule_views(result.days, partner_names(conversation)),
        summary=result.summary,
        pending_calendar_events=result.pending_calendar_events,
        request_id=request_id or "",
    )


@router.get("/conversations/{conversation_id}/schedule", response_model=ScheduleResponse, tags=["schedule"])
def get_schedule(
    conversation_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
) -> ScheduleResponse:
    request_id = getattr(request.state, "request_id", None)
    conversation = _require_conversation(db, conversation_id)
    return ScheduleResponse(
        conversation_id=str(conversation.id),
        days=schedule_views(load_days(conversation), partner_names(conversation)),
        summary=conversation.summary,
        request_id=request_id or "",
    )


@router.put(
    "/conversations/{conversation_id}/event-labels",
    response_model=EventLabelsResponse,
    tags=["conversations"],
)
def put_event_labels(
    conversation_id: UUID,
    payload: EventLabelsRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> EventLabelsResponse:
    request_id = getattr(request.state, "request_id", None)
    conversation = _require_conversation(db, conversation_id)
    labels = {str(key): value.strip() for key, value in payload.labels.items() if value and value.strip()}
    conversation.event_labels = labels
    db.commit()
    return EventLabelsResponse(conversation_id=conversation.id, labels=labels, request_id=request_id or "")


def schedule_views(days: Sequence[ScheduleDay], names: Sequence[str]) -> List[ScheduleDayView]:
    views: List[ScheduleDayView] = []
    for day in days:
        blocks = []
        for block in day.blocks:
            role = classify_who(block.who, names)
            blocks.append(ScheduleBlockView(**block.model_dump(), role=role.value, color_id=color_for_role(role)))
        views.append(ScheduleDayView(date=day.date, label=day.label, blocks=blocks))
    return views


def _require_conversation(db: Session, conversation_id: UUID) -> Conversation:
    conversation = get_conversation(db, conversation_id)
    if not conversation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation


def _conversation_response(db: Session, conversation: Conversation, request_id: str | None) -> ConversationResponse:
    messages = [
        MessagePayload(role=message.role, content=message.content, turn_number=message.turn_number)
        for message in list_messages(db, conversation.id)
    ]
    return ConversationResponse(
        id=conversation.id,
        partner_a_name=conversation.partner_a_name,
        partner_b_name=conversation.partner_b_name,
        calendar_id=conversation.calendar_id,
        turn_count=conversation.turn_count or 0,
        messages=messages,
        schedule=schedule_views(load_days(conversation), partner_names(conversation)),
        summary=conversation.summary,
        pending_calendar_events=len(conversation.pending_calendar_events or []),
        request_id=request_id or "",
    )
