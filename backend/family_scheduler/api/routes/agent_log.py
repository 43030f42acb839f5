"""Conversation activity log endpoints."""
from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import desc
from sqlalchemy.orm import Session

from family_scheduler.api.schemas.agent_log import AgentLogDetailResponse, AgentLogListItem, AgentLogListResponse
from family_scheduler.db.deps import get_db
from family_scheduler.db.models.agent_action_log import AgentActionLog
from family_scheduler.observability.tracing import trace
from family_scheduler.services.conversation_service import get_conversation

router = APIRouter()


@router.get("/conversations/{conversation_id}/activity", response_model=AgentLogListResponse, tags=["activity"])
def list_activity(
    conversation_id: UUID,
    request: Request,
    limit: int = Query(50, ge=1, le=100),
    action_type: str | None = Query(None, description="Filter by action type"),
    db: Session = Depends(get_db),
) -> AgentLogListResponse:
    request_id = getattr(request.state, "request_id", None)
    if not get_conversation(db, conversation_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")

    metadata = {"limit": limit, "action_type": action_type}
    with trace("activity.list", metadata=metadata, conversation_id=str(conversation_id), request_id=request_id):
        query = db.query(AgentActionLog).filter(AgentActionLog.conversation_id == conversation_id)
        if action_type:
            query = query.filter(AgentActionLog.action_type == action_type)
        logs = (
            query.order_by(desc(AgentActionLog.created_at), desc(AgentActionLog.turn_number))
            .limit(limit)
            .all()
        )

    return AgentLogListResponse(
        conversation_id=conversation_id,
        items=[_serialize_log_item(log) for log in logs],
        request_id=request_id or "",
    )


@router.get(
    "/conversations/{conversation_id}/activity/{log_id}",
    response_model=AgentLogDetailResponse,
    tags=["activity"],
)
def get_activity(
    conversation_id: UUID,
    log_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
) -> AgentLogDetailResponse:
    request_id = getattr(request.state, "request_id", None)
    log_entry = db.get(AgentActionLog, log_id)
    if not log_entry or log_entry.conversation_id != conversation_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity entry not found")

    payload = _ensure_payload_dict(log_entry.action_payload)
    return AgentLogDetailResponse(
        id=log_entry.id,
        conversation_id=log_entry.conversation_id,
        created_at=log_entry.created_at.isoformat() if log_entry.created_at else "",
        turn_number=log_entry.turn_number,
        action_type=log_entry.action_type,
        payload=payload,
        reason=log_entry.reason,
        summary=_derive_summary(log_entry.action_type, payload),
        request_id=request_id or "",
    )


def _serialize_log_item(log: AgentActionLog) -> AgentLogListItem:
    payload = _ensure_payload_dict(log.action_payload)
    return AgentLogListItem(
        id=log.id,
        created_at=log.created_at.isoformat() if log.created_at else "",
        turn_number=log.turn_number,
        action_type=log.action_type,
        summary=_derive_summary(log.action_type, payload),
    )


def _ensure_payload_dict(payload: Any) -> dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


def _derive_summary(action_type: str, payload: dict[str, Any]) -> str:
    if action_type == "schedule_merged":
        dates = payload.get("merged_dates") or []
        suffix = " (recovered from a truncated reply)" if payload.get("recovered") else ""
        return f"Updated {len(dates)} day(s) of the schedule{suffix}."
    if action_type == "schedule_parse_failed":
        return "The assistant sent a schedule that could not be read; nothing changed."
    if action_type == "schedule_discarded_stale":
        return "A schedule from an older turn was ignored."
    if action_type == "turn_transport_failed":
        return "The assistant could not be reached."
    if action_type == "calendar_events_pushed":
        return f"Pushed {payload.get('pushed', 0)} of {payload.get('total', 0)} events to Google Calendar."
    if action_type == "reply_without_schedule":
        return "Answered without changing the schedule."
    return action_type.replace("_", " ").capitalize()
