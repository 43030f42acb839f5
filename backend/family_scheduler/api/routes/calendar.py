"""Calendar window and Google Calendar sync/push endpoints."""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from family_scheduler.api.schemas.calendar import (
    CalendarDayView,
    CalendarEventView,
    CalendarPushResponse,
    CalendarSyncResponse,
    CalendarTokenRequest,
    CalendarWindowResponse,
)
from family_scheduler.db.deps import get_db
from family_scheduler.db.models.conversation import Conversation
from family_scheduler.observability.metrics import log_metric
from family_scheduler.observability.tracing import trace
from family_scheduler.services import google_calendar
from family_scheduler.services.calendar_events import (
    DEMO_CALENDAR_EVENTS,
    bucket_events,
    event_label,
    two_week_window,
    window_start,
)
from family_scheduler.services.conversation_service import get_conversation, log_action, partner_names

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/conversations/{conversation_id}/calendar",
    response_model=CalendarWindowResponse,
    tags=["calendar"],
)
def get_calendar_window(
    conversation_id: UUID,
    request: Request,
    today: Optional[date] = Query(None, description="Anchor date; defaults to the server's today"),
    db: Session = Depends(get_db),
) -> CalendarWindowResponse:
    """Two weeks starting Monday, each day listing the events that occur on it."""
    request_id = getattr(request.state, "request_id", None)
    conversation = _require_conversation(db, conversation_id)
    days = two_week_window(today or date.today())
    events = conversation.calendar_events or []
    labels = conversation.event_labels or {}
    names = partner_names(conversation)
    buckets = bucket_events(events, days)

    day_views = []
    for index, day in enumerate(days):
        day_views.append(
            CalendarDayView(
                date=day,
                week=index // 7 + 1,
                events=[
                    CalendarEventView(
                        id=str(event["id"]) if event.get("id") is not None else None,
                        summary=str(event.get("summary") or ""),
                        label=event_label(event, labels, names),
                        color_id=event.get("colorId"),
                        all_day=bool((event.get("start") or {}).get("date")),
                        raw=dict(event),
                    )
                    for event in buckets[day.isoformat()]
                ],
            )
        )

    return CalendarWindowResponse(
        conversation_id=conversation.id,
        start=days[0],
        end=days[-1],
        days=day_views,
        request_id=request_id or "",
    )


@router.post(
    "/conversations/{conversation_id}/calendar/sync",
    response_model=CalendarSyncResponse,
    tags=["calendar"],
)
def sync_calendar(
    conversation_id: UUID,
    payload: CalendarTokenRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> CalendarSyncResponse:
    """Load events from Google Calendar; without a token, or on failure, keep demo data."""
    request_id = getattr(request.state, "request_id", None)
    conversation = _require_conversation(db, conversation_id)
    source = "demo"

    if payload.access_token:
        time_min = datetime.combine(window_start(date.today()), time.min, tzinfo=timezone.utc)
        with trace("calendar.sync", metadata={"calendar_id": conversation.calendar_id}, conversation_id=str(conversation.id), request_id=request_id):
            try:
                events = google_calendar.fetch_events(payload.access_token, conversation.calendar_id, time_min)
            except google_calendar.CalendarError as exc:
                logger.warning("Calendar fetch failed, using demo data: %s", exc)
            else:
                conversation.calendar_events = events
                source = "google"

    if source == "demo" and not conversation.calendar_events:
        conversation.calendar_events = [dict(event) for event in DEMO_CALENDAR_EVENTS]

    db.commit()
    log_metric("calendar.sync", 1, metadata={"source": source})
    return CalendarSyncResponse(
        conversation_id=conversation.id,
        source=source,
        event_count=len(conversation.calendar_events or []),
        request_id=request_id or "",
    )


@router.post(
    "/conversations/{conversation_id}/calendar/push",
    response_model=CalendarPushResponse,
    tags=["calendar"],
)
def push_calendar(
    conversation_id: UUID,
    payload: CalendarTokenRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> CalendarPushResponse:
    """Push the events the assistant prepared; pushed events join the local snapshot."""
    request_id = getattr(request.state, "request_id", None)
    conversation = _require_conversation(db, conversation_id)
    pending = list(conversation.pending_calendar_events or [])
    if not pending:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No calendar events are waiting to be pushed")
    if not payload.access_token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No Google Calendar token; events not pushed (demo mode)",
        )

    with trace("calendar.push", metadata={"pending": len(pending)}, conversation_id=str(conversation.id), request_id=request_id):
        result = google_calendar.push_events(payload.access_token, conversation.calendar_id, pending)

    existing = list(conversation.calendar_events or [])
    pushed_events = [dict(event) for event in result.created]
    conversation.calendar_events = existing + pushed_events
    conversation.pending_calendar_events = None
    log_action(
        db,
        conversation,
        action_type="calendar_events_pushed",
        payload={"pushed": result.pushed, "total": result.total},
        reason="User confirmed pushing the proposed events",
    )
    db.commit()

    log_metric("calendar.push.pushed", result.pushed, metadata={"total": result.total})
    return CalendarPushResponse(
        conversation_id=conversation.id,
        pushed=result.pushed,
        total=result.total,
        request_id=request_id or "",
    )


def _require_conversation(db: Session, conversation_id: UUID) -> Conversation:
    conversation = get_conversation(db, conversation_id)
    if not conversation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation
