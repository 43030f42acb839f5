"""One conversational turn: prompt, model call, reply parsing and schedule merge."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from family_scheduler.api.schemas.schedule import ScheduleDay
from family_scheduler.core.context import conversation_scope
from family_scheduler.db.models.conversation import Conversation
from family_scheduler.observability.metrics import log_metric
from family_scheduler.observability.tracing import annotate, trace
from family_scheduler.services import model_gateway
from family_scheduler.services.conversation_service import (
    add_message,
    allocate_turn,
    history_for_prompt,
    log_action,
    partner_names,
)
from family_scheduler.services.prompt_assembler import build_request_body
from family_scheduler.services.schedule_pipeline import PipelineResult, TurnOutcome, process_model_reply
from family_scheduler.services.schedule_store import apply_merge, load_days

logger = logging.getLogger(__name__)

TRANSPORT_ERROR_REPLY = "Hmm, something went wrong connecting to the AI. Check your network and try again."
EMPTY_REPLY = "Sorry, I couldn't get a response."


@dataclass
class TurnResult:
    conversation_id: UUID
    turn_number: int
    reply: str
    outcome: TurnOutcome
    days: List[ScheduleDay] = field(default_factory=list)
    merged_dates: List[str] = field(default_factory=list)
    recovered: bool = False
    stale: bool = False
    summary: Optional[Dict[str, Any]] = None
    pending_calendar_events: int = 0

    @property
    def view(self) -> str:
        return "schedule" if self.outcome is TurnOutcome.MERGED and not self.stale else "chat"


def run_turn(
    db: Session,
    conversation: Conversation,
    message: str,
    *,
    calendar_events: Optional[List[Dict[str, Any]]] = None,
    request_id: Optional[str] = None,
    today: Optional[date] = None,
) -> TurnResult:
    """Run a full turn and commit its effects.

    Parsing problems never raise: an unusable reply leaves the schedule store as
    it was and the user still sees whatever prose came back.
    """
    with conversation_scope(str(conversation.id)):
        if calendar_events is not None:
            conversation.calendar_events = list(calendar_events)

        history = history_for_prompt(db, conversation.id)
        turn_number = allocate_turn(db, conversation)
        add_message(db, conversation, role="user", content=message, turn_number=turn_number)
        db.commit()

        metadata = {"turn": turn_number, "history_length": len(history), "request_id": request_id}
        with trace("turn.run", metadata=metadata, conversation_id=str(conversation.id), request_id=request_id) as span:
            body = build_request_body(
                history=history,
                user_message=message,
                events=conversation.calendar_events or [],
                partner_names=partner_names(conversation),
                event_labels=conversation.event_labels or {},
                today=today,
            )
            upstream = model_gateway.send_request(body)

            if not upstream.ok:
                result = _record_transport_failure(db, conversation, turn_number, upstream)
                annotate(span, **metadata, outcome=result.outcome.value)
                return result

            raw = model_gateway.reply_text(upstream.payload) or EMPTY_REPLY
            # Row lock held until _apply_pipeline commits; the stale check and merge run under it.
            db.refresh(conversation, with_for_update=True)
            pipeline = process_model_reply(raw, load_days(conversation))
            result = _apply_pipeline(db, conversation, turn_number, pipeline)
            annotate(span, **metadata, outcome=result.outcome.value, recovered=result.recovered)

    log_metric("turn.outcome", 1, metadata={"outcome": result.outcome.value})
    log_metric("turn.days_merged", len(result.merged_dates), metadata={"recovered": result.recovered})
    return result


def _record_transport_failure(db: Session, conversation: Conversation, turn_number: int, upstream) -> TurnResult:
    logger.warning("Model request failed for turn %s with status %s", turn_number, upstream.status_code)
    add_message(
        db,
        conversation,
        role="assistant",
        content=TRANSPORT_ERROR_REPLY,
        turn_number=turn_number,
        metadata={"outcome": TurnOutcome.TRANSPORT_ERROR.value},
    )
    log_action(
        db,
        conversation,
        action_type="turn_transport_failed",
        payload={"status_code": upstream.status_code, "error": upstream.payload.get("error")},
        reason="Model endpoint unreachable or returned an error",
        turn_number=turn_number,
    )
    db.commit()
    return TurnResult(
        conversation_id=conversation.id,
        turn_number=turn_number,
        reply=TRANSPORT_ERROR_REPLY,
        outcome=TurnOutcome.TRANSPORT_ERROR,
        days=load_days(conversation),
        summary=conversation.summary,
        pending_calendar_events=len(conversation.pending_calendar_events or []),
    )


def _apply_pipeline(db: Session, conversation: Conversation, turn_number: int, pipeline: PipelineResult) -> TurnResult:
    stale = False
    merged_dates: List[str] = []

    if pipeline.outcome is TurnOutcome.MERGED:
        if apply_merge(conversation, pipeline.days, turn_number):
            merged_dates = [day.date for day in pipeline.incoming_days]
        else:
            stale = True

    if not stale:
        # Each section stands on its own; no cross-section consistency check.
        if pipeline.summary is not None:
            conversation.summary = pipeline.summary
        if pipeline.calendar_events is not None:
            conversation.pending_calendar_events = pipeline.calendar_events

    add_message(
        db,
        conversation,
        role="assistant",
        content=pipeline.display_text,
        turn_number=turn_number,
        metadata={
            "outcome": pipeline.outcome.value,
            "recovered": pipeline.recovered,
            "stale": stale,
            "calendar_events": len(pipeline.calendar_events or []),
        },
    )
    log_action(
        db,
        conversation,
        action_type=_action_type(pipeline.outcome, stale),
        payload={
            "merged_dates": merged_dates,
            "recovered": pipeline.recovered,
            "truncated": pipeline.truncated,
            "summary_updated": pipeline.summary is not None and not stale,
            "calendar_events": len(pipeline.calendar_events or []),
        },
        reason=_action_reason(pipeline.outcome, stale),
        turn_number=turn_number,
    )
    db.commit()
    db.refresh(conversation)

    return TurnResult(
        conversation_id=conversation.id,
        turn_number=turn_number,
        reply=pipeline.display_text,
        outcome=pipeline.outcome,
        days=load_days(conversation),
        merged_dates=merged_dates,
        recovered=pipeline.recovered,
        stale=stale,
        summary=conversation.summary,
        pending_calendar_events=len(conversation.pending_calendar_events or []),
    )


def _action_type(outcome: TurnOutcome, stale: bool) -> str:
    if stale:
        return "schedule_discarded_stale"
    return {
        TurnOutcome.MERGED: "schedule_merged",
        TurnOutcome.UNRECOVERABLE: "schedule_parse_failed",
        TurnOutcome.NO_SCHEDULE: "reply_without_schedule",
    }.get(outcome, "turn_completed")


def _action_reason(outcome: TurnOutcome, stale: bool) -> str:
    if stale:
        return "A newer turn already updated the schedule"
    if outcome is TurnOutcome.MERGED:
        return "Schedule days merged by date"
    if outcome is TurnOutcome.UNRECOVERABLE:
        return "Schedule section could not be decoded; store left unchanged"
    return "Conversational reply"
