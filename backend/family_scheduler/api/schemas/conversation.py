"""Pydantic schemas for conversation and turn endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from family_scheduler.api.schemas.schedule import ScheduleDayView


class ConversationCreateRequest(BaseModel):
    partner_a_name: str = Field("Partner A", min_length=1, max_length=80)
    partner_b_name: str = Field("Partner B", min_length=1, max_length=80)
    calendar_id: str = Field("primary", min_length=1, max_length=255)
    calendar_events: Optional[List[Dict[str, Any]]] = None


class MessagePayload(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    turn_number: int


class ConversationResponse(BaseModel):
    id: UUID
    partner_a_name: str
    partner_b_name: str
    calendar_id: str
    turn_count: int
    messages: List[MessagePayload] = Field(default_factory=list)
    schedule: List[ScheduleDayView] = Field(default_factory=list)
    summary: Optional[Dict[str, Any]] = None
    pending_calendar_events: int = 0
    request_id: str


class TurnRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)
    calendar_events: Optional[List[Dict[str, Any]]] = None


class TurnResponse(BaseModel):
    conversation_id: UUID
    turn_number: int
    reply: str
    outcome: str
    view: Literal["schedule", "chat"]
    merged_dates: List[str]
    recovered: bool
    stale: bool
    schedule: List[ScheduleDayView]
    summary: Optional[Dict[str, Any]] = None
    pending_calendar_events: int
    request_id: str


class EventLabelsRequest(BaseModel):
    labels: Dict[str, str] = Field(default_factory=dict)


class EventLabelsResponse(BaseModel):
    conversation_id: UUID
    labels: Dict[str, str]
    request_id: str
