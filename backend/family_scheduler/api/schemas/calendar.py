"""Schemas for the calendar window and Google Calendar sync/push endpoints."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CalendarEventView(BaseModel):
    id: Optional[str] = None
    summary: str = ""
    label: Optional[str] = None
    color_id: Optional[str] = None
    all_day: bool
    raw: Dict[str, Any]


class CalendarDayView(BaseModel):
    date: date
    week: int
    events: List[CalendarEventView]


class CalendarWindowResponse(BaseModel):
    conversation_id: UUID
    start: date
    end: date
    days: List[CalendarDayView]
    request_id: str


class CalendarTokenRequest(BaseModel):
    access_token: Optional[str] = Field(default=None, description="Google OAuth access token")


class CalendarSyncResponse(BaseModel):
    conversation_id: UUID
    source: str
    event_count: int
    request_id: str


class CalendarPushResponse(BaseModel):
    conversation_id: UUID
    pushed: int
    total: int
    request_id: str
