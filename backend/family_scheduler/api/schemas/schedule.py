"""Canonical schedule schema shared by the parsing pipeline and the API."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScheduleBlock(BaseModel):
    """One activity within a day. Every field is a string, empty when unknown."""

    model_config = ConfigDict(frozen=True)

    start: str = ""
    end: str = ""
    title: str = ""
    who: str = ""
    note: str = ""


class ScheduleDay(BaseModel):
    """A dated day plan; `date` (ISO YYYY-MM-DD) is its identity in the store."""

    model_config = ConfigDict(frozen=True)

    date: str
    label: str = ""
    blocks: List[ScheduleBlock] = Field(default_factory=list)


class ScheduleBlockView(ScheduleBlock):
    """Block enriched with render hints derived from its `who` token."""

    role: str
    color_id: Optional[str] = None


class ScheduleDayView(BaseModel):
    date: str
    label: str
    blocks: List[ScheduleBlockView]


class ScheduleResponse(BaseModel):
    conversation_id: str
    days: List[ScheduleDayView]
    summary: Optional[Dict[str, Any]] = None
    request_id: str
