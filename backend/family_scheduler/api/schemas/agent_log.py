"""Schemas for the conversation activity log endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel


class AgentLogListItem(BaseModel):
    id: UUID
    created_at: str
    turn_number: Optional[int] = None
    action_type: str
    summary: str


class AgentLogListResponse(BaseModel):
    conversation_id: UUID
    items: List[AgentLogListItem]
    request_id: str


class AgentLogDetailResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    created_at: str
    turn_number: Optional[int] = None
    action_type: str
    payload: Dict[str, Any]
    reason: Optional[str] = None
    summary: str
    request_id: str
