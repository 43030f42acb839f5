"""Google Calendar REST reads and writes."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Sequence
from urllib.parse import quote

import httpx

from family_scheduler.core.config import settings

logger = logging.getLogger(__name__)

FETCH_MAX_RESULTS = 100


class CalendarError(RuntimeError):
    """Raised when the calendar provider cannot be read."""


@dataclass
class PushResult:
    pushed: int
    total: int
    created: List[Dict[str, Any]]


def _build_client(access_token: str) -> httpx.Client:
    return httpx.Client(
        base_url=settings.google_calendar_base_url,
        headers={"Authorization": f"Bearer {access_token}"},
        timeout=settings.google_calendar_timeout_seconds,
    )


def _events_path(calendar_id: str) -> str:
    return f"/calendars/{quote(calendar_id, safe='')}/events"


def fetch_events(access_token: str, calendar_id: str, time_min: datetime) -> List[Dict[str, Any]]:
    """Return single (expanded) events starting at `time_min`, ordered by start time."""
    params = {
        "maxResults": FETCH_MAX_RESULTS,
        "orderBy": "startTime",
        "singleEvents": "true",
        "timeMin": time_min.isoformat(),
    }
    try:
        with _build_client(access_token) as client:
            response = client.get(_events_path(calendar_id), params=params)
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise CalendarError(f"Failed to load calendar {calendar_id}: {exc}") from exc

    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise CalendarError(f"Calendar {calendar_id} returned no items")
    return items


def push_events(access_token: str, calendar_id: str, events: Sequence[Dict[str, Any]]) -> PushResult:
    """Insert events one at a time; a failed insert is logged and skipped.

    `created` holds the events as Google stored them, including the ids it assigned.
    """
    created: List[Dict[str, Any]] = []
    with _build_client(access_token) as client:
        for event in events:
            try:
                response = client.post(_events_path(calendar_id), json=event)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.warning("Failed to push event %r: %s", event.get("summary"), exc)
                continue
            try:
                stored = response.json()
            except ValueError:
                logger.warning("Pushed event %r but the insert response was not JSON", event.get("summary"))
                stored = None
            created.append({**event, **stored} if isinstance(stored, dict) else dict(event))
    return PushResult(pushed=len(created), total=len(events), created=created)
