"""Tests for the Google Calendar REST adapter."""
from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from family_scheduler.services import google_calendar
from family_scheduler.services.google_calendar import CalendarError


def _install(monkeypatch, handler) -> list[httpx.Request]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    monkeypatch.setattr(
        google_calendar,
        "_build_client",
        lambda token: httpx.Client(
            base_url="https://calendar.test/v3",
            headers={"Authorization": f"Bearer {token}"},
            transport=httpx.MockTransport(recording),
        ),
    )
    return seen


def test_fetch_events_sends_window_query(monkeypatch) -> None:
    seen = _install(monkeypatch, lambda request: httpx.Response(200, json={"items": [{"id": "a", "summary": "Dentist"}]}))

    items = google_calendar.fetch_events("tok", "family@group.calendar.google.com", datetime(2026, 3, 2, tzinfo=timezone.utc))

    assert items == [{"id": "a", "summary": "Dentist"}]
    request = seen[0]
    assert request.url.path == "/v3/calendars/family@group.calendar.google.com/events"
    assert request.url.params["maxResults"] == "100"
    assert request.url.params["orderBy"] == "startTime"
    assert request.url.params["singleEvents"] == "true"
    assert request.url.params["timeMin"].startswith("2026-03-02T00:00:00")
    assert request.headers["Authorization"] == "Bearer tok"


def test_fetch_events_raises_on_auth_failure(monkeypatch) -> None:
    _install(monkeypatch, lambda request: httpx.Response(401, json={"error": {"message": "Invalid Credentials"}}))

    with pytest.raises(CalendarError):
        google_calendar.fetch_events("expired", "primary", datetime(2026, 3, 2, tzinfo=timezone.utc))


def test_fetch_events_requires_items(monkeypatch) -> None:
    _install(monkeypatch, lambda request: httpx.Response(200, json={"kind": "calendar#events"}))

    with pytest.raises(CalendarError):
        google_calendar.fetch_events("tok", "primary", datetime(2026, 3, 2, tzinfo=timezone.utc))


def test_push_events_skips_failures(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        event = json.loads(request.content)
        if event["summary"] == "Gym":
            return httpx.Response(400, json={"error": {"message": "Bad colorId"}})
        return httpx.Response(200, json={**event, "id": f"gcal-{event['summary'].lower()}", "status": "confirmed"})

    seen = _install(monkeypatch, handler)
    events = [{"summary": "Breakfast"}, {"summary": "Gym"}, {"summary": "Bedtime"}]

    result = google_calendar.push_events("tok", "primary", events)

    assert len(seen) == 3
    assert all(request.method == "POST" for request in seen)
    assert result.pushed == 2
    assert result.total == 3
    assert [event["summary"] for event in result.created] == ["Breakfast", "Bedtime"]
    assert [event["id"] for event in result.created] == ["gcal-breakfast", "gcal-bedtime"]
    assert result.created[0]["status"] == "confirmed"


def test_push_events_keeps_event_when_insert_reply_is_not_json(monkeypatch) -> None:
    _install(monkeypatch, lambda request: httpx.Response(200, text="ok"))

    result = google_calendar.push_events("tok", "primary", [{"summary": "Breakfast"}])

    assert result.pushed == 1
    assert result.created == [{"summary": "Breakfast"}]
