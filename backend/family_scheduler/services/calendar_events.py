"""Calendar event helpers: day membership, the two-week window and ownership labels."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Sequence

WINDOW_DAYS = 14

COLOR_LABELS: Dict[str, str] = {
    "1": "Partner A",
    "2": "Partner B",
    "3": "Family",
    "4": "Kids",
    "5": "Chores",
    "10": "Exercise",
}

DEMO_CALENDAR_EVENTS: List[Dict[str, Any]] = [
    {"id": "1", "summary": "Partner B: Work Travel (Chicago)", "start": {"date": "2026-03-02"}, "end": {"date": "2026-03-06"}, "colorId": "2"},
    {"id": "2", "summary": "Partner A: School Drop-off", "start": {"dateTime": "2026-03-02T08:00:00"}, "end": {"dateTime": "2026-03-02T08:30:00"}, "colorId": "4"},
    {"id": "3", "summary": "Partner B: School Drop-off", "start": {"dateTime": "2026-03-09T08:00:00"}, "end": {"dateTime": "2026-03-09T08:30:00"}, "colorId": "4"},
    {"id": "4", "summary": "Soccer Practice - Liam", "start": {"dateTime": "2026-03-04T16:00:00"}, "end": {"dateTime": "2026-03-04T17:30:00"}, "colorId": "4"},
    {"id": "5", "summary": "Partner A: Dentist", "start": {"dateTime": "2026-03-05T10:00:00"}, "end": {"dateTime": "2026-03-05T11:00:00"}, "colorId": "1"},
    {"id": "6", "summary": "Family Dinner (Grandma)", "start": {"dateTime": "2026-03-07T18:00:00"}, "end": {"dateTime": "2026-03-07T21:00:00"}, "colorId": "3"},
    {"id": "7", "summary": "Partner B: Work Travel (NYC)", "start": {"date": "2026-03-16"}, "end": {"date": "2026-03-20"}, "colorId": "2"},
    {"id": "8", "summary": "Piano Recital - Ella", "start": {"dateTime": "2026-03-14T14:00:00"}, "end": {"dateTime": "2026-03-14T15:30:00"}, "colorId": "4"},
    {"id": "9", "summary": "Partner A: Book Club", "start": {"dateTime": "2026-03-11T19:00:00"}, "end": {"dateTime": "2026-03-11T21:00:00"}, "colorId": "1"},
    {"id": "10", "summary": "Groceries", "start": {"dateTime": "2026-03-08T10:00:00"}, "end": {"dateTime": "2026-03-08T11:30:00"}, "colorId": "5"},
]


def window_start(today: date) -> date:
    """Monday of the week containing `today`; Sunday belongs to the week before."""
    return today - timedelta(days=today.weekday())


def two_week_window(today: date) -> List[date]:
    start = window_start(today)
    return [start + timedelta(days=offset) for offset in range(WINDOW_DAYS)]


def occurs_on(event: Mapping[str, Any], day: date) -> bool:
    """Whether the event falls on `day`.

    All-day events span [start.date, end.date) with an exclusive end. Timed
    events belong to the calendar date of their start.
    """
    day_str = day.isoformat()
    start = event.get("start") or {}
    end = event.get("end") or {}

    start_date = start.get("date")
    if start_date:
        end_date = end.get("date")
        if not end_date:
            return day_str == start_date
        return start_date <= day_str < end_date

    start_time = start.get("dateTime")
    if not start_time:
        return False
    return str(start_time).split("T", 1)[0] == day_str


def events_for_day(events: Sequence[Mapping[str, Any]], day: date) -> List[Mapping[str, Any]]:
    return [event for event in events if occurs_on(event, day)]


def bucket_events(events: Sequence[Mapping[str, Any]], days: Sequence[date]) -> Dict[str, List[Mapping[str, Any]]]:
    return {day.isoformat(): events_for_day(events, day) for day in days}


def event_label(
    event: Mapping[str, Any],
    event_labels: Optional[Mapping[str, str]] = None,
    partner_names: Sequence[str] = ("Partner A", "Partner B"),
) -> Optional[str]:
    """Ownership tag for an event: an explicit label wins over the colour table."""
    event_id = event.get("id")
    if event_labels and event_id is not None and event_labels.get(str(event_id)):
        return event_labels[str(event_id)]
    label = COLOR_LABELS.get(str(event.get("colorId") or ""))
    if label is None:
        return None
    return personalize(label, partner_names)


def personalize(text: str, partner_names: Sequence[str]) -> str:
    """Swap the generic partner placeholders for the household's names."""
    partner_a, partner_b = (list(partner_names) + ["Partner A", "Partner B"])[:2]
    return text.replace("Partner A", partner_a).replace("Partner B", partner_b)
