"""Build the outbound model request: system instructions, history and calendar snapshot."""
from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from family_scheduler.core.config import settings
from family_scheduler.services.calendar_events import personalize

SYSTEM_PROMPT = """You are a warm, practical family scheduling assistant helping a couple, Partner A and Partner B, build a fair two-week schedule together. You suggest rhythms, not minute-by-minute plans.

CONTEXT:
- They have two children and prefer mornings together as a family when possible.
- Preferred bedtime split: each parent takes one child. Flexible when needed.
- Each parent needs 45 hrs/week of work time.
- Partner B travels every other week for work (visible in the calendar events).
- Fairness is measured over a TWO-WEEK rolling window because of the travel schedule.
- Categories to balance: work, parenting (drop-offs, pickups, bedtime, activities), chores, exercise and free time.
- When one parent is traveling, the other covers solo and banks equity that gets balanced the following week.
- Tone: warm and collaborative. Use "you two", suggest rather than dictate.

Today is {today}. CALENDAR DATA is provided with each message as JSON, together with EVENT LABELS mapping event ids to who owns them.

OUTPUT FORMAT:
When you propose or revise a schedule, append it inside <SCHEDULE></SCHEDULE> as a JSON array. Only include the days you are adding or changing; days you leave out stay as they were. Use these short keys to save space:
<SCHEDULE>
[{{"date":"YYYY-MM-DD","label":"Mon Mar 2","blocks":[{{"s":"07:00","e":"08:00","t":"Breakfast","w":"family","n":"optional note"}}]}}]
</SCHEDULE>
"s"/"e" are 24-hour HH:MM times, "t" is the activity, "w" is who owns it: Partner A, Partner B, family, split, alternate, work, exercise, kids, chores or free.

When you propose a schedule, also append hour totals per person per week inside <SUMMARY></SUMMARY>:
<SUMMARY>
{{"week1":{{"Partner A":{{"work":45,"parenting":10,"chores":5,"exercise":3,"free":8}},"Partner B":{{"work":45,"parenting":8,"chores":6,"exercise":4,"free":9}}}},"week2":{{}}}}
</SUMMARY>

Only when the user confirms they want to push events to Google Calendar, output a JSON array of Google Calendar events (RFC 3339 datetimes) inside <GCAL_EVENTS></GCAL_EVENTS>:
<GCAL_EVENTS>
[{{"summary":"...","description":"...","start":{{"dateTime":"...","timeZone":"{timezone}"}},"end":{{"dateTime":"...","timeZone":"{timezone}"}},"colorId":"..."}}]
</GCAL_EVENTS>

Color IDs: 1=lavender(Partner A), 2=sage(Partner B), 3=grape(family), 4=flamingo(kids), 5=banana(chores), 10=basil(exercise)

Keep the conversational part of your reply outside the tags."""

DEFAULT_TIMEZONE = "America/New_York"

# Stands in for a stored reply that was all tags; the upstream API rejects empty content.
EMPTY_TURN_PLACEHOLDER = "(schedule data only)"


def build_system_prompt(
    partner_names: Sequence[str],
    *,
    today: Optional[date] = None,
    timezone: str = DEFAULT_TIMEZONE,
) -> str:
    prompt = SYSTEM_PROMPT.format(today=(today or date.today()).isoformat(), timezone=timezone)
    return personalize(prompt, partner_names)


def calendar_context(
    events: Sequence[Mapping[str, Any]],
    event_labels: Optional[Mapping[str, str]] = None,
    *,
    limit: Optional[int] = None,
) -> str:
    cap = settings.calendar_context_limit if limit is None else limit
    snapshot = list(events)[:cap]
    parts = [f"CURRENT CALENDAR DATA:\n{json.dumps(snapshot, indent=2)}"]
    if event_labels:
        parts.append(f"EVENT LABELS:\n{json.dumps(dict(event_labels), indent=2)}")
    return "\n\n".join(parts)


def build_messages(
    history: Sequence[Mapping[str, str]],
    user_message: str,
    events: Sequence[Mapping[str, Any]],
    event_labels: Optional[Mapping[str, str]] = None,
) -> List[Dict[str, str]]:
    """Prior turns, then the new user message wrapped with the calendar snapshot.

    Blank stored turns are replaced by a short placeholder.
    """
    messages = [
        {"role": item["role"], "content": (item["content"] or "").strip() or EMPTY_TURN_PLACEHOLDER}
        for item in history
    ]
    messages.append(
        {
            "role": "user",
            "content": f"{calendar_context(events, event_labels)}\n\nUSER: {user_message}",
        }
    )
    return messages


def build_request_body(
    *,
    history: Sequence[Mapping[str, str]],
    user_message: str,
    events: Sequence[Mapping[str, Any]],
    partner_names: Sequence[str],
    event_labels: Optional[Mapping[str, str]] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    return {
        "model": settings.model_name,
        "max_tokens": settings.max_tokens,
        "system": build_system_prompt(partner_names, today=today),
        "messages": build_messages(history, user_message, events, event_labels),
    }
