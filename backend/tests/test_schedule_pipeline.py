"""End-to-end tests for turning a raw reply into display text and merged days."""
from __future__ import annotations

import json

from family_scheduler.api.schemas.schedule import ScheduleBlock, ScheduleDay
from family_scheduler.services.schedule_pipeline import TurnOutcome, process_model_reply

TRUNCATED_REPLY = (
    "Here's a draft for the first two days.\n"
    '<SCHEDULE>[{"date":"2026-03-02","label":"Mon Mar 2","blocks":[{"s":"07:00","e":"08:00","t":"Breakfast","w":"family"}]},'
    '{"date":"2026-03-03","label":"Tue Mar 3","blocks":[{"s":"18:00","e":"19:'
)


def test_reply_without_sections_keeps_store() -> None:
    existing = [ScheduleDay(date="2026-03-02", blocks=[ScheduleBlock(title="Breakfast")])]

    result = process_model_reply("  Sounds good, tell me more.  ", existing)

    assert result.outcome is TurnOutcome.NO_SCHEDULE
    assert result.display_text == "Sounds good, tell me more."
    assert result.days == existing
    assert result.switch_to_schedule_view is False


def test_well_formed_schedule_is_merged_and_stripped_from_display() -> None:
    days = [{"date": "2026-03-02", "label": "Mon Mar 2", "blocks": [{"s": "07:00", "e": "08:00", "t": "Breakfast", "w": "family"}]}]
    raw = f"Here you go.\n<SCHEDULE>{json.dumps(days)}</SCHEDULE>\nEnjoy!"

    result = process_model_reply(raw, [])

    assert result.outcome is TurnOutcome.MERGED
    assert result.recovered is False
    assert result.truncated is False
    assert "<SCHEDULE>" not in result.display_text
    assert result.days[0].blocks[0].title == "Breakfast"
    assert result.switch_to_schedule_view is True


def test_truncated_reply_recovers_complete_days() -> None:
    result = process_model_reply(TRUNCATED_REPLY, [])

    assert result.outcome is TurnOutcome.MERGED
    assert result.truncated is True
    assert result.recovered is True
    assert [day.date for day in result.days] == ["2026-03-02"]
    assert result.display_text == "Here's a draft for the first two days."


def test_missing_final_brackets_still_merges_day() -> None:
    raw = 'Draft:<SCHEDULE>[{"date":"2026-03-02","label":"Mon Mar 2","blocks":[{"s":"07:00","e":"08:00","t":"Breakfast","w":"family"}]'

    result = process_model_reply(raw, [])

    assert result.outcome is TurnOutcome.MERGED
    assert [day.date for day in result.days] == ["2026-03-02"]
    assert result.days[0].blocks[0].who == "family"


def test_unrecoverable_schedule_leaves_store_unchanged() -> None:
    existing = [ScheduleDay(date="2026-03-05", blocks=[ScheduleBlock(title="Dentist")])]

    result = process_model_reply('Oops <SCHEDULE>[{"date":"2026-03-0', existing)

    assert result.outcome is TurnOutcome.UNRECOVERABLE
    assert result.days == existing
    assert result.display_text == "Oops"
    assert result.switch_to_schedule_view is False


def test_two_sequential_turns_merge_by_date() -> None:
    first = process_model_reply(
        '<SCHEDULE>[{"date":"2026-03-02","blocks":[{"t":"Breakfast"}]},{"date":"2026-03-03","blocks":[{"t":"Dinner"}]}]</SCHEDULE>',
        [],
    )
    second = process_model_reply(
        '<SCHEDULE>[{"d":"2026-03-03","b":[{"t":"Takeout"}]},{"d":"2026-03-04","b":[{"t":"Soccer"}]}]</SCHEDULE>',
        first.days,
    )

    assert [day.date for day in second.days] == ["2026-03-02", "2026-03-03", "2026-03-04"]
    assert [day.blocks[0].title for day in second.days] == ["Breakfast", "Takeout", "Soccer"]
    assert [day.date for day in second.incoming_days] == ["2026-03-03", "2026-03-04"]
    assert [block.title for block in first.days[1].blocks] == ["Dinner"]


def test_summary_and_calendar_events_are_decoded() -> None:
    summary = {"week1": {"Alex": {"work": 45}}}
    events = [{"summary": "Breakfast", "start": {"dateTime": "2026-03-02T07:00:00"}, "end": {"dateTime": "2026-03-02T08:00:00"}}]
    raw = (
        "Pushing now."
        f"<SUMMARY>{json.dumps(summary)}</SUMMARY>"
        f"<GCAL_EVENTS>{json.dumps(events)}</GCAL_EVENTS>"
    )

    result = process_model_reply(raw, [])

    assert result.outcome is TurnOutcome.NO_SCHEDULE
    assert result.summary == summary
    assert result.calendar_events == events
    assert result.display_text == "Pushing now."


def test_bad_summary_is_ignored() -> None:
    result = process_model_reply("Hi <SUMMARY>not json</SUMMARY>", [])

    assert result.summary is None
    assert result.display_text == "Hi"


def test_truncated_reply_with_short_keys_recovers_complete_days() -> None:
    raw = 'Short keys.<SCHEDULE>[{"d":"2026-03-02","b":[{"t":"A"}]},{"d":"2026-03-03","b":[{"t'

    result = process_model_reply(raw, [])

    assert result.outcome is TurnOutcome.MERGED
    assert result.recovered is True
    assert [day.date for day in result.days] == ["2026-03-02"]
    assert result.days[0].blocks[0].title == "A"
