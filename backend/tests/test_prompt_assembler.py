"""Tests for the outbound model request body."""
from __future__ import annotations

from datetime import date

from family_scheduler.services import prompt_assembler
from family_scheduler.services.prompt_assembler import (
    EMPTY_TURN_PLACEHOLDER,
    build_messages,
    build_request_body,
    build_system_prompt,
    calendar_context,
)

EVENTS = [
    {"id": "1", "summary": "Partner A: Dentist", "start": {"dateTime": "2026-03-05T10:00:00"}},
    {"id": "2", "summary": "Soccer", "start": {"dateTime": "2026-03-04T16:00:00"}},
]


def test_system_prompt_carries_date_names_and_markers() -> None:
    prompt = build_system_prompt(("Alex", "Sam"), today=date(2026, 3, 2))

    assert "Today is 2026-03-02" in prompt
    assert "Alex" in prompt and "Sam" in prompt
    assert "Partner A" not in prompt
    for marker in ("<SCHEDULE>", "</SCHEDULE>", "<SUMMARY>", "<GCAL_EVENTS>"):
        assert marker in prompt
    assert '{"date":"YYYY-MM-DD"' in prompt
    assert "America/New_York" in prompt


def test_calendar_context_lists_events_and_labels() -> None:
    context = calendar_context(EVENTS, {"2": "Sam"})

    assert context.startswith("CURRENT CALENDAR DATA:")
    assert "Soccer" in context
    assert "EVENT LABELS:" in context


def test_calendar_context_is_capped() -> None:
    context = calendar_context(EVENTS, None, limit=1)

    assert "Dentist" in context
    assert "Soccer" not in context
    assert "EVENT LABELS" not in context


def test_history_is_sent_verbatim_before_new_message() -> None:
    history = [
        {"role": "user", "content": "Plan next week"},
        {"role": "assistant", "content": "What matters most?"},
    ]

    messages = build_messages(history, "Mornings together", EVENTS)

    assert messages[:2] == history
    assert messages[-1]["role"] == "user"
    assert messages[-1]["content"].endswith("USER: Mornings together")
    assert "CURRENT CALENDAR DATA" in messages[-1]["content"]


def test_request_body_uses_configured_model(monkeypatch) -> None:
    monkeypatch.setattr(prompt_assembler.settings, "model_name", "test-model")
    monkeypatch.setattr(prompt_assembler.settings, "max_tokens", 321)

    body = build_request_body(
        history=[],
        user_message="Hi",
        events=[],
        partner_names=("Partner A", "Partner B"),
        today=date(2026, 3, 2),
    )

    assert body["model"] == "test-model"
    assert body["max_tokens"] == 321
    assert set(body) == {"model", "max_tokens", "system", "messages"}
    assert len(body["messages"]) == 1


def test_blank_assistant_turn_is_replaced_with_placeholder() -> None:
    history = [
        {"role": "user", "content": "Plan"},
        {"role": "assistant", "content": "  "},
    ]

    messages = build_messages(history, "Next", EVENTS)

    assert messages[1] == {"role": "assistant", "content": EMPTY_TURN_PLACEHOLDER}
