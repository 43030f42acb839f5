"""Tests for splitting model replies into tagged sections."""
from __future__ import annotations

from family_scheduler.services.tag_extractor import (
    CALENDAR_PUSH_SECTION,
    SCHEDULE_SECTION,
    SUMMARY_SECTION,
    extract_sections,
)

DAY_JSON = '[{"date":"2026-03-02","label":"Mon Mar 2","blocks":[{"s":"07:00","e":"08:00","t":"Breakfast","w":"family"}]}]'


def test_schedule_section_removed_from_display_text() -> None:
    raw = f"Here you go.\n<SCHEDULE>{DAY_JSON}</SCHEDULE>\nEnjoy!"

    extracted = extract_sections(raw)

    assert extracted.display_text == "Here you go.\n\nEnjoy!"
    section = extracted.get(SCHEDULE_SECTION)
    assert section is not None
    assert section.body == DAY_JSON
    assert section.closed is True


def test_absent_sections_are_not_errors() -> None:
    extracted = extract_sections("  Who is doing bedtime tonight?  ")

    assert extracted.sections == {}
    assert extracted.display_text == "Who is doing bedtime tonight?"


def test_unclosed_section_runs_to_end_of_text() -> None:
    raw = 'Plan below\n<SCHEDULE>[{"date":"2026-03-02","blocks":[]}'

    extracted = extract_sections(raw)

    section = extracted.get(SCHEDULE_SECTION)
    assert section is not None
    assert section.closed is False
    assert section.body == '[{"date":"2026-03-02","blocks":[]}'
    assert extracted.display_text == "Plan below"


def test_multiple_sections_are_all_extracted() -> None:
    raw = (
        "Balanced it out.\n"
        f"<SCHEDULE>{DAY_JSON}</SCHEDULE>\n"
        '<SUMMARY>{"week1":{}}</SUMMARY>\n'
        '<GCAL_EVENTS>[{"summary":"Gym"}]</GCAL_EVENTS>'
    )

    extracted = extract_sections(raw)

    assert set(extracted.sections) == {SCHEDULE_SECTION, SUMMARY_SECTION, CALENDAR_PUSH_SECTION}
    assert extracted.get(SUMMARY_SECTION).body == '{"week1":{}}'
    assert extracted.display_text == "Balanced it out."


def test_unclosed_section_stops_at_next_recognized_marker() -> None:
    raw = '<SUMMARY>{"week1":<SCHEDULE>[]</SCHEDULE> tail'

    extracted = extract_sections(raw)

    assert extracted.get(SUMMARY_SECTION).body == '{"week1":'
    assert extracted.get(SUMMARY_SECTION).closed is False
    assert extracted.get(SCHEDULE_SECTION).body == "[]"
    assert extracted.display_text == "tail"


def test_only_first_occurrence_kept_but_all_spans_stripped() -> None:
    raw = "a <SCHEDULE>[1]</SCHEDULE> b <SCHEDULE>[2]</SCHEDULE> c"

    extracted = extract_sections(raw)

    assert extracted.get(SCHEDULE_SECTION).body == "[1]"
    assert "SCHEDULE" not in extracted.display_text
    assert extracted.display_text == "a  b  c"


def test_unrecognized_tags_are_left_alone() -> None:
    extracted = extract_sections("<NOTES>keep me</NOTES>", names=(SCHEDULE_SECTION,))

    assert extracted.sections == {}
    assert extracted.display_text == "<NOTES>keep me</NOTES>"
