"""Split a raw model reply into tagged payload sections and user-facing prose."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

SCHEDULE_SECTION = "SCHEDULE"
SUMMARY_SECTION = "SUMMARY"
CALENDAR_PUSH_SECTION = "GCAL_EVENTS"

SECTION_NAMES: Tuple[str, ...] = (SCHEDULE_SECTION, SUMMARY_SECTION, CALENDAR_PUSH_SECTION)


@dataclass(frozen=True)
class Section:
    name: str
    body: str
    closed: bool


@dataclass
class ExtractedResponse:
    display_text: str
    sections: Dict[str, Section] = field(default_factory=dict)

    def get(self, name: str) -> Optional[Section]:
        return self.sections.get(name)


def open_marker(name: str) -> str:
    return f"<{name}>"


def close_marker(name: str) -> str:
    return f"</{name}>"


def extract_sections(raw: str, names: Sequence[str] = SECTION_NAMES) -> ExtractedResponse:
    """Locate every recognized section in `raw` and return bodies plus the leftover prose.

    A section whose closing marker is missing (truncated reply) runs to the next
    recognized opening marker or to the end of the text. Only the first occurrence
    of a name is kept, but every recognized span is cut from the display text.
    """
    text = raw or ""
    sections: Dict[str, Section] = {}
    spans: List[Tuple[int, int]] = []
    cursor = 0

    while True:
        found = _next_open_marker(text, names, cursor)
        if found is None:
            break
        name, open_start = found
        body_start = open_start + len(open_marker(name))
        close_at = text.find(close_marker(name), body_start)

        if close_at != -1:
            body = text[body_start:close_at]
            span_end = close_at + len(close_marker(name))
            closed = True
        else:
            following = _next_open_marker(text, names, body_start)
            span_end = following[1] if following else len(text)
            body = text[body_start:span_end]
            closed = False

        sections.setdefault(name, Section(name=name, body=body, closed=closed))
        spans.append((open_start, span_end))
        cursor = span_end

    return ExtractedResponse(display_text=_cut_spans(text, spans).strip(), sections=sections)


def _next_open_marker(text: str, names: Sequence[str], start: int) -> Optional[Tuple[str, int]]:
    best: Optional[Tuple[str, int]] = None
    for name in names:
        index = text.find(open_marker(name), start)
        if index != -1 and (best is None or index < best[1]):
            best = (name, index)
    return best


def _cut_spans(text: str, spans: List[Tuple[int, int]]) -> str:
    if not spans:
        return text
    pieces: List[str] = []
    previous_end = 0
    for start, end in spans:
        pieces.append(text[previous_end:start])
        previous_end = end
    pieces.append(text[previous_end:])
    return "".join(pieces)
