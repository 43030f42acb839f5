"""Turn a raw model reply into display text, schedule days, summary and push events."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from family_scheduler.api.schemas.schedule import ScheduleDay
from family_scheduler.services.json_recovery import DecodeResult, decode_array, decode_object
from family_scheduler.services.schedule_normalizer import DAY_FIELD_ALIASES, normalize_days
from family_scheduler.services.schedule_store import merge_days
from family_scheduler.services.tag_extractor import (
    CALENDAR_PUSH_SECTION,
    SCHEDULE_SECTION,
    SUMMARY_SECTION,
    extract_sections,
)

logger = logging.getLogger(__name__)


class TurnOutcome(str, Enum):
    NO_SCHEDULE = "no_schedule"
    MERGED = "merged"
    UNRECOVERABLE = "unrecoverable"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class PipelineResult:
    display_text: str
    outcome: TurnOutcome
    days: List[ScheduleDay] = field(default_factory=list)
    incoming_days: List[ScheduleDay] = field(default_factory=list)
    recovered: bool = False
    truncated: bool = False
    summary: Optional[Dict[str, Any]] = None
    calendar_events: Optional[List[Dict[str, Any]]] = None

    @property
    def switch_to_schedule_view(self) -> bool:
        return self.outcome is TurnOutcome.MERGED


def process_model_reply(raw: str, existing_days: Sequence[ScheduleDay]) -> PipelineResult:
    """Run extraction, decoding, normalization and merge for one reply.

    `existing_days` is a snapshot and is never modified. When no valid day is
    recovered the returned `days` equal the existing snapshot.
    """
    extracted = extract_sections(raw)
    existing = list(existing_days)
    result = PipelineResult(
        display_text=extracted.display_text,
        outcome=TurnOutcome.NO_SCHEDULE,
        days=merge_days(existing, []),
    )

    schedule_section = extracted.get(SCHEDULE_SECTION)
    if schedule_section is not None:
        result.truncated = not schedule_section.closed
        decoded = decode_array(schedule_section.body, identity_fields=DAY_FIELD_ALIASES["date"])
        incoming = normalize_days(decoded.items)
        if incoming:
            result.outcome = TurnOutcome.MERGED
            result.incoming_days = incoming
            result.recovered = decoded.recovered
            result.days = merge_days(existing, incoming)
            if decoded.recovered:
                logger.debug("Schedule section recovered %d day(s) from a malformed payload", len(incoming))
        else:
            result.outcome = TurnOutcome.UNRECOVERABLE
            logger.warning(
                "Schedule section present but no valid day recovered (strategy=%s, discarded=%d)",
                decoded.strategy,
                decoded.discarded,
            )

    summary_section = extracted.get(SUMMARY_SECTION)
    if summary_section is not None:
        result.summary = _first_item(decode_object(summary_section.body))

    push_section = extracted.get(CALENDAR_PUSH_SECTION)
    if push_section is not None:
        decoded_events = decode_array(push_section.body, identity_fields=("summary",))
        if decoded_events.ok:
            result.calendar_events = decoded_events.items
        else:
            logger.warning("Calendar push section present but no event could be decoded")

    return result


def _first_item(decoded: DecodeResult) -> Optional[Dict[str, Any]]:
    return decoded.items[0] if decoded.items else None
