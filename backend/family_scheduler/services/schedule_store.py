"""Merge-by-date schedule store helpers."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from family_scheduler.api.schemas.schedule import ScheduleDay
from family_scheduler.db.models.conversation import Conversation

logger = logging.getLogger(__name__)


def merge_days(existing: Iterable[ScheduleDay], incoming: Iterable[ScheduleDay]) -> List[ScheduleDay]:
    """Union two day collections keyed by date; incoming days replace existing ones whole.

    The result is sorted ascending by the ISO date string. Neither input is modified.
    """
    by_date: Dict[str, ScheduleDay] = {day.date: day for day in existing}
    for day in incoming:
        by_date[day.date] = day
    return [by_date[key] for key in sorted(by_date)]


def load_days(conversation: Conversation) -> List[ScheduleDay]:
    """Return the conversation's stored days as canonical records."""
    days: List[ScheduleDay] = []
    for raw in conversation.schedule_days or []:
        try:
            days.append(ScheduleDay.model_validate(raw))
        except ValueError:
            logger.warning("Skipping unreadable stored schedule day: %r", raw)
    return days


def dump_days(days: Iterable[ScheduleDay]) -> List[Dict[str, Any]]:
    return [day.model_dump() for day in days]


def is_stale_turn(conversation: Conversation, turn_number: int) -> bool:
    """A turn older than the last merged one must not overwrite newer results."""
    return turn_number < (conversation.last_merged_turn or 0)


def apply_merge(conversation: Conversation, merged: List[ScheduleDay], turn_number: int) -> bool:
    """Store a merged snapshot unless the turn is stale. Returns whether it was stored."""
    if is_stale_turn(conversation, turn_number):
        logger.info(
            "Discarding schedule from stale turn %s (last merged turn %s)",
            turn_number,
            conversation.last_merged_turn,
        )
        return False
    conversation.schedule_days = dump_days(merged)
    conversation.last_merged_turn = turn_number
    return True
