"""Map loosely keyed day/block records from the model onto the canonical schedule schema."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from family_scheduler.api.schemas.schedule import ScheduleBlock, ScheduleDay

logger = logging.getLogger(__name__)

BLOCK_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "start": ("start", "s"),
    "end": ("end", "e"),
    "title": ("title", "t"),
    "who": ("who", "w"),
    "note": ("note", "n"),
}

DAY_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "date": ("date", "d"),
    "label": ("label", "l"),
    "blocks": ("blocks", "b"),
}


class WhoRole(str, Enum):
    PARTNER_A = "partner_a"
    PARTNER_B = "partner_b"
    FAMILY = "family"
    SPLIT = "split"
    ALTERNATE = "alternate"
    WORK = "work"
    EXERCISE = "exercise"
    KIDS = "kids"
    CHORES = "chores"
    FREE = "free"
    OTHER = "other"


# Google Calendar colorId per role; roles without an entry render with the default colour.
ROLE_COLOR_IDS: Dict[WhoRole, str] = {
    WhoRole.PARTNER_A: "1",
    WhoRole.PARTNER_B: "2",
    WhoRole.FAMILY: "3",
    WhoRole.KIDS: "4",
    WhoRole.CHORES: "5",
    WhoRole.EXERCISE: "10",
}

_ROLE_TOKENS = {role.value: role for role in WhoRole if role is not WhoRole.OTHER}
_ROLE_TOKENS.update({"a": WhoRole.PARTNER_A, "b": WhoRole.PARTNER_B, "both": WhoRole.FAMILY})


def normalize_days(raw_days: Iterable[Any]) -> List[ScheduleDay]:
    """Normalize decoded day records, dropping any that lack a date."""
    days: List[ScheduleDay] = []
    for raw in raw_days:
        day = normalize_day(raw)
        if day is None:
            logger.debug("Dropping schedule day without a date: %r", raw)
            continue
        days.append(day)
    return days


def normalize_day(raw: Any) -> Optional[ScheduleDay]:
    if not isinstance(raw, dict):
        return None
    date_value = _as_text(_pick(raw, DAY_FIELD_ALIASES["date"]))
    if not date_value:
        return None
    raw_blocks = _pick(raw, DAY_FIELD_ALIASES["blocks"])
    if not isinstance(raw_blocks, list):
        raw_blocks = []
    return ScheduleDay(
        date=date_value.strip(),
        label=_as_text(_pick(raw, DAY_FIELD_ALIASES["label"])),
        blocks=[normalize_block(block) for block in raw_blocks],
    )


def normalize_block(raw: Any) -> ScheduleBlock:
    """Resolve every canonical block field from its long or short key; missing fields become ""."""
    source = raw if isinstance(raw, dict) else {}
    return ScheduleBlock(**{name: _as_text(_pick(source, aliases)) for name, aliases in BLOCK_FIELD_ALIASES.items()})


def classify_who(token: str, partner_names: Sequence[str] = ()) -> WhoRole:
    """Map a raw `who` token to a known role, or OTHER. The token itself is never rewritten."""
    lowered = (token or "").strip().lower()
    if not lowered:
        return WhoRole.OTHER
    names = [name.strip().lower() for name in partner_names]
    if len(names) > 0 and names[0] and lowered == names[0]:
        return WhoRole.PARTNER_A
    if len(names) > 1 and names[1] and lowered == names[1]:
        return WhoRole.PARTNER_B
    return _ROLE_TOKENS.get(lowered, WhoRole.OTHER)


def color_for_role(role: WhoRole) -> Optional[str]:
    return ROLE_COLOR_IDS.get(role)


def _pick(record: Dict[str, Any], aliases: Tuple[str, ...]) -> Any:
    for key in aliases:
        if key in record and record[key] is not None:
            return record[key]
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return ""
