"""Best-effort JSON decoding for model output that may be truncated mid-array.

Strict parsing is tried first. When that fails, the text is scanned for
top-level ``{...}`` objects and every object that parses on its own and carries
one of the identity fields is kept, in order. Broken objects are never
partially trusted: an object either parses whole or is dropped.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

STRATEGY_STRICT = "strict"
STRATEGY_RECOVERED = "recovered"
STRATEGY_FAILED = "failed"

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*(?:```)?$", re.DOTALL)


@dataclass
class DecodeResult:
    items: List[Dict[str, Any]] = field(default_factory=list)
    strategy: str = STRATEGY_FAILED
    discarded: int = 0

    @property
    def ok(self) -> bool:
        return bool(self.items)

    @property
    def recovered(self) -> bool:
        return self.strategy == STRATEGY_RECOVERED


def decode_array(text: str, identity_fields: Optional[Sequence[str]] = ("date",)) -> DecodeResult:
    """Decode a JSON array of objects, recovering complete objects from a broken stream.

    During recovery an object is kept only if it carries one of `identity_fields`.
    """
    candidate = strip_code_fence(text)
    if not candidate:
        return DecodeResult()

    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        parsed = None
    else:
        if isinstance(parsed, dict):
            parsed = [parsed]
        if isinstance(parsed, list):
            items = [item for item in parsed if isinstance(item, dict)]
            return DecodeResult(items=items, strategy=STRATEGY_STRICT, discarded=len(parsed) - len(items))

    items, discarded = _recover_objects(candidate, identity_fields)
    if items:
        logger.debug("Recovered %d object(s) from malformed JSON (%d discarded)", len(items), discarded)
        return DecodeResult(items=items, strategy=STRATEGY_RECOVERED, discarded=discarded)

    logger.warning("Unable to recover any object from %d characters of JSON", len(candidate))
    return DecodeResult(strategy=STRATEGY_FAILED, discarded=discarded)


def decode_object(text: str) -> DecodeResult:
    """Decode a single JSON object, falling back to the first complete object found."""
    candidate = strip_code_fence(text)
    if not candidate:
        return DecodeResult()

    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        parsed = None
    if isinstance(parsed, dict):
        return DecodeResult(items=[parsed], strategy=STRATEGY_STRICT)

    items, discarded = _recover_objects(candidate, None)
    if items:
        logger.debug("Recovered summary object from malformed JSON")
        return DecodeResult(items=items[:1], strategy=STRATEGY_RECOVERED, discarded=discarded)

    logger.warning("Unable to recover a JSON object from %d characters", len(candidate))
    return DecodeResult(strategy=STRATEGY_FAILED, discarded=discarded)


def strip_code_fence(text: str) -> str:
    stripped = (text or "").strip()
    if stripped.startswith("```"):
        match = _FENCE_RE.match(stripped)
        if match:
            return match.group(1).strip()
    return stripped


def _recover_objects(text: str, identity_fields: Optional[Sequence[str]]) -> Tuple[List[Dict[str, Any]], int]:
    kept: List[Dict[str, Any]] = []
    discarded = 0
    for snippet in _top_level_object_snippets(text):
        try:
            value = json.loads(snippet)
        except (json.JSONDecodeError, ValueError):
            discarded += 1
            continue
        if not isinstance(value, dict) or (identity_fields and not any(key in value for key in identity_fields)):
            discarded += 1
            continue
        kept.append(value)
    return kept, discarded


def _top_level_object_snippets(text: str) -> Iterator[str]:
    """Yield every brace-balanced top-level object, ignoring braces inside strings.

    If the text ends inside a top-level object whose last member value was a
    closed array or object, and nothing but that object's own closing brace is
    missing, the object is closed and yielded as well.
    """
    stack: List[str] = []
    start: Optional[int] = None
    in_string = False
    escaped = False
    last_significant = ""

    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
                last_significant = char
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            if not stack:
                start = index
            stack.append(char)
        elif char == "[":
            if stack:
                stack.append(char)
        elif char in ("}", "]") and stack:
            stack.pop()
            if not stack:
                if char == "}" and start is not None:
                    yield text[start : index + 1]
                start = None
        if not char.isspace():
            last_significant = char

    if start is not None and not in_string and stack == ["{"] and last_significant in ("}", "]"):
        yield text[start:].rstrip() + "}"
