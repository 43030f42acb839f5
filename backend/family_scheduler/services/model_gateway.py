"""Thin forwarding client for the upstream Messages API."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from family_scheduler.core.config import settings

logger = logging.getLogger(__name__)

RAW_SNIPPET_CHARS = 200


@dataclass
class UpstreamResult:
    status_code: int
    payload: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300 and "error" not in self.payload


def _build_client() -> httpx.Client:
    return httpx.Client(base_url=settings.anthropic_base_url, timeout=settings.upstream_timeout_seconds)


def forward_messages(body: bytes | str) -> UpstreamResult:
    """Forward a request body verbatim and wrap the upstream answer.

    Never raises: missing credentials, transport failures, non-2xx statuses and
    unparseable bodies all come back as an error envelope with a status code.
    """
    api_key = settings.anthropic_api_key
    if not api_key:
        logger.error("ANTHROPIC_API_KEY not set; refusing to forward model request")
        return UpstreamResult(500, {"error": "ANTHROPIC_API_KEY not set"})

    content = body.encode("utf-8") if isinstance(body, str) else body
    headers = {
        "Content-Type": "application/json",
        "x-api-key": api_key,
        "anthropic-version": settings.anthropic_version,
    }

    try:
        with _build_client() as client:
            response = client.post("/v1/messages", content=content, headers=headers)
    except httpx.TimeoutException as exc:
        logger.warning("Upstream model request timed out after %ss", settings.upstream_timeout_seconds)
        return UpstreamResult(500, {"error": f"Upstream request timed out: {exc}"})
    except httpx.HTTPError as exc:
        logger.warning("Upstream model request failed: %s", exc)
        return UpstreamResult(500, {"error": str(exc)})

    raw = response.text
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Upstream returned non-JSON body (status=%s)", response.status_code)
        return UpstreamResult(500, {"error": "Bad JSON from Anthropic", "raw": raw[:RAW_SNIPPET_CHARS]})

    if not 200 <= response.status_code < 300:
        logger.warning("Upstream returned status %s", response.status_code)
        return UpstreamResult(response.status_code, {"error": "Anthropic error", "details": parsed})

    if not isinstance(parsed, dict):
        return UpstreamResult(500, {"error": "Bad JSON from Anthropic", "raw": raw[:RAW_SNIPPET_CHARS]})
    return UpstreamResult(response.status_code, parsed)


def send_request(request_body: Dict[str, Any]) -> UpstreamResult:
    return forward_messages(json.dumps(request_body))


def reply_text(payload: Dict[str, Any]) -> Optional[str]:
    """First text block of a Messages API response, if any."""
    content = payload.get("content")
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    if not isinstance(first, dict):
        return None
    text = first.get("text")
    return text if isinstance(text, str) and text else None
