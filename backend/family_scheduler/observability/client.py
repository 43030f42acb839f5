"""Opik SDK client helpers."""
from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Dict, Optional

from family_scheduler.core.config import settings

try:
    from opik import Opik
except ImportError:  # pragma: no cover
    Opik = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

_client: Optional["Opik"] = None
_client_lock = Lock()
_init_attempted = False


def opik_client_kwargs() -> Optional[Dict[str, Any]]:
    """Constructor arguments for the Opik client, or None when tracing is off."""
    if not settings.opik_enabled:
        return None
    if not settings.opik_api_key:
        logger.warning("OPIK_ENABLED is true but OPIK_API_KEY is missing; turns will not be traced.")
        return None
    kwargs: Dict[str, Any] = {"project_name": settings.opik_project, "api_key": settings.opik_api_key}
    if settings.opik_workspace:
        kwargs["workspace"] = settings.opik_workspace
    return kwargs


def init_opik() -> Optional["Opik"]:
    """Create the shared Opik client on first use; later calls return the cached result."""
    global _client, _init_attempted

    with _client_lock:
        if _init_attempted:
            return _client
        _init_attempted = True

        kwargs = opik_client_kwargs()
        if Opik is None or kwargs is None:
            return None
        try:
            _client = Opik(**kwargs)
        except Exception as exc:  # pragma: no cover - third-party init failure
            logger.warning("Failed to initialize Opik, tracing will be disabled: %s", exc)
            return None

    logger.info("Opik tracing enabled for project %s", kwargs["project_name"])
    return _client


def get_opik_client() -> Optional["Opik"]:
    return _client if _client is not None else init_opik()


def reset_opik_client() -> None:
    """Forget the cached client so the next call re-reads settings."""
    global _client, _init_attempted

    with _client_lock:
        _client = None
        _init_attempted = False
