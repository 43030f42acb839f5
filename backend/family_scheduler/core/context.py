"""Per-request context utilities."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
conversation_id_ctx_var: ContextVar[str | None] = ContextVar("conversation_id", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


def get_conversation_id() -> str | None:
    """Return the conversation currently being served, if any."""
    return conversation_id_ctx_var.get()


@contextmanager
def conversation_scope(conversation_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with a conversation id."""
    token = conversation_id_ctx_var.set(conversation_id)
    try:
        yield
    finally:
        conversation_id_ctx_var.reset(token)
