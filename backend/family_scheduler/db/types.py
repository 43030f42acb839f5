"""Database column type helpers."""
from __future__ import annotations

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON, TypeDecorator


class PortableJSON(TypeDecorator):
    """JSON column stored as JSONB on PostgreSQL and as plain JSON elsewhere (SQLite in tests).

    Values held in these columns are replaced wholesale, never mutated in place,
    so no mutation tracking is attached.
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":  # pragma: no cover - dialect specific
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())
