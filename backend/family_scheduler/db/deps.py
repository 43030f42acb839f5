"""FastAPI dependencies for database access."""
from __future__ import annotations

from typing import Iterator

from sqlalchemy.orm import Session


def get_db() -> Iterator[Session]:
    """Yield a session bound to the configured database and close it afterwards."""
    from family_scheduler.db.session import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
