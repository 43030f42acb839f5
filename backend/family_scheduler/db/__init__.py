"""Database utilities and models."""

from family_scheduler.db.base import Base
from family_scheduler.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
