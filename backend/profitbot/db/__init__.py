"""Database utilities and models."""

from profitbot.db.base import Base
from profitbot.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
