"""Engine and session factory for the local store."""
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from profitbot.core.config import settings

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=_connect_args, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_db() -> None:
    """Create missing tables; the store has a single table so no migrations run here."""
    from profitbot.db.base import Base
    from profitbot.db import models  # noqa: F401  (register models on the metadata)

    Base.metadata.create_all(bind=engine)
