"""FastAPI dependencies for database access."""
from __future__ import annotations

from typing import Iterator

from fastapi import Depends
from sqlalchemy.orm import Session

from profitbot.db.session import SessionLocal
from profitbot.services.plan_store import SqlKeyValueStore


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> SqlKeyValueStore:
    """Key-value store bound to the request's session."""
    return SqlKeyValueStore(db)
