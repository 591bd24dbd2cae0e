"""Key-value persistence for the latest plan and calendar checks."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol

from sqlalchemy.orm import Session

from profitbot.db.models.kv_entry import KeyValueEntry
from profitbot.services.plan_normalizer import Plan, normalize_plan

logger = logging.getLogger(__name__)

LATEST_PLAN_KEY = "latest-plan"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryStore:
    """Dictionary-backed store used by tests and scripts."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class SqlKeyValueStore:
    """Store rows in the ``kv_entries`` table; every write commits immediately."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, key: str) -> Optional[str]:
        entry = self.db.get(KeyValueEntry, key)
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        entry = self.db.get(KeyValueEntry, key)
        if entry:
            entry.value = value
        else:
            self.db.add(KeyValueEntry(key=key, value=value))
        self._commit()

    def remove(self, key: str) -> None:
        entry = self.db.get(KeyValueEntry, key)
        if not entry:
            return
        self.db.delete(entry)
        self._commit()

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


def plan_from_payload(payload: Dict[str, Any]) -> Plan:
    return normalize_plan(payload, idea_fallback=str(payload.get("idea") or ""))


class PlanRepository:
    """The single ``latest-plan`` slot: overwritten by each generation, removed by clear."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load_payload(self) -> Optional[Dict[str, Any]]:
        """The stored plan object as written, before normalization."""
        raw = self.store.get(LATEST_PLAN_KEY)
        if not raw:
            return None
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning("Stored plan is not valid JSON; ignoring it.")
            return None
        if not isinstance(payload, dict):
            return None
        return payload

    def load_latest(self) -> Optional[Plan]:
        payload = self.load_payload()
        return plan_from_payload(payload) if payload is not None else None

    def save_latest(self, plan: Plan) -> None:
        self.store.set(LATEST_PLAN_KEY, json.dumps(plan.to_payload()))

    def clear(self) -> None:
        self.store.remove(LATEST_PLAN_KEY)
