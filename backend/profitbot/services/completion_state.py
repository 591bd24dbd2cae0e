"""Per-plan task completion flags for the calendar view.

Flags are keyed by a coarse plan identity (the plan id, else its idea) rather
than by plan content, so regenerating the same idea keeps earlier checkmarks
while a different idea starts from an empty slate.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from profitbot.services.plan_normalizer import Plan
from profitbot.services.plan_store import KeyValueStore

logger = logging.getLogger(__name__)

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
IDENTITY_PREFIX = "plan_"
CHECKS_NAMESPACE = "calendar-checks:v1"


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a over the UTF-16 code units of ``text``."""
    encoded = text.encode("utf-16-le", "surrogatepass")
    value = FNV_OFFSET_BASIS
    for idx in range(0, len(encoded), 2):
        value ^= encoded[idx] | (encoded[idx + 1] << 8)
        value = (value * FNV_PRIME) & 0xFFFFFFFF
    return value


def plan_identity(plan: Plan | Mapping[str, Any] | None) -> str:
    if isinstance(plan, Plan):
        candidates = (plan.id, plan.idea)
    elif isinstance(plan, Mapping):
        candidates = (plan.get("id"), plan.get("idea"))
    else:
        candidates = ()
    base = next((value for value in candidates if isinstance(value, str) and value), "latest")
    return f"{IDENTITY_PREFIX}{fnv1a_32(base):x}"


def checks_key(identity: str) -> str:
    return f"{CHECKS_NAMESPACE}:{identity}"


def task_key(day: int, task_index: int) -> str:
    return f"d{day}_t{task_index}"


class CompletionStateManager:
    """Holds the check mapping for one plan identity and writes it through on every change."""

    def __init__(self, store: KeyValueStore, identity: str) -> None:
        self.store = store
        self.identity = identity
        self._checks: Dict[str, bool] = {}

    @property
    def storage_key(self) -> str:
        return checks_key(self.identity)

    @property
    def checks(self) -> Dict[str, bool]:
        return dict(self._checks)

    def load(self) -> Dict[str, bool]:
        self._checks = self._read()
        return self.checks

    def is_done(self, day: int, task_index: int) -> bool:
        return self._checks.get(task_key(day, task_index), False)

    def toggle(self, day: int, task_index: int) -> bool:
        key = task_key(day, task_index)
        updated = not self._checks.get(key, False)
        self._checks[key] = updated
        self.store.set(self.storage_key, json.dumps(self._checks))
        return updated

    def reset(self) -> None:
        self._checks = {}
        self.store.remove(self.storage_key)

    def _read(self) -> Dict[str, bool]:
        raw: Optional[str] = self.store.get(self.storage_key)
        if not raw:
            return {}
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable completion state for %s", self.identity)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(key): value for key, value in payload.items() if isinstance(value, bool)}
