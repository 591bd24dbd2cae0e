"""Coerce untrusted plan payloads into the canonical three-step Plan.

Everything the generator returns, and everything read back from the store,
passes through :func:`normalize_plan`. It is the only place allowed to poke at
ad hoc keys on a raw payload; the rest of the service works on :class:`Plan`.
"""
from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

PLAN_STEP_COUNT = 3
MAX_GENERATED_DAYS = 14

# alias on the wire -> attribute on PlanInputs
INPUT_FIELDS: Dict[str, str] = {
    "targetCustomer": "target_customer",
    "coreOffer": "core_offer",
    "differentiator": "differentiator",
    "pricePoint": "price_point",
    "geography": "geography",
    "goal14Day": "goal_14_day",
    "notes": "notes",
}

# Alternate step keys some model replies use, in precedence order.
STEP_KEY_ALIASES: Dict[str, tuple[str, ...]] = {
    "whatThisDoes": ("whatThisDoes", "what", "explain"),
    "howTo": ("howTo", "how_to", "checklist"),
    "output": ("output", "deliverable"),
}

_BULLET_MARKER = re.compile(r"^\s*[-•\d.)]+\s*")


class PlanInputs(BaseModel):
    """Optional business context typed in next to the idea."""

    model_config = ConfigDict(populate_by_name=True)

    target_customer: str = Field(default="", alias="targetCustomer")
    core_offer: str = Field(default="", alias="coreOffer")
    differentiator: str = ""
    price_point: str = Field(default="", alias="pricePoint")
    geography: str = ""
    goal_14_day: str = Field(default="", alias="goal14Day")
    notes: str = ""


class PlanStep(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    summary: str = ""
    what_this_does: List[str] = Field(default_factory=list, alias="whatThisDoes")
    how_to: List[str] = Field(default_factory=list, alias="howTo")
    output: str = ""


class GeneratedCalendarDay(BaseModel):
    """Calendar entry as proposed by the generator; kept for reference only."""

    day: int
    title: str
    tasks: List[str] = Field(default_factory=list)


class Plan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: str = Field(alias="createdAt")
    idea: str
    inputs: PlanInputs = Field(default_factory=PlanInputs)
    steps: List[PlanStep] = Field(min_length=PLAN_STEP_COUNT, max_length=PLAN_STEP_COUNT)
    calendar_days: Optional[List[GeneratedCalendarDay]] = Field(default=None, alias="calendarDays")

    def to_payload(self) -> Dict[str, Any]:
        """Serialize using the wire (camelCase) field names."""
        return self.model_dump(by_alias=True, mode="json")


def clean_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def to_list(value: Any) -> List[str]:
    """Coerce a list or a prose block of bullets into an ordered list of strings."""
    if isinstance(value, (list, tuple)):
        items = ("" if item is None else str(item) for item in value)
        return [item.strip() for item in items if item.strip()]
    if isinstance(value, str):
        lines = (line.strip() for line in value.split("\n"))
        stripped = (_BULLET_MARKER.sub("", line).strip() for line in lines if line)
        return [line for line in stripped if line]
    return []


def new_plan_id() -> str:
    return f"plan_{int(time.time() * 1000)}_{uuid4().hex[:12]}"


def empty_step(index: int) -> PlanStep:
    return PlanStep(title=f"Step {index + 1}")


def normalize_plan(
    raw: Any,
    idea_fallback: str,
    inputs_fallback: PlanInputs | Mapping[str, Any] | None = None,
) -> Plan:
    """Build a canonical Plan from ``raw``, filling every gap with a default.

    Malformed input never raises: wrong types degrade to empty values, missing
    steps are padded with ``Step N`` placeholders and steps past the third are
    dropped.
    """
    data = raw if isinstance(raw, Mapping) else {}
    fallback_inputs = _coerce_fallback_inputs(inputs_fallback)

    steps_raw = data.get("steps")
    steps_list = list(steps_raw) if isinstance(steps_raw, (list, tuple)) else []
    steps = [_normalize_step(entry, idx) for idx, entry in enumerate(steps_list[:PLAN_STEP_COUNT])]
    while len(steps) < PLAN_STEP_COUNT:
        steps.append(empty_step(len(steps)))

    return Plan(
        id=clean_str(data.get("id")) or new_plan_id(),
        created_at=clean_str(data.get("createdAt")) or datetime.now(timezone.utc).isoformat(),
        idea=clean_str(data.get("idea")) or clean_str(idea_fallback),
        inputs=_normalize_inputs(data, fallback_inputs),
        steps=steps,
        calendar_days=_normalize_generated_days(data.get("calendarDays")),
    )


def _coerce_fallback_inputs(value: PlanInputs | Mapping[str, Any] | None) -> PlanInputs:
    if isinstance(value, PlanInputs):
        return value
    if isinstance(value, Mapping):
        return PlanInputs(**{attr: clean_str(value.get(alias, value.get(attr))) for alias, attr in INPUT_FIELDS.items()})
    return PlanInputs()


def _normalize_inputs(data: Mapping[str, Any], fallback: PlanInputs) -> PlanInputs:
    nested = data.get("inputs")
    nested = nested if isinstance(nested, Mapping) else {}
    values = {}
    for alias, attr in INPUT_FIELDS.items():
        values[attr] = (
            clean_str(nested.get(alias))
            or clean_str(data.get(alias))
            or clean_str(getattr(fallback, attr))
        )
    return PlanInputs(**values)


def _first_present(entry: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = entry.get(key)
        if value is not None:
            return value
    return None


def _normalize_step(entry: Any, index: int) -> PlanStep:
    step = entry if isinstance(entry, Mapping) else {}
    return PlanStep(
        title=clean_str(step.get("title")) or f"Step {index + 1}",
        summary=clean_str(step.get("summary")),
        what_this_does=to_list(_first_present(step, STEP_KEY_ALIASES["whatThisDoes"])),
        how_to=to_list(_first_present(step, STEP_KEY_ALIASES["howTo"])),
        output=clean_str(_first_present(step, STEP_KEY_ALIASES["output"])),
    )


def _normalize_generated_days(value: Any) -> Optional[List[GeneratedCalendarDay]]:
    if not isinstance(value, (list, tuple)):
        return None
    entries = [entry for entry in value if isinstance(entry, Mapping)][:MAX_GENERATED_DAYS]
    days: List[GeneratedCalendarDay] = []
    for idx, entry in enumerate(entries):
        day_number = entry.get("day")
        if isinstance(day_number, bool) or not isinstance(day_number, int):
            day_number = idx + 1
        days.append(
            GeneratedCalendarDay(
                day=day_number,
                title=clean_str(entry.get("title")) or f"Day {idx + 1}",
                tasks=to_list(entry.get("tasks")),
            )
        )
    return days
