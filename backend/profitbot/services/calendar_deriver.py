"""Derive the 14-day task calendar from a canonical plan."""
from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from profitbot.services.plan_normalizer import Plan, PlanStep, to_list

CALENDAR_LENGTH = 14
STEP_DAY_ALLOCATION = (4, 6, 4)
FILLER_TASK = "Execute the next best action from this step."

DEFAULT_FOCUS = (
    "Step 1: Positioning",
    "Step 2: Acquisition Sprint",
    "Step 3: Retention & Proof",
)

FALLBACK_TASKS: tuple[tuple[str, ...], ...] = (
    (
        "Write your one-liner (who + outcome + why you).",
        "Draft landing page: headline + 3 bullets + proof + CTA.",
        "Write FAQs for top objections.",
        "Clarify pricing/packaging and a single CTA.",
    ),
    (
        "Pick ONE channel for the 14-day sprint.",
        "Create 3 hooks (pain/outcome/differentiator).",
        "Do today’s outreach/content block (30–60 min).",
        "Improve based on responses and iterate hooks.",
        "Follow up within 24 hours.",
        "Track: views → leads → conversions.",
    ),
    (
        "Collect proof (testimonial/screenshot/case study) and publish it.",
        "Improve activation/onboarding to value fast.",
        "Add a referral ask script and use it.",
        "Review metrics and lock the next sprint.",
    ),
)


class CalendarDay(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: int
    date_label: str = Field(alias="dateLabel")
    focus: str
    tasks: List[str]


def distribute_round_robin(items: Sequence[str], buckets: int) -> List[List[str]]:
    """Deal ``items`` across ``buckets`` slots: item ``i`` lands in slot ``i % buckets``."""
    slots: List[List[str]] = [[] for _ in range(buckets)]
    for idx, item in enumerate(items):
        slots[idx % buckets].append(item)
    return slots


def format_date_label(value: date) -> str:
    return f"{value:%a}, {value:%b} {value.day}"


def step_task_pool(step: Optional[PlanStep], position: int) -> List[str]:
    """Checklist items first, then explanatory bullets; canned tasks when both are empty."""
    pool: List[str] = []
    if step is not None:
        pool = to_list(step.how_to) + to_list(step.what_this_does)
    return pool or list(FALLBACK_TASKS[position])


def derive_days(plan: Optional[Plan], today: Optional[date] = None) -> List[CalendarDay]:
    """Return exactly 14 calendar days for ``plan``.

    The calendar is recomputed on every call and never cached or persisted,
    so edits to the stored plan show up immediately. A missing plan yields a
    calendar built entirely from the canned task lists.
    """
    start = today or date.today()
    steps = list(plan.steps) if plan is not None else []

    days: List[CalendarDay] = []
    day_number = 1
    for position, day_count in enumerate(STEP_DAY_ALLOCATION):
        step = steps[position] if position < len(steps) else None
        focus = (step.title.strip() if step else "") or DEFAULT_FOCUS[position]
        buckets = distribute_round_robin(step_task_pool(step, position), day_count)
        for bucket in buckets:
            days.append(
                CalendarDay(
                    day=day_number,
                    date_label=format_date_label(start + timedelta(days=day_number - 1)),
                    focus=focus,
                    tasks=bucket or [FILLER_TASK],
                )
            )
            day_number += 1

    return days[:CALENDAR_LENGTH]
