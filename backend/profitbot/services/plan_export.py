"""Plain-text renderings of a plan and its calendar for copy and print."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from profitbot.services.calendar_deriver import CalendarDay
from profitbot.services.plan_normalizer import Plan

PLAN_HEADER = "ProfitBot — AI Business Plan Generator"
CALENDAR_HEADER = "14-Day Marketing Calendar"
STEP_SEPARATOR = "-" * 50

INPUT_LABELS = (
    ("target_customer", "Target customer"),
    ("core_offer", "Core offer"),
    ("differentiator", "Differentiator"),
    ("price_point", "Price point"),
    ("geography", "Geography"),
    ("goal_14_day", "14-day goal"),
    ("notes", "Notes"),
)


def format_generated_at(value: Optional[str]) -> str:
    """Render an ISO timestamp for humans; unparseable values are shown as-is."""
    if not value:
        return datetime.now().strftime("%Y-%m-%d %H:%M")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d %H:%M")


def plan_to_text(plan: Plan) -> str:
    lines: List[str] = [
        PLAN_HEADER,
        f"Idea: {plan.idea}",
        f"Generated: {format_generated_at(plan.created_at)}",
        "",
    ]

    input_lines = [
        f"{label}: {getattr(plan.inputs, attr)}"
        for attr, label in INPUT_LABELS
        if getattr(plan.inputs, attr)
    ]
    if input_lines:
        lines.append("Inputs")
        lines.extend(f"- {line}" for line in input_lines)
        lines.append("")

    for idx, step in enumerate(plan.steps, start=1):
        lines.append(f"Step {idx}: {step.title}")
        if step.summary:
            lines.append(step.summary)
        lines.append("")

        if step.what_this_does:
            lines.append("What this step does:")
            lines.extend(f"- {bullet}" for bullet in step.what_this_does)
            lines.append("")

        if step.how_to:
            lines.append("How to do it (checklist):")
            lines.extend(f"- {bullet}" for bullet in step.how_to)
            lines.append("")

        if step.output:
            lines.append(f"Output: {step.output}")
            lines.append("")

        lines.append(STEP_SEPARATOR)
        lines.append("")

    return "\n".join(lines)


def calendar_to_text(days: Sequence[CalendarDay], plan: Optional[Plan] = None) -> str:
    title = (plan.idea.strip() if plan else "") or "Your plan"
    lines: List[str] = [
        CALENDAR_HEADER,
        f"Plan: {title}",
        f"Generated: {format_generated_at(plan.created_at if plan else None)}",
        "",
    ]
    for day in days:
        lines.append(f"Day {day.day} — {day.date_label}")
        lines.append(f"Focus: {day.focus}")
        lines.extend(f"- {task}" for task in day.tasks)
        lines.append("")
    return "\n".join(lines)
