"""Tests for the plain-text plan and calendar exports."""
from __future__ import annotations

from datetime import date

from profitbot.services.calendar_deriver import derive_days
from profitbot.services.plan_export import (
    STEP_SEPARATOR,
    calendar_to_text,
    format_generated_at,
    plan_to_text,
)
from profitbot.services.plan_normalizer import normalize_plan


def _plan():
    return normalize_plan(
        {
            "id": "plan_export",
            "createdAt": "not a timestamp",
            "idea": "Coffee cart",
            "inputs": {"pricePoint": "$4", "notes": "Weekends only"},
            "steps": [
                {
                    "title": "Position",
                    "summary": "Say who it is for.",
                    "whatThisDoes": ["Sharpens the message"],
                    "howTo": ["Write one-liner"],
                    "output": "Landing page",
                },
                {"title": "Acquire"},
            ],
        },
        "Coffee cart",
    )


def test_plan_text_sections_follow_step_order() -> None:
    text = plan_to_text(_plan())
    lines = text.split("\n")

    assert lines[:4] == [
        "ProfitBot — AI Business Plan Generator",
        "Idea: Coffee cart",
        "Generated: not a timestamp",
        "",
    ]
    assert lines[4:8] == ["Inputs", "- Price point: $4", "- Notes: Weekends only", ""]
    step_one = lines.index("Step 1: Position")
    assert lines[step_one + 1] == "Say who it is for."
    assert lines[step_one + 3 : step_one + 5] == ["What this step does:", "- Sharpens the message"]
    assert "How to do it (checklist):" in lines
    assert "Output: Landing page" in lines
    assert lines.count(STEP_SEPARATOR) == 3
    assert "Step 3: Step 3" in lines


def test_plan_text_skips_empty_inputs_block() -> None:
    plan = normalize_plan({"idea": "Bare"}, "Bare")

    assert "Inputs" not in plan_to_text(plan).split("\n")


def test_calendar_text_lists_every_day() -> None:
    plan = _plan()
    text = calendar_to_text(derive_days(plan, today=date(2026, 10, 17)), plan)
    lines = text.split("\n")

    assert lines[0] == "14-Day Marketing Calendar"
    assert lines[1] == "Plan: Coffee cart"
    assert lines[4] == "Day 1 — Sat, Oct 17"
    assert lines[5] == "Focus: Position"
    assert lines[6] == "- Write one-liner"
    assert sum(1 for line in lines if line.startswith("Day ")) == 14


def test_calendar_text_without_plan_uses_placeholder_title() -> None:
    text = calendar_to_text(derive_days(None, today=date(2026, 10, 17)))

    assert text.split("\n")[1] == "Plan: Your plan"


def test_format_generated_at_parses_iso_values() -> None:
    assert format_generated_at("2026-10-17T09:30:00") == "2026-10-17 09:30"
    assert format_generated_at("garbage") == "garbage"
