"""Calendar view, completion checks and calendar export."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from profitbot.api.schemas.calendar import (
    CalendarDayPayload,
    CalendarResponse,
    ChecksResetResponse,
    ToggleRequest,
    ToggleResponse,
)
from profitbot.db.deps import get_store
from profitbot.observability.metrics import log_metric
from profitbot.observability.tracing import trace
from profitbot.services.calendar_deriver import CalendarDay, derive_days
from profitbot.services.completion_state import CompletionStateManager, plan_identity, task_key
from profitbot.services.plan_export import calendar_to_text
from profitbot.services.plan_normalizer import Plan
from profitbot.services.plan_store import PlanRepository, SqlKeyValueStore, plan_from_payload

router = APIRouter()


def _load_view(store: SqlKeyValueStore) -> Tuple[Optional[Plan], CompletionStateManager]:
    # Identity comes from the stored payload so an id-less plan keys on its idea.
    payload = PlanRepository(store).load_payload()
    plan = plan_from_payload(payload) if payload is not None else None
    manager = CompletionStateManager(store, plan_identity(payload))
    manager.load()
    return plan, manager


def _day_payload(day: CalendarDay, manager: CompletionStateManager) -> CalendarDayPayload:
    return CalendarDayPayload(
        day=day.day,
        date_label=day.date_label,
        focus=day.focus,
        tasks=day.tasks,
        done=[manager.is_done(day.day, idx) for idx in range(len(day.tasks))],
    )


@router.get("/calendar", response_model=CalendarResponse, tags=["calendar"])
def get_calendar(store: SqlKeyValueStore = Depends(get_store)) -> CalendarResponse:
    """Return the 14 derived days with their check state; works without a saved plan."""
    plan, manager = _load_view(store)
    days: List[CalendarDay] = derive_days(plan)
    return CalendarResponse(
        identity=manager.identity,
        title=(plan.idea.strip() if plan else "") or "Your plan",
        created_at=plan.created_at if plan else None,
        has_plan=plan is not None,
        days=[_day_payload(day, manager) for day in days],
        checks=manager.checks,
    )


@router.post("/calendar/checks/toggle", response_model=ToggleResponse, tags=["calendar"])
def toggle_check(
    payload: ToggleRequest,
    http_request: Request,
    store: SqlKeyValueStore = Depends(get_store),
) -> ToggleResponse:
    """Flip one task's done flag and persist the whole mapping."""
    request_id = getattr(http_request.state, "request_id", None)
    plan, manager = _load_view(store)
    day = derive_days(plan)[payload.day - 1]
    if payload.task_index >= len(day.tasks):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Day {payload.day} has only {len(day.tasks)} task(s)",
        )

    metadata: Dict[str, Any] = {
        "route": "/calendar/checks/toggle",
        "identity": manager.identity,
        "day": payload.day,
        "task_index": payload.task_index,
    }
    with trace("calendar.toggle", metadata=metadata, request_id=request_id):
        done = manager.toggle(payload.day, payload.task_index)
    log_metric("calendar.toggle.done", 1 if done else 0, metadata={"identity": manager.identity})

    return ToggleResponse(key=task_key(payload.day, payload.task_index), done=done, checks=manager.checks)


@router.delete("/calendar/checks", response_model=ChecksResetResponse, tags=["calendar"])
def reset_checks(http_request: Request, store: SqlKeyValueStore = Depends(get_store)) -> ChecksResetResponse:
    request_id = getattr(http_request.state, "request_id", None)
    _, manager = _load_view(store)
    with trace("calendar.reset", metadata={"identity": manager.identity}, request_id=request_id):
        manager.reset()
    log_metric("calendar.reset", 1, metadata={"identity": manager.identity})
    return ChecksResetResponse(identity=manager.identity, checks=manager.checks)


@router.get("/calendar/text", response_class=PlainTextResponse, tags=["calendar"])
def export_calendar(store: SqlKeyValueStore = Depends(get_store)) -> str:
    plan = PlanRepository(store).load_latest()
    return calendar_to_text(derive_days(plan), plan)
