"""Latest-plan storage endpoints."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from fastapi.responses import PlainTextResponse

from profitbot.db.deps import get_store
from profitbot.services.plan_export import plan_to_text
from profitbot.services.plan_normalizer import Plan, normalize_plan
from profitbot.services.plan_store import PlanRepository, SqlKeyValueStore

router = APIRouter()

UNTITLED_IDEA = "Untitled idea"


def _require_plan(repository: PlanRepository) -> Plan:
    plan = repository.load_latest()
    if plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No saved plan found")
    return plan


@router.get("/plan/latest", response_model=Plan, tags=["plans"])
def get_latest_plan(store: SqlKeyValueStore = Depends(get_store)) -> Plan:
    return _require_plan(PlanRepository(store))


@router.put("/plan/latest", response_model=Plan, tags=["plans"])
def replace_latest_plan(
    payload: Dict[str, Any] = Body(...),
    store: SqlKeyValueStore = Depends(get_store),
) -> Plan:
    """Normalize an arbitrary plan payload and make it the latest plan."""
    plan = normalize_plan(payload, UNTITLED_IDEA)
    PlanRepository(store).save_latest(plan)
    return plan


@router.delete("/plan/latest", status_code=status.HTTP_204_NO_CONTENT, tags=["plans"])
def clear_latest_plan(store: SqlKeyValueStore = Depends(get_store)) -> Response:
    """Drop the stored plan; completion checks keep their own lifecycle."""
    PlanRepository(store).clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/plan/latest/text", response_class=PlainTextResponse, tags=["plans"])
def export_latest_plan(store: SqlKeyValueStore = Depends(get_store)) -> str:
    return plan_to_text(_require_plan(PlanRepository(store)))
