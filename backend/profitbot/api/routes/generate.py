"""Plan generation endpoint."""
from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from profitbot.api.schemas.generate import GenerateRequest
from profitbot.db.deps import get_store
from profitbot.observability.tracing import annotate, trace
from profitbot.services.plan_generator import PlanGenerationError, PlanInputError, generate_plan
from profitbot.services.plan_normalizer import Plan
from profitbot.services.plan_store import PlanRepository, SqlKeyValueStore

logger = logging.getLogger(__name__)

router = APIRouter()

# Only one generation may be in flight; a second submit is refused, not queued.
_generation_busy = Lock()


def _error(status_code: int, payload: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload)


@router.post("/api/generate", response_model=Plan, tags=["plans"])
def generate_plan_endpoint(
    payload: GenerateRequest,
    http_request: Request,
    store: SqlKeyValueStore = Depends(get_store),
):
    """Generate a plan for the idea and store it as the latest plan."""
    request_id = getattr(http_request.state, "request_id", None)
    if not payload.idea:
        return _error(status.HTTP_400_BAD_REQUEST, PlanInputError("Missing business idea").to_payload())

    if not _generation_busy.acquire(blocking=False):
        return _error(status.HTTP_409_CONFLICT, {"error": "A plan is already being generated"})

    metadata = {"route": "/api/generate", "request_id": request_id, "idea_length": len(payload.idea)}
    try:
        with trace("plan.generation", metadata=metadata, request_id=request_id) as span:
            plan = generate_plan(payload.idea, payload.to_inputs(), request_id=request_id)
            PlanRepository(store).save_latest(plan)
            annotate(span, metadata={**metadata, "plan_id": plan.id, "step_titles": [step.title for step in plan.steps]})
    except PlanGenerationError as exc:
        logger.warning("Plan generation failed (%s): %s", exc.status_code, exc.message)
        return _error(exc.status_code, exc.to_payload())
    except Exception:
        logger.exception("Unexpected error while generating plan")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, {"error": "Unknown server error"})
    finally:
        _generation_busy.release()

    logger.info("Stored plan %s for idea of %d chars", plan.id, len(payload.idea))
    return plan
