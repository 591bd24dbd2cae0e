"""LLM-backed business plan generation."""
from __future__ import annotations

import json
import logging
from time import perf_counter
from typing import Any, Dict, Optional

import openai

from profitbot.core.config import settings
from profitbot.observability.metrics import log_metric
from profitbot.observability.tracing import trace
from profitbot.services.plan_normalizer import Plan, PlanInputs, normalize_plan

logger = logging.getLogger(__name__)

RAW_PREVIEW_LIMIT = 2000


class PlanGenerationError(Exception):
    """Base class for failures surfaced to the user as an ``{"error": ...}`` payload."""

    status_code = 500

    def __init__(self, message: str, raw: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.raw = raw

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.raw:
            payload["raw"] = self.raw
        return payload


class PlanInputError(PlanGenerationError):
    status_code = 400


class PlanConfigurationError(PlanGenerationError):
    pass


class PlanProviderError(PlanGenerationError):
    pass


class PlanParseError(PlanGenerationError):
    pass


SYSTEM_PROMPT = """
You are a senior growth strategist.
Return ONLY valid JSON. No markdown. No extra commentary.

Goal:
- Create a 3-step plan where EACH step includes:
  - title
  - summary (1–2 sentences)
  - whatThisDoes (2–5 explanation bullets, practical)
  - howTo (6–10 actionable checklist bullets with specifics)
  - output (one concrete deliverable)

Also return a 14-day calendar that adapts to the plan.
Each day includes:
- day (1..14)
- title
- tasks (2–4 tasks, specific and doable)

IMPORTANT: Make the plan and calendar specific to the business idea and the optional inputs.
""".strip()

RESPONSE_SHAPE = """
{
  "id": "string",
  "createdAt": "ISO string",
  "idea": "string",
  "inputs": {
    "targetCustomer": "string",
    "coreOffer": "string",
    "differentiator": "string",
    "pricePoint": "string",
    "geography": "string",
    "goal14Day": "string",
    "notes": "string"
  },
  "steps": [
    {
      "title": "string",
      "summary": "string",
      "whatThisDoes": ["string"],
      "howTo": ["string"],
      "output": "string"
    }
  ],
  "calendarDays": [
    { "day": 1, "title": "string", "tasks": ["string"] }
  ]
}
""".strip()

NOT_PROVIDED = "(not provided)"


def build_user_prompt(idea: str, inputs: PlanInputs) -> str:
    return (
        f"Business idea: {idea}\n\n"
        "Optional inputs:\n"
        f"- Target customer: {inputs.target_customer or NOT_PROVIDED}\n"
        f"- Core offer: {inputs.core_offer or NOT_PROVIDED}\n"
        f"- Differentiator: {inputs.differentiator or NOT_PROVIDED}\n"
        f"- Price point: {inputs.price_point or NOT_PROVIDED}\n"
        f"- Geography / market: {inputs.geography or NOT_PROVIDED}\n"
        f"- 14-day goal: {inputs.goal_14_day or NOT_PROVIDED}\n"
        f"- Extra notes: {inputs.notes or NOT_PROVIDED}\n\n"
        "Return JSON in this exact shape:\n"
        f"{RESPONSE_SHAPE}"
    )


def build_client() -> openai.OpenAI:
    """Create the OpenAI client; retries are disabled so a failure surfaces right away."""
    api_key = settings.openai_api_key
    if not api_key:
        raise PlanConfigurationError("Missing OPENAI_API_KEY in environment")
    options: Dict[str, Any] = {"api_key": api_key, "max_retries": 0}
    if settings.openai_timeout_seconds:
        options["timeout"] = settings.openai_timeout_seconds
    return openai.OpenAI(**options)


def generate_plan(
    idea: str,
    inputs: PlanInputs,
    client: Optional[openai.OpenAI] = None,
    request_id: Optional[str] = None,
) -> Plan:
    """Ask the provider for a plan and normalize whatever parseable JSON comes back.

    Raises a :class:`PlanGenerationError` subclass for a blank idea, missing
    credentials, a failed provider call or a reply that is not JSON.
    """
    idea = idea.strip()
    if not idea:
        raise PlanInputError("Missing business idea")

    llm = client or build_client()
    trace_metadata = {
        "model": settings.openai_model,
        "idea_length": len(idea),
        "request_id": request_id,
    }
    start_time = perf_counter()
    success = False
    try:
        content = _request_completion(llm, idea, inputs, trace_metadata, request_id)
        parsed = _parse_content(content)
        plan = normalize_plan(parsed, idea, inputs)
        success = True
        return plan
    finally:
        latency_ms = (perf_counter() - start_time) * 1000
        log_metric("plan.generate.success", 1 if success else 0, metadata={"model": settings.openai_model})
        log_metric("plan.generate.latency_ms", latency_ms, metadata={"model": settings.openai_model})


def _request_completion(
    client: openai.OpenAI,
    idea: str,
    inputs: PlanInputs,
    trace_metadata: Dict[str, Any],
    request_id: Optional[str],
) -> str:
    try:
        with trace("plan.generate", metadata=trace_metadata, request_id=request_id):
            completion = client.chat.completions.create(
                model=settings.openai_model,
                temperature=settings.openai_temperature,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(idea, inputs)},
                ],
            )
    except openai.APIStatusError as exc:
        logger.warning("OpenAI returned status %s", exc.status_code)
        raise PlanProviderError(
            f"OpenAI request failed ({exc.status_code})",
            raw=str(exc)[:RAW_PREVIEW_LIMIT],
        ) from exc
    except openai.OpenAIError as exc:
        logger.warning("OpenAI request failed: %s", exc)
        raise PlanProviderError(str(exc) or "OpenAI request failed") from exc

    choices = getattr(completion, "choices", None) or []
    if not choices:
        return ""
    return choices[0].message.content or ""


def _parse_content(content: str) -> Any:
    try:
        return json.loads(content)
    except ValueError as exc:
        raise PlanParseError(
            "Model did not return valid JSON. Try again.",
            raw=content[:RAW_PREVIEW_LIMIT],
        ) from exc
