"""Pydantic schemas for the plan generation endpoint."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from profitbot.services.plan_normalizer import PlanInputs


class GenerateRequest(BaseModel):
    """Idea plus optional context; everything is trimmed and missing values become ""."""

    model_config = ConfigDict(populate_by_name=True)

    idea: str = ""
    target_customer: str = Field(default="", alias="targetCustomer")
    core_offer: str = Field(default="", alias="coreOffer")
    differentiator: str = ""
    price_point: str = Field(default="", alias="pricePoint")
    geography: str = ""
    goal_14_day: str = Field(default="", alias="goal14Day")
    notes: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _clean(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    def to_inputs(self) -> PlanInputs:
        return PlanInputs(
            target_customer=self.target_customer,
            core_offer=self.core_offer,
            differentiator=self.differentiator,
            price_point=self.price_point,
            geography=self.geography,
            goal_14_day=self.goal_14_day,
            notes=self.notes,
        )
