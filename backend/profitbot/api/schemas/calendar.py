"""Schemas for the calendar view and completion checks."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CalendarDayPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: int
    date_label: str = Field(alias="dateLabel")
    focus: str
    tasks: List[str]
    done: List[bool] = Field(default_factory=list)


class CalendarResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    identity: str
    title: str
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    has_plan: bool = Field(alias="hasPlan")
    days: List[CalendarDayPayload]
    checks: Dict[str, bool] = Field(default_factory=dict)


class ToggleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: int = Field(..., ge=1, le=14)
    task_index: int = Field(..., ge=0, alias="taskIndex")


class ToggleResponse(BaseModel):
    key: str
    done: bool
    checks: Dict[str, bool]


class ChecksResetResponse(BaseModel):
    identity: str
    checks: Dict[str, bool] = Field(default_factory=dict)
