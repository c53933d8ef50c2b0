"""Strict plan schema used for validation.

:class:`~vicore.types.Plan` is deliberately lenient so malformed plans can be
analysed. The models here carry the structural rules; validation errors are
returned, never raised.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..types import Plan


class _StepSchema(BaseModel):
    id: str = Field(min_length=1)
    type: Literal["respond", "tool_call", "memory_access", "policy_check"]
    description: str = Field(min_length=1)
    tool_name: str | None = None
    tool_params: dict[str, Any] | None = None
    tool_reasoning: str | None = None
    dependencies: list[str] | None = None
    verification: dict[str, Any] | None = None
    params: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _tool_call_needs_tool(self) -> _StepSchema:
        if self.type == "tool_call" and not self.tool_name:
            raise ValueError("tool_call steps require tool_name")
        return self


class _PlanSchema(BaseModel):
    steps: list[_StepSchema] = Field(min_length=1)
    reasoning: str = Field(min_length=1)
    estimated_complexity: Literal["simple", "moderate", "complex"]
    tools_needed: list[str] = Field(default_factory=list)
    memory_access_needed: bool = False


@dataclass(slots=True)
class PlanValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


def validate_plan(plan: Plan | Mapping[str, Any]) -> PlanValidation:
    """Validate a plan against the strict schema."""

    payload = plan.model_dump() if isinstance(plan, Plan) else dict(plan)
    try:
        _PlanSchema.model_validate(payload)
    except ValidationError as exc:
        errors = []
        for error in exc.errors():
            loc = ".".join(str(part) for part in error.get("loc", ())) or "plan"
            errors.append(f"{loc}: {error.get('msg')}")
        return PlanValidation(valid=False, errors=errors)
    return PlanValidation(valid=True)


__all__ = ["PlanValidation", "validate_plan"]
