"""Typed plan and execution models for vicore."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

StepType = Literal["respond", "tool_call", "memory_access", "policy_check"]
Complexity = Literal["simple", "moderate", "complex"]
ToolStatus = Literal["success", "failure", "timeout", "permission_denied", "rate_limited"]
VerificationStatus = Literal["verified", "failed", "skipped"]

STEP_TYPES: frozenset[str] = frozenset({"respond", "tool_call", "memory_access", "policy_check"})


def _utc_now() -> datetime:
    return datetime.now(UTC)


class Intent(BaseModel):
    """Classified user utterance produced upstream."""

    model_config = ConfigDict(frozen=True)

    # query | command | conversation | clarification | feedback | unknown, open to extension
    category: str
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    requires_tooling: bool = False
    requires_memory: bool = False
    description: str | None = None
    entities: dict[str, str] = Field(default_factory=dict)


class StepVerification(BaseModel):
    required: bool = True
    verifier_type: str | None = None
    expected: Any = None


class PlanStep(BaseModel):
    id: str
    type: StepType
    description: str = ""
    tool_name: str | None = None
    tool_params: dict[str, Any] | None = None
    tool_reasoning: str | None = None
    dependencies: list[str] | None = None
    verification: StepVerification | None = None
    params: dict[str, Any] = Field(default_factory=dict)


class Plan(BaseModel):
    """Ordered steps for one user turn.

    Execution order is list order. ``dependencies`` are validated by the
    constraint solver but do not reorder execution.
    """

    steps: list[PlanStep] = Field(default_factory=list)
    reasoning: str = ""
    estimated_complexity: Complexity = "simple"
    tools_needed: list[str] = Field(default_factory=list)
    memory_access_needed: bool = False


class ExecutionResult(BaseModel):
    step_id: str
    type: str
    duration_ms: float
    success: bool
    result: Any = None
    error: str | None = None


class VerificationOutcome(BaseModel):
    status: VerificationStatus
    verifier: str | None = None
    errors: list[str] | None = None
    details: dict[str, Any] | None = None


class ToolCallResult(BaseModel):
    tool_id: str
    tool_name: str
    input: dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    error: str | None = None
    status: ToolStatus = "success"
    timestamp: datetime = Field(default_factory=_utc_now)
    verification: VerificationOutcome | None = None
    citations: list[dict[str, Any]] | None = None


class VerificationSummary(BaseModel):
    verified: int = 0
    failed: int = 0
    skipped: int = 0


class Execution(BaseModel):
    steps_executed: list[ExecutionResult] = Field(default_factory=list)
    success: bool
    output: str
    tool_results: list[ToolCallResult] | None = None
    errors: list[str] | None = None
    memory_used: bool = False
    verification_summary: VerificationSummary = Field(default_factory=VerificationSummary)


class ReflectionDelta(BaseModel):
    """Record of a recovery attempt made by the backtracking executor."""

    attempts: int = Field(ge=1)
    recovered: bool
    original_errors: list[str] | None = None
    fallback_plan_applied: bool = False
    notes: list[str] = Field(default_factory=list)


__all__ = [
    "Complexity",
    "Execution",
    "ExecutionResult",
    "Intent",
    "Plan",
    "PlanStep",
    "ReflectionDelta",
    "STEP_TYPES",
    "StepType",
    "StepVerification",
    "ToolCallResult",
    "ToolStatus",
    "VerificationOutcome",
    "VerificationStatus",
    "VerificationSummary",
]
