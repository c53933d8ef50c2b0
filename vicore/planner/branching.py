"""Multi-candidate planning with constraint-based scoring."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from ..config import PlannerConfig
from ..tools.protocols import ToolCatalog
from ..types import Intent, Plan, PlanStep
from .constraints import ConstraintAnalysis, ConstraintIssue, ConstraintSolver
from .planner import Planner

logger = logging.getLogger("vicore.planner")

ISSUE_PENALTY = 0.12
MAX_ISSUE_PENALTY = 0.75
CYCLE_PENALTY = 0.25
VALIDATION_PENALTY = 0.20
TOOL_COVERAGE_PENALTY = 0.20
MEMORY_PENALTY = 0.05
COMPLEXITY_PENALTY = 0.05


@dataclass(slots=True)
class PlanCandidate:
    label: str
    plan: Plan
    analysis: ConstraintAnalysis
    score: float
    id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def issues(self) -> list[ConstraintIssue]:
        return self.analysis.issues


@dataclass(slots=True)
class PlanningResult:
    plan: Plan
    candidates: list[PlanCandidate]


def score_plan(plan: Plan, analysis: ConstraintAnalysis, intent: Intent) -> float:
    score = 1.0 - min(MAX_ISSUE_PENALTY, len(analysis.issues) * ISSUE_PENALTY)
    if analysis.has("cycle"):
        score -= CYCLE_PENALTY
    if analysis.has("validation"):
        score -= VALIDATION_PENALTY
    if intent.requires_tooling and not plan.tools_needed:
        score -= TOOL_COVERAGE_PENALTY
    if intent.requires_memory and not plan.memory_access_needed:
        score -= MEMORY_PENALTY
    if plan.estimated_complexity == "complex":
        score -= COMPLEXITY_PENALTY
    return max(0.0, min(1.0, score))


def wrap_with_policy_guard(plan: Plan, intent: Intent) -> Plan:
    """Prepend a policy check that respond and tool steps depend on."""

    guard_id = uuid4().hex
    guard = PlanStep(
        id=guard_id,
        type="policy_check",
        description="Verify authorization before executing plan",
        params={"intent_category": intent.category},
    )

    guarded: list[PlanStep] = []
    for step in plan.steps:
        if step.type == "respond":
            deps = step.dependencies if step.dependencies else [guard_id]
            guarded.append(step.model_copy(update={"dependencies": list(deps)}))
        elif step.type == "tool_call":
            deps = list(dict.fromkeys([*(step.dependencies or ()), guard_id]))
            guarded.append(step.model_copy(update={"dependencies": deps}))
        else:
            guarded.append(step)

    return Plan(
        steps=[guard, *guarded],
        reasoning=f"{plan.reasoning} (guarded)",
        estimated_complexity=plan.estimated_complexity,
        tools_needed=list(plan.tools_needed),
        memory_access_needed=plan.memory_access_needed,
    )


def respond_only_plan(intent: Intent) -> Plan:
    return Plan(
        steps=[
            PlanStep(
                id=uuid4().hex,
                type="respond",
                description="Provide a grounded answer without tools (safe fallback)",
                params={"intent_category": intent.category},
            )
        ],
        reasoning="Safe fallback plan",
        estimated_complexity="simple",
        tools_needed=[],
        memory_access_needed=False,
    )


class BranchingPlanner:
    """Generates labelled candidates and returns the best-scoring plan.

    Candidates are produced in the order ``primary``, ``policy_guard``,
    ``respond_only``; ranking is a stable sort, so equal scores keep that
    order.
    """

    def __init__(
        self,
        planner: Planner,
        catalog: ToolCatalog | None = None,
        *,
        config: PlannerConfig | None = None,
        solver: ConstraintSolver | None = None,
    ) -> None:
        self._planner = planner
        self._config = config or PlannerConfig()
        self._solver = solver or ConstraintSolver(
            catalog if catalog is not None else planner.catalog,
            require_registered_tools=self._config.require_registered_tools,
        )
        self._max_candidates = self._config.max_candidates

    async def generate(self, intent: Intent, context: Mapping[str, Any] | None = None) -> PlanningResult:
        primary = await self._planner.generate_plan(intent, context)
        candidates = [self._evaluate(primary, "primary", intent)]

        if len(candidates) < self._max_candidates:
            candidates.append(self._evaluate(wrap_with_policy_guard(primary, intent), "policy_guard", intent))
        if len(candidates) < self._max_candidates:
            candidates.append(self._evaluate(respond_only_plan(intent), "respond_only", intent))

        ranked = sorted(candidates, key=lambda candidate: candidate.score, reverse=True)
        best = ranked[0]
        logger.debug(
            "plan_candidates_ranked",
            extra={
                "selected": best.label,
                "scores": {candidate.label: candidate.score for candidate in ranked},
            },
        )
        return PlanningResult(plan=best.plan, candidates=ranked)

    def _evaluate(self, plan: Plan, label: str, intent: Intent) -> PlanCandidate:
        analysis = self._solver.analyze(plan)
        return PlanCandidate(label=label, plan=plan, analysis=analysis, score=score_plan(plan, analysis, intent))


__all__ = [
    "BranchingPlanner",
    "PlanCandidate",
    "PlanningResult",
    "respond_only_plan",
    "score_plan",
    "wrap_with_policy_guard",
]
