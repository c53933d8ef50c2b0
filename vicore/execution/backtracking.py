"""Single-shot recovery around :class:`Executor`."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import uuid4

from ..types import Execution, Plan, PlanStep, ReflectionDelta
from .executor import Executor

logger = logging.getLogger("vicore.execution")


@dataclass(slots=True)
class BacktrackingResult:
    execution: Execution
    attempts: list[Execution] = field(default_factory=list)
    reflection_delta: ReflectionDelta | None = None


def fallback_plan() -> Plan:
    """Respond-only plan that avoids repeating failed tool calls."""

    return Plan(
        steps=[
            PlanStep(
                id=uuid4().hex,
                type="respond",
                description="Self-correction fallback response",
                params={"intent_category": "fallback"},
            )
        ],
        reasoning="Self-correction fallback plan",
        estimated_complexity="simple",
        tools_needed=[],
        memory_access_needed=False,
    )


class BacktrackingExecutor:
    """Runs a plan and, on failure, retries once with a respond-only fallback.

    When the fallback fails as well, ``execution`` is the primary attempt so
    callers see the original errors; both runs remain in ``attempts``.
    """

    def __init__(self, executor: Executor) -> None:
        self._executor = executor

    async def execute(self, plan: Plan, user_id: str, session_id: str | None = None) -> BacktrackingResult:
        primary = await self._executor.execute_plan(plan, user_id, session_id)
        attempts = [primary]

        if primary.success:
            return BacktrackingResult(
                execution=primary,
                attempts=attempts,
                reflection_delta=ReflectionDelta(
                    attempts=1,
                    recovered=False,
                    original_errors=primary.errors,
                    fallback_plan_applied=False,
                    notes=["Primary plan succeeded"],
                ),
            )

        logger.info(
            "fallback_plan_applied",
            extra={"user_id": user_id, "session_id": session_id, "errors": primary.errors},
        )
        fallback = await self._executor.execute_plan(fallback_plan(), user_id, session_id)
        attempts.append(fallback)
        recovered = fallback.success

        return BacktrackingResult(
            execution=fallback if recovered else primary,
            attempts=attempts,
            reflection_delta=ReflectionDelta(
                attempts=len(attempts),
                recovered=recovered,
                original_errors=primary.errors,
                fallback_plan_applied=True,
                notes=(
                    ["Recovered via fallback respond plan"]
                    if recovered
                    else ["Fallback failed; returning primary failure"]
                ),
            ),
        )


__all__ = ["BacktrackingExecutor", "BacktrackingResult", "fallback_plan"]
