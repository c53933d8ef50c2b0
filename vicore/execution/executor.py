"""Sequential plan execution gated by policy and verified per tool call."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from ..config import ExecutorConfig
from ..policy.audit import PolicyAction
from ..policy.engine import COMMAND_EXECUTION, TOOL_ACTION_PREFIX, PolicyEngine
from ..tools.protocols import ToolExecutionContext, ToolInvoker
from ..types import (
    Execution,
    ExecutionResult,
    Plan,
    PlanStep,
    ToolCallResult,
    VerificationOutcome,
    VerificationSummary,
)
from ..verification.registry import VerifierRegistry

logger = logging.getLogger("vicore.execution")

DEFAULT_OUTPUT = "No output generated"
TOOL_POLICY_ID = "tool_execution"


class MemoryAccessor(Protocol):
    """Retrieves memories for ``memory_access`` steps."""

    async def retrieve(
        self,
        user_id: str,
        params: Mapping[str, Any],
        *,
        session_id: str | None = None,
    ) -> Any: ...


@dataclass(slots=True)
class _StepOutcome:
    success: bool
    data: Any = None
    error: str | None = None
    tool_result: ToolCallResult | None = None


def _elapsed_ms(start: float) -> float:
    return (time.monotonic() - start) * 1000


class Executor:
    """Runs plan steps in list order.

    Dependencies are not used to reorder steps; a ``policy_check`` guards
    later steps by position. A step that raises becomes a failed
    :class:`ExecutionResult` and the loop moves on. Plan success is cleared
    by a step exception or by a failed verification that is required.
    """

    def __init__(
        self,
        policy: PolicyEngine,
        invoker: ToolInvoker,
        verifiers: VerifierRegistry | None = None,
        *,
        memory: MemoryAccessor | None = None,
        config: ExecutorConfig | None = None,
    ) -> None:
        self._policy = policy
        self._invoker = invoker
        self._verifiers = verifiers or VerifierRegistry()
        self._memory = memory
        self._config = config or ExecutorConfig()

    async def execute_plan(self, plan: Plan, user_id: str, session_id: str | None = None) -> Execution:
        started = time.monotonic()
        steps_executed: list[ExecutionResult] = []
        tool_results: list[ToolCallResult] = []
        errors: list[str] = []
        summary = VerificationSummary()
        success = True
        output = ""
        memory_used = False

        for step in plan.steps:
            step_start = time.monotonic()
            try:
                outcome = await self._execute_step(step, user_id, session_id)
            except Exception as exc:
                message = str(exc) or type(exc).__name__
                logger.warning(
                    "step_failed",
                    extra={"step_id": step.id, "step_type": step.type, "error": message},
                )
                success = False
                errors.append(message)
                steps_executed.append(
                    ExecutionResult(
                        step_id=step.id,
                        type=step.type,
                        duration_ms=_elapsed_ms(step_start),
                        success=False,
                        error=message,
                    )
                )
                continue

            steps_executed.append(
                ExecutionResult(
                    step_id=step.id,
                    type=step.type,
                    duration_ms=_elapsed_ms(step_start),
                    success=outcome.success,
                    result=outcome.data,
                    error=outcome.error,
                )
            )
            if not outcome.success:
                errors.append(outcome.error or "Step failed")

            if step.type == "respond" and outcome.success:
                output = str(outcome.data.get("output") or output)
            elif step.type == "memory_access" and outcome.success:
                memory_used = True

            tool_result = outcome.tool_result
            if tool_result is None:
                continue

            verification = await self._verify(step, tool_result, outcome.data)
            tool_result.verification = verification
            if verification.status == "verified":
                summary.verified += 1
            elif verification.status == "failed":
                summary.failed += 1
            else:
                summary.skipped += 1

            required = step.verification is None or step.verification.required is not False
            if verification.status == "failed" and required:
                success = False
                errors.append("; ".join(verification.errors or ()) or "Verification failed")
            tool_results.append(tool_result)

        logger.info(
            "plan_executed",
            extra={
                "user_id": user_id,
                "session_id": session_id,
                "steps": len(plan.steps),
                "success": success,
                "error_count": len(errors),
                "duration_ms": _elapsed_ms(started),
            },
        )
        return Execution(
            steps_executed=steps_executed,
            success=success,
            output=output or DEFAULT_OUTPUT,
            tool_results=tool_results or None,
            errors=errors or None,
            memory_used=memory_used,
            verification_summary=summary,
        )

    async def _execute_step(self, step: PlanStep, user_id: str, session_id: str | None) -> _StepOutcome:
        if step.type == "respond":
            return self._respond(step)
        if step.type == "policy_check":
            authorized = await self._policy.authorize(COMMAND_EXECUTION, user_id)
            return _StepOutcome(
                success=authorized,
                data={"authorized": authorized},
                error=None if authorized else "Policy denied execution",
            )
        if step.type == "tool_call":
            return await self._call_tool(step, user_id, session_id)
        if step.type == "memory_access":
            return await self._access_memory(step, user_id, session_id)
        return _StepOutcome(success=False, error=f"Unknown step type: {step.type}")

    @staticmethod
    def _respond(step: PlanStep) -> _StepOutcome:
        refusal = step.params.get("policy_refusal")
        if refusal:
            text = f"I can't answer that reliably without verified information. (Locked rule: {refusal})"
            return _StepOutcome(success=True, data={"output": text, "policy_refusal": refusal})
        return _StepOutcome(success=True, data={"output": f"Response to your request. (Step: {step.id})"})

    async def _call_tool(self, step: PlanStep, user_id: str, session_id: str | None) -> _StepOutcome:
        tool_name = step.tool_name or str(step.params.get("tool_name") or "list_tools")
        params = dict(step.tool_params or {})

        if not await self._policy.authorize(f"{TOOL_ACTION_PREFIX}{tool_name}", user_id):
            await self._record(user_id, "deny", f"Not authorized for tool {tool_name}")
            error = "Policy denied tool execution"
            return _StepOutcome(
                success=False,
                error=error,
                tool_result=ToolCallResult(
                    tool_id=step.id,
                    tool_name=tool_name,
                    input=params,
                    error=error,
                    status="permission_denied",
                ),
            )

        context = ToolExecutionContext(user_id=user_id, session_id=session_id)
        timeout_s = self._config.tool_timeout_s
        try:
            async with asyncio.timeout(timeout_s):
                result = await self._invoker.execute(tool_name, params, context)
        except TimeoutError as exc:
            if timeout_s is None:
                raise
            raise TimeoutError(f"Tool '{tool_name}' timed out after {timeout_s}s") from exc

        await self._record(user_id, "allow", f"Authorized tool {tool_name}")

        return _StepOutcome(
            success=result.success,
            data=result.data,
            error=result.error,
            tool_result=ToolCallResult(
                tool_id=step.id,
                tool_name=tool_name,
                input=params,
                result=result.data,
                error=result.error,
                status=result.status or ("success" if result.success else "failure"),
                citations=result.citations,
            ),
        )

    async def _access_memory(self, step: PlanStep, user_id: str, session_id: str | None) -> _StepOutcome:
        if self._memory is None:
            return _StepOutcome(success=False, error="Memory access is not wired")
        data = await self._memory.retrieve(user_id, step.params, session_id=session_id)
        return _StepOutcome(success=True, data=data)

    async def _record(self, user_id: str, action: PolicyAction, reason: str) -> None:
        try:
            await self._policy.record_decision(TOOL_POLICY_ID, user_id, action, reason)
        except Exception as exc:
            logger.warning("policy_record_failed", extra={"user_id": user_id, "error": repr(exc)})

    async def _verify(self, step: PlanStep, tool_result: ToolCallResult, raw: Any) -> VerificationOutcome:
        verifier_type = step.verification.verifier_type if step.verification else None
        expected = step.verification.expected if step.verification else None
        verifier = self._verifiers.resolve(tool_result.tool_name, verifier_type)

        if verifier is None:
            mirrored = await self._verifiers.default.verify(tool_result)
            return VerificationOutcome(
                status="verified" if mirrored.passed else "failed",
                verifier=verifier_type or self._verifiers.default.name,
                errors=mirrored.errors,
            )

        try:
            result = await verifier.verify(raw if raw is not None else tool_result.result, expected)
        except Exception as exc:
            logger.warning(
                "verifier_raised",
                extra={"verifier": verifier.name, "tool": tool_result.tool_name, "error": repr(exc)},
            )
            return VerificationOutcome(status="failed", verifier=verifier.name, errors=[str(exc) or repr(exc)])
        return VerificationOutcome(
            status="verified" if result.passed else "failed",
            verifier=verifier.name,
            errors=result.errors,
            details=result.details,
        )


__all__ = ["DEFAULT_OUTPUT", "Executor", "MemoryAccessor"]
