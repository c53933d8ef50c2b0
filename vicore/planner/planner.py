"""Rule-based planner with locked-fact enforcement."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol
from uuid import uuid4

from ..config import PlannerConfig
from ..relationship.models import UserFact
from ..tools.protocols import ToolCatalog
from ..types import Intent, Plan, PlanStep
from .schema import validate_plan
from .selector import FALLBACK_TOOL, ToolSelection, ToolSelector

logger = logging.getLogger("vicore.planner")

# Locked rules the planner enforces. Other locked fact keys are ignored here.
DO_NOT_REPEAT = "do_not_repeat"
NEVER_GUESS = "never_guess"
LOCKED_RULES: tuple[str, ...] = (DO_NOT_REPEAT, NEVER_GUESS)

_TOOL_CATEGORIES = frozenset({"query", "command"})


class PlanSource(Protocol):
    """Upstream plan generator (typically LLM-backed)."""

    async def generate_plan(
        self,
        intent: Intent,
        context: Mapping[str, Any] | None = None,
    ) -> Plan | Mapping[str, Any]: ...


def _new_id() -> str:
    return uuid4().hex


def extract_locked_facts(context: Mapping[str, Any] | None) -> list[dict[str, Any]]:
    """Collect locked facts from ``locked_facts`` or ``continuity_pack.locked_facts``."""

    if not context:
        return []
    raw: Any = context.get("locked_facts")
    if raw is None:
        pack = context.get("continuity_pack")
        if isinstance(pack, Mapping):
            raw = pack.get("locked_facts")
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        return []

    facts: list[dict[str, Any]] = []
    for item in raw:
        if isinstance(item, UserFact):
            if item.authority != "locked":
                continue
            facts.append({"fact_key": item.fact_key, "value": item.value})
        elif isinstance(item, Mapping):
            if item.get("authority", "locked") != "locked":
                continue
            facts.append({"fact_key": item.get("fact_key"), "value": item.get("value")})
    return facts


def has_locked_rule(facts: Sequence[Mapping[str, Any]], rule: str) -> bool:
    needle = rule.lower()
    for fact in facts:
        key = fact.get("fact_key")
        if isinstance(key, str) and key.lower() == needle:
            return True
        value = fact.get("value")
        if isinstance(value, str) and needle in value.lower():
            return True
        if isinstance(value, Mapping):
            try:
                serialised = json.dumps(value, default=str).lower()
            except (TypeError, ValueError):
                continue
            if needle in serialised:
                return True
    return False


def has_grounding_tool(plan: Plan) -> bool:
    return any(
        step.type == "tool_call" and step.tool_name and step.tool_name != FALLBACK_TOOL
        for step in plan.steps
    )


class Planner:
    """Turns an :class:`Intent` into a single candidate :class:`Plan`."""

    def __init__(
        self,
        catalog: ToolCatalog,
        *,
        plan_source: PlanSource | None = None,
        config: PlannerConfig | None = None,
        selector: ToolSelector | None = None,
    ) -> None:
        self._catalog = catalog
        self._plan_source = plan_source
        self._config = config or PlannerConfig()
        self._selector = selector or ToolSelector(catalog)

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    async def generate_plan(self, intent: Intent, context: Mapping[str, Any] | None = None) -> Plan:
        locked_facts = extract_locked_facts(context)

        plan: Plan | None = None
        if self._plan_source is not None:
            plan = await self._plan_from_source(intent, context)
        if plan is None:
            plan = self.rule_based_plan(intent)
        return self.enforce_locked_facts(plan, intent, locked_facts)

    async def _plan_from_source(self, intent: Intent, context: Mapping[str, Any] | None) -> Plan | None:
        assert self._plan_source is not None
        try:
            raw = await self._plan_source.generate_plan(intent, context)
            plan = raw if isinstance(raw, Plan) else Plan.model_validate(raw)
        except Exception as exc:
            logger.warning(
                "plan_source_failed",
                extra={"intent": intent.category, "error": repr(exc)},
            )
            return None

        if self._config.strict_validation:
            validation = validate_plan(plan)
            if not validation.valid:
                logger.warning(
                    "plan_source_invalid",
                    extra={"intent": intent.category, "errors": validation.errors},
                )
                return None
        return plan

    def rule_based_plan(self, intent: Intent) -> Plan:
        steps: list[PlanStep] = []
        tools_needed: list[str] = []
        base_params = {"intent_category": intent.category}

        selection: ToolSelection | None = None
        if intent.category in _TOOL_CATEGORIES or intent.requires_tooling:
            selection = self._selector.select_for_intent(intent)

        previous: str | None = None
        if intent.category == "command":
            guard = PlanStep(
                id=_new_id(),
                type="policy_check",
                description="Check authorization for command",
                params=dict(base_params),
            )
            steps.append(guard)
            previous = guard.id

        if selection is not None:
            tool_step = PlanStep(
                id=_new_id(),
                type="tool_call",
                description=f"Execute tool {selection.tool_name} for {intent.category}",
                tool_name=selection.tool_name,
                tool_params=dict(selection.parameters),
                tool_reasoning=selection.reasoning,
                dependencies=[previous] if previous else None,
                params=dict(base_params),
            )
            steps.append(tool_step)
            tools_needed.append(selection.tool_name)
            previous = tool_step.id

        if intent.requires_memory:
            memory_step = PlanStep(
                id=_new_id(),
                type="memory_access",
                description="Retrieve relevant memories",
                dependencies=[previous] if previous else None,
                params=dict(base_params),
            )
            steps.append(memory_step)
            previous = memory_step.id

        steps.append(
            PlanStep(
                id=_new_id(),
                type="respond",
                description=self._respond_description(intent, has_tool=selection is not None),
                dependencies=[previous] if previous else None,
                params=dict(base_params),
            )
        )

        plan = Plan(
            steps=steps,
            reasoning=f"Rule-based plan for {intent.category} intent",
            estimated_complexity="simple" if len(steps) <= 2 else "moderate",
            tools_needed=tools_needed,
            memory_access_needed=intent.requires_memory,
        )
        validation = validate_plan(plan)
        if not validation.valid:
            logger.warning("rule_based_plan_invalid", extra={"errors": validation.errors})
        return plan

    @staticmethod
    def _respond_description(intent: Intent, *, has_tool: bool) -> str:
        if intent.category == "query":
            return "Generate response using tool result" if has_tool else "Generate response to query"
        if intent.category == "command":
            return "Execute command and respond"
        if has_tool:
            return "Respond using tool result"
        if intent.category == "conversation":
            return "Respond conversationally"
        return "Ask for clarification"

    def enforce_locked_facts(
        self,
        plan: Plan,
        intent: Intent,
        locked_facts: Sequence[Mapping[str, Any]],
    ) -> Plan:
        if not locked_facts:
            return plan

        active = {rule for rule in LOCKED_RULES if has_locked_rule(locked_facts, rule)}
        updated = plan
        if DO_NOT_REPEAT in active:
            updated = _ensure_policy_check(updated, DO_NOT_REPEAT)

        if (
            NEVER_GUESS in active
            and intent.category == "query"
            and not has_grounding_tool(updated)
        ):
            logger.warning(
                "planner_locked_rule_violation",
                extra={"rule": NEVER_GUESS, "intent": intent.category, "action": "plan_replaced"},
            )
            return refusal_plan(intent, NEVER_GUESS)

        return updated


def _ensure_policy_check(plan: Plan, policy: str) -> Plan:
    if any(step.type == "policy_check" and step.params.get("policy") == policy for step in plan.steps):
        return plan
    guard = PlanStep(
        id=_new_id(),
        type="policy_check",
        description=f"Enforce locked rule: {policy}",
        params={"policy": policy},
    )
    return plan.model_copy(
        update={
            "steps": [guard, *plan.steps],
            "reasoning": f"{plan.reasoning} | policy_check:{policy}",
        }
    )


def refusal_plan(intent: Intent, reason: str) -> Plan:
    """Single respond step that refuses instead of answering."""

    return Plan(
        steps=[
            PlanStep(
                id=_new_id(),
                type="respond",
                description="Refuse or request tools due to locked rule violation",
                params={"intent_category": intent.category, "policy_refusal": reason},
            )
        ],
        reasoning=f"Locked rule enforcement: {reason}",
        estimated_complexity="simple",
        tools_needed=[],
        memory_access_needed=intent.requires_memory,
    )


__all__ = [
    "DO_NOT_REPEAT",
    "LOCKED_RULES",
    "NEVER_GUESS",
    "PlanSource",
    "Planner",
    "extract_locked_facts",
    "has_grounding_tool",
    "has_locked_rule",
    "refusal_plan",
]
