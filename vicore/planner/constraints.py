"""Static structural analysis of plans."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

from ..tools.protocols import ToolCatalog
from ..types import Plan, PlanStep
from .schema import validate_plan

ConstraintIssueType = Literal["validation", "dependency", "cycle", "tool", "structure"]


@dataclass(slots=True, frozen=True)
class ConstraintIssue:
    type: ConstraintIssueType
    message: str
    step_id: str | None = None


@dataclass(slots=True)
class ConstraintAnalysis:
    issues: list[ConstraintIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues

    def has(self, issue_type: ConstraintIssueType) -> bool:
        return any(issue.type == issue_type for issue in self.issues)


class ConstraintSolver:
    """Collects every structural issue in a plan in a single pass.

    Issues are reported, never fixed: unknown dependencies, duplicate ids,
    unregistered tools and dependency cycles all leave the plan untouched.
    """

    def __init__(self, catalog: ToolCatalog | None = None, *, require_registered_tools: bool = True) -> None:
        self._catalog = catalog
        self._require_registered_tools = require_registered_tools and catalog is not None

    def analyze(self, plan: Plan) -> ConstraintAnalysis:
        issues: list[ConstraintIssue] = []

        validation = validate_plan(plan)
        issues.extend(ConstraintIssue(type="validation", message=message) for message in validation.errors)

        known: set[str] = set()
        for step in plan.steps:
            if step.id in known:
                issues.append(
                    ConstraintIssue(
                        type="structure",
                        message=f"Duplicate step id detected: {step.id}",
                        step_id=step.id,
                    )
                )
            known.add(step.id)

        for step in plan.steps:
            for dep in step.dependencies or ():
                if dep not in known:
                    issues.append(
                        ConstraintIssue(
                            type="dependency",
                            message=f"Missing dependency {dep} for step {step.id}",
                            step_id=step.id,
                        )
                    )

        if self._require_registered_tools:
            assert self._catalog is not None
            for step in plan.steps:
                if step.type == "tool_call" and step.tool_name and not self._catalog.exists(step.tool_name):
                    issues.append(
                        ConstraintIssue(
                            type="tool",
                            message=f"Tool not registered: {step.tool_name}",
                            step_id=step.id,
                        )
                    )

        cycle = detect_cycle(plan.steps)
        if cycle is not None:
            issues.append(cycle)

        return ConstraintAnalysis(issues=issues)


def detect_cycle(steps: list[PlanStep]) -> ConstraintIssue | None:
    """Depth-first search with an active-stack set; reports the first back edge."""

    graph: dict[str, list[str]] = {}
    for step in steps:
        graph[step.id] = list(step.dependencies or ())

    visited: set[str] = set()
    active: set[str] = set()

    # Iterative DFS over (node, remaining deps) pairs.
    for root in graph:
        if root in visited:
            continue
        visited.add(root)
        active.add(root)
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(graph[root]))]
        while stack:
            node, deps = stack[-1]
            dep = next(deps, None)
            if dep is None:
                active.discard(node)
                stack.pop()
                continue
            if dep in active:
                return ConstraintIssue(type="cycle", message="Cyclic dependency detected in plan", step_id=root)
            if dep in visited:
                continue
            visited.add(dep)
            active.add(dep)
            stack.append((dep, iter(graph.get(dep, ()))))
    return None


__all__ = ["ConstraintAnalysis", "ConstraintIssue", "ConstraintIssueType", "ConstraintSolver", "detect_cycle"]
