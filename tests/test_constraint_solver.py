from __future__ import annotations

from vicore.planner import ConstraintSolver, validate_plan
from vicore.tools import ToolRegistry
from vicore.types import Plan, PlanStep


def _step(step_id: str, step_type: str = "respond", **kwargs: object) -> PlanStep:
    return PlanStep(id=step_id, type=step_type, description=f"step {step_id}", **kwargs)


def _plan(*steps: PlanStep) -> Plan:
    return Plan(steps=list(steps), reasoning="test plan")


def test_empty_plan_is_rejected() -> None:
    plan = Plan(steps=[], reasoning="nothing to do")

    validation = validate_plan(plan)
    assert validation.valid is False
    assert validation.errors

    analysis = ConstraintSolver().analyze(plan)
    assert analysis.valid is False
    assert analysis.has("validation")


def test_schema_errors_are_formatted() -> None:
    validation = validate_plan({"steps": [{"id": "", "type": "respond", "description": "x"}], "reasoning": ""})
    assert validation.valid is False
    assert any(error.startswith("steps.0.id:") for error in validation.errors)
    assert any(error.startswith("reasoning:") for error in validation.errors)
    assert any(error.startswith("estimated_complexity:") for error in validation.errors)


def test_valid_plan_has_no_issues(tool_registry: ToolRegistry) -> None:
    plan = _plan(
        _step("a", "tool_call", tool_name="get_weather"),
        _step("b", dependencies=["a"]),
    )
    analysis = ConstraintSolver(tool_registry).analyze(plan)
    assert analysis.valid
    assert analysis.issues == []


def test_missing_dependency_is_reported() -> None:
    plan = _plan(_step("a"), _step("b", dependencies=["ghost"]))

    analysis = ConstraintSolver().analyze(plan)

    dependency_issues = [issue for issue in analysis.issues if issue.type == "dependency"]
    assert len(dependency_issues) == 1
    assert dependency_issues[0].step_id == "b"
    assert "ghost" in dependency_issues[0].message
    assert plan.steps[1].dependencies == ["ghost"]


def test_mutual_dependency_is_a_cycle() -> None:
    plan = _plan(_step("a", dependencies=["b"]), _step("b", dependencies=["a"]))

    analysis = ConstraintSolver().analyze(plan)

    cycles = [issue for issue in analysis.issues if issue.type == "cycle"]
    assert len(cycles) == 1
    assert cycles[0].step_id in {"a", "b"}


def test_self_dependency_is_a_cycle() -> None:
    analysis = ConstraintSolver().analyze(_plan(_step("a", dependencies=["a"])))
    assert analysis.has("cycle")


def test_duplicate_ids_are_structure_issues() -> None:
    analysis = ConstraintSolver().analyze(_plan(_step("a"), _step("a")))
    assert [issue.type for issue in analysis.issues] == ["structure"]


def test_unregistered_tool_is_reported(tool_registry: ToolRegistry) -> None:
    plan = _plan(_step("a", "tool_call", tool_name="launch_rockets"), _step("b", dependencies=["a"]))

    strict = ConstraintSolver(tool_registry).analyze(plan)
    assert [issue.type for issue in strict.issues] == ["tool"]
    assert strict.issues[0].step_id == "a"

    relaxed = ConstraintSolver(tool_registry, require_registered_tools=False).analyze(plan)
    assert relaxed.valid


def test_issues_accumulate_in_one_pass(tool_registry: ToolRegistry) -> None:
    plan = _plan(
        _step("a", "tool_call", tool_name="launch_rockets", dependencies=["b"]),
        _step("b", dependencies=["a", "ghost"]),
        _step("c"),
        _step("c"),
    )

    analysis = ConstraintSolver(tool_registry).analyze(plan)

    assert {issue.type for issue in analysis.issues} == {"structure", "dependency", "tool", "cycle"}


def test_long_chain_in_reverse_order_is_analyzed() -> None:
    steps = [_step("s0")] + [_step(f"s{index}", dependencies=[f"s{index - 1}"]) for index in range(1, 1500)]
    plan = _plan(*reversed(steps))

    analysis = ConstraintSolver().analyze(plan)

    assert analysis.valid

    looped = _plan(_step("s0", dependencies=["s1499"]), *reversed(steps[1:]))
    assert ConstraintSolver().analyze(looped).has("cycle")
