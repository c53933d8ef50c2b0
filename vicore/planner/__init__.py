"""Planning: rule-based plans, constraint analysis and candidate ranking."""

from .branching import BranchingPlanner, PlanCandidate, PlanningResult, respond_only_plan, score_plan
from .constraints import ConstraintAnalysis, ConstraintIssue, ConstraintSolver, detect_cycle
from .planner import (
    DO_NOT_REPEAT,
    LOCKED_RULES,
    NEVER_GUESS,
    Planner,
    PlanSource,
    extract_locked_facts,
    refusal_plan,
)
from .schema import PlanValidation, validate_plan
from .selector import ToolSelection, ToolSelector

__all__ = [
    "BranchingPlanner",
    "ConstraintAnalysis",
    "ConstraintIssue",
    "ConstraintSolver",
    "DO_NOT_REPEAT",
    "LOCKED_RULES",
    "NEVER_GUESS",
    "PlanCandidate",
    "PlanSource",
    "PlanValidation",
    "Planner",
    "PlanningResult",
    "ToolSelection",
    "ToolSelector",
    "detect_cycle",
    "extract_locked_facts",
    "refusal_plan",
    "respond_only_plan",
    "score_plan",
    "validate_plan",
]
