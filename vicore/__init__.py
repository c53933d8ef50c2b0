"""Public package surface for vicore."""

from __future__ import annotations

from .config import CoreConfig, load_core_config
from .errors import (
    LockedFactError,
    RelationshipNotFoundError,
    ToolNotFoundError,
    ToolRegistrationError,
    VicoreError,
)
from .execution import BacktrackingExecutor, BacktrackingResult, Executor
from .planner import BranchingPlanner, ConstraintSolver, Planner, PlanningResult
from .policy import AuditLog, PolicyEngine
from .relationship import AuthorityResolver, InMemoryRelationshipRepository, RelationshipContext
from .tools import ToolRegistry, tool
from .types import Execution, Intent, Plan, PlanStep, ReflectionDelta
from .verification import VerifierRegistry, register_default_verifiers

__all__ = [
    "__version__",
    "AuditLog",
    "AuthorityResolver",
    "BacktrackingExecutor",
    "BacktrackingResult",
    "BranchingPlanner",
    "ConstraintSolver",
    "CoreConfig",
    "Execution",
    "Executor",
    "InMemoryRelationshipRepository",
    "Intent",
    "LockedFactError",
    "Plan",
    "PlanStep",
    "Planner",
    "PlanningResult",
    "PolicyEngine",
    "ReflectionDelta",
    "RelationshipContext",
    "RelationshipNotFoundError",
    "ToolNotFoundError",
    "ToolRegistrationError",
    "ToolRegistry",
    "VerifierRegistry",
    "VicoreError",
    "load_core_config",
    "register_default_verifiers",
    "tool",
]

__version__ = "0.1.0"
