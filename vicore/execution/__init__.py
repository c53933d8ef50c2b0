"""Plan execution and recovery."""

from .backtracking import BacktrackingExecutor, BacktrackingResult, fallback_plan
from .executor import DEFAULT_OUTPUT, Executor, MemoryAccessor

__all__ = [
    "BacktrackingExecutor",
    "BacktrackingResult",
    "DEFAULT_OUTPUT",
    "Executor",
    "MemoryAccessor",
    "fallback_plan",
]
