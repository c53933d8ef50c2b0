"""Authorization and audit."""

from .audit import (
    AuditLog,
    AuditSink,
    NullAuditSink,
    PolicyAction,
    PolicyDecision,
    PolicySeverity,
    PolicyViolation,
)
from .engine import COMMAND_EXECUTION, TOOL_ACTION_PREFIX, PolicyEngine

__all__ = [
    "AuditLog",
    "AuditSink",
    "COMMAND_EXECUTION",
    "NullAuditSink",
    "PolicyAction",
    "PolicyDecision",
    "PolicyEngine",
    "PolicySeverity",
    "PolicyViolation",
    "TOOL_ACTION_PREFIX",
]
