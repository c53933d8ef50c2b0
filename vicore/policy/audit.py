"""Policy decision records and the bounded audit log."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal, Protocol
from uuid import uuid4

PolicyAction = Literal["allow", "deny", "require_approval"]
PolicySeverity = Literal["info", "warn", "block"]

DEFAULT_AUDIT_LOG_SIZE = 10_000


def severity_for(action: PolicyAction) -> PolicySeverity:
    return "block" if action == "deny" else "info"


@dataclass(slots=True, frozen=True)
class PolicyDecision:
    """A single recorded authorization outcome."""

    policy_id: str
    user_id: str
    action: PolicyAction
    reason: str
    severity: PolicySeverity = "info"
    decision_id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def name(self) -> str:
        return self.policy_id


@dataclass(slots=True, frozen=True)
class PolicyViolation:
    policy_id: str
    name: str
    severity: PolicySeverity
    reason: str
    action: PolicyAction


class AuditLog:
    """Ring buffer of policy decisions; the oldest entry is evicted first."""

    def __init__(self, max_entries: int = DEFAULT_AUDIT_LOG_SIZE) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._entries: deque[PolicyDecision] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        assert self._entries.maxlen is not None
        return self._entries.maxlen

    def append(self, decision: PolicyDecision) -> None:
        with self._lock:
            self._entries.append(decision)

    def snapshot(self) -> list[PolicyDecision]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class AuditSink(Protocol):
    """Durable destination for decisions (database table, event bus, ...)."""

    async def persist(self, decision: PolicyDecision) -> None: ...


class NullAuditSink:
    async def persist(self, decision: PolicyDecision) -> None:
        return None


__all__ = [
    "AuditLog",
    "AuditSink",
    "DEFAULT_AUDIT_LOG_SIZE",
    "NullAuditSink",
    "PolicyAction",
    "PolicyDecision",
    "PolicySeverity",
    "PolicyViolation",
    "severity_for",
]
