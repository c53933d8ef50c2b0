"""Rule-based authorization with audit recording."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..config import PolicyConfig
from .audit import AuditLog, AuditSink, NullAuditSink, PolicyAction, PolicyDecision, PolicyViolation, severity_for

logger = logging.getLogger("vicore.policy")

TOOL_ACTION_PREFIX = "tool:"
COMMAND_EXECUTION = "command_execution"


class PolicyEngine:
    """Authorizes actions and keeps an audit trail of decisions.

    Rules:

    * ``tool:<name>`` is denied when ``name`` is on the blocklist (exact match).
    * ``command_execution`` is denied for an empty user id.
    * Any other action is allowed. Callers that need fail-closed behaviour
      for new action kinds must add a rule here.
    """

    def __init__(
        self,
        config: PolicyConfig | None = None,
        *,
        audit_log: AuditLog | None = None,
        sink: AuditSink | None = None,
    ) -> None:
        self._config = config or PolicyConfig()
        self._blocklist: set[str] = set(self._config.tool_blocklist)
        self._audit_log = audit_log if audit_log is not None else AuditLog(self._config.audit_log_max_entries)
        self._sink: AuditSink = sink if sink is not None else NullAuditSink()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **kwargs: Any) -> PolicyEngine:
        return cls(PolicyConfig.from_env(environ), **kwargs)

    @property
    def blocklist(self) -> frozenset[str]:
        return frozenset(self._blocklist)

    def block_tool(self, tool_name: str) -> None:
        self._blocklist.add(tool_name)

    def unblock_tool(self, tool_name: str) -> None:
        self._blocklist.discard(tool_name)

    async def authorize(self, action: str, user_id: str) -> bool:
        if action.startswith(TOOL_ACTION_PREFIX):
            tool_name = action[len(TOOL_ACTION_PREFIX) :]
            if tool_name in self._blocklist:
                logger.warning("policy_tool_blocked", extra={"tool": tool_name, "user_id": user_id})
                return False
            return True

        if action == COMMAND_EXECUTION:
            if not user_id:
                logger.warning("policy_command_denied", extra={"reason": "missing_user_id"})
                return False
            return True

        return True

    async def check(self, context: Mapping[str, Any] | None = None) -> list[PolicyViolation]:
        # No content rules yet; every context passes.
        return []

    async def record_decision(
        self,
        policy_id: str,
        user_id: str,
        action: PolicyAction,
        reason: str,
    ) -> PolicyDecision:
        decision = PolicyDecision(
            policy_id=policy_id,
            user_id=user_id,
            action=action,
            reason=reason,
            severity=severity_for(action),
        )
        self._audit_log.append(decision)

        try:
            await self._sink.persist(decision)
        except Exception as exc:
            logger.warning(
                "policy_audit_persist_failed",
                extra={"decision_id": decision.decision_id, "error": repr(exc)},
            )

        if action == "deny":
            logger.warning(
                "policy_denied",
                extra={"policy_id": policy_id, "user_id": user_id, "reason": reason},
            )
        else:
            logger.info("policy_decision", extra={"policy_id": policy_id, "user_id": user_id, "action": action})
        return decision

    def get_audit_log(self) -> list[PolicyDecision]:
        return self._audit_log.snapshot()

    def clear_audit_log(self) -> None:
        self._audit_log.clear()


__all__ = ["COMMAND_EXECUTION", "PolicyEngine", "TOOL_ACTION_PREFIX"]
