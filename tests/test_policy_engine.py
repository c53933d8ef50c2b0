from __future__ import annotations

import logging

import pytest

from vicore.config import PolicyConfig
from vicore.policy import AuditLog, PolicyDecision, PolicyEngine


class _RecordingSink:
    def __init__(self) -> None:
        self.persisted: list[PolicyDecision] = []

    async def persist(self, decision: PolicyDecision) -> None:
        self.persisted.append(decision)


class _FailingSink:
    async def persist(self, decision: PolicyDecision) -> None:
        raise ConnectionError("audit table missing")


@pytest.mark.asyncio
async def test_tool_authorization_follows_blocklist() -> None:
    engine = PolicyEngine(PolicyConfig(tool_blocklist=["shell", "http"]))

    assert await engine.authorize("tool:shell", "u1") is False
    assert await engine.authorize("tool:http", "u1") is False
    assert await engine.authorize("tool:search", "u1") is True
    assert await engine.authorize("tool:shell_extended", "u1") is True


@pytest.mark.asyncio
async def test_command_execution_requires_user_id() -> None:
    engine = PolicyEngine()

    assert await engine.authorize("command_execution", "") is False
    assert await engine.authorize("command_execution", "u1") is True
    assert await engine.authorize("memory:read", "") is True


@pytest.mark.asyncio
async def test_blocklist_can_change_at_runtime() -> None:
    engine = PolicyEngine()
    engine.block_tool("shell")
    assert engine.blocklist == frozenset({"shell"})
    assert await engine.authorize("tool:shell", "u1") is False

    engine.unblock_tool("shell")
    assert await engine.authorize("tool:shell", "u1") is True


@pytest.mark.asyncio
async def test_from_env_reads_blocklist() -> None:
    engine = PolicyEngine.from_env({"POLICY_TOOL_BLOCKLIST": "danger, shell"})
    assert engine.blocklist == frozenset({"danger", "shell"})


@pytest.mark.asyncio
async def test_record_decision_severity_and_sink() -> None:
    sink = _RecordingSink()
    engine = PolicyEngine(sink=sink)

    denied = await engine.record_decision("tool_execution", "u1", "deny", "blocked")
    allowed = await engine.record_decision("tool_execution", "u1", "allow", "ok")

    assert denied.severity == "block"
    assert allowed.severity == "info"
    assert [decision.action for decision in engine.get_audit_log()] == ["deny", "allow"]
    assert sink.persisted == [denied, allowed]
    assert denied.decision_id != allowed.decision_id


@pytest.mark.asyncio
async def test_sink_failure_is_swallowed(caplog: pytest.LogCaptureFixture) -> None:
    engine = PolicyEngine(sink=_FailingSink())

    with caplog.at_level(logging.WARNING, logger="vicore.policy"):
        decision = await engine.record_decision("tool_execution", "u1", "allow", "ok")

    assert engine.get_audit_log() == [decision]
    assert any(record.getMessage() == "policy_audit_persist_failed" for record in caplog.records)


@pytest.mark.asyncio
async def test_audit_log_evicts_oldest() -> None:
    engine = PolicyEngine(audit_log=AuditLog(max_entries=3))

    for index in range(5):
        await engine.record_decision(f"p{index}", "u1", "allow", "ok")

    assert [decision.policy_id for decision in engine.get_audit_log()] == ["p2", "p3", "p4"]
    engine.clear_audit_log()
    assert engine.get_audit_log() == []


def test_audit_log_defaults_and_snapshot() -> None:
    log = AuditLog()
    assert log.max_entries == 10_000
    decision = PolicyDecision(policy_id="p", user_id="u", action="allow", reason="ok")
    log.append(decision)
    snapshot = log.snapshot()
    snapshot.clear()
    assert len(log) == 1

    with pytest.raises(ValueError):
        AuditLog(max_entries=0)


@pytest.mark.asyncio
async def test_check_returns_no_violations() -> None:
    assert await PolicyEngine().check({"text": "anything"}) == []


@pytest.mark.asyncio
async def test_injected_empty_audit_log_is_kept() -> None:
    log = AuditLog(max_entries=2)
    engine = PolicyEngine(audit_log=log)

    await engine.record_decision("p0", "u1", "deny", "blocked")

    assert len(log) == 1
    assert log.snapshot()[0].policy_id == "p0"
