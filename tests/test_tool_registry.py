from __future__ import annotations

from typing import Any

import pytest

from vicore.errors import ToolNotFoundError, ToolRegistrationError
from vicore.tools import ToolExecutionContext, ToolInvocationResult, ToolRegistry, ToolSpec, spec_from_function, tool


@tool(name="echo", desc="Echo params back", category="utility", permissions=["read", "read"])
async def echo_handler(params: dict[str, Any], ctx: ToolExecutionContext) -> dict[str, Any]:
    return {"echo": params, "user": ctx.user_id}


def plain_handler(params: dict[str, Any], ctx: ToolExecutionContext) -> str:
    """Return a constant.

    Longer explanation of the handler.
    """

    return "plain"


def test_spec_from_function_uses_metadata() -> None:
    spec = spec_from_function(echo_handler)
    assert spec.name == "echo"
    assert spec.description == "Echo params back"
    assert spec.category == "utility"
    assert tuple(spec.permissions) == ("read",)


def test_spec_from_function_falls_back_to_docstring() -> None:
    spec = spec_from_function(plain_handler)
    assert spec.name == "plain_handler"
    assert spec.description == "Return a constant."
    assert spec.long_description is not None
    assert "Longer explanation" in spec.long_description


def test_register_rejects_duplicates_and_blank_fields() -> None:
    registry = ToolRegistry()
    registry.register_function(echo_handler)

    with pytest.raises(ToolRegistrationError):
        registry.register_function(echo_handler)
    with pytest.raises(ToolRegistrationError):
        registry.register(ToolSpec(name=" ", description="x", handler=plain_handler))
    with pytest.raises(ToolRegistrationError):
        registry.register(ToolSpec(name="blank", description="", handler=plain_handler))


def test_catalog_queries(tool_registry: ToolRegistry) -> None:
    assert tool_registry.exists("get_weather")
    assert not tool_registry.exists("missing")
    metadata = tool_registry.get("get_weather")
    assert metadata is not None and metadata.category == "information"
    assert [item.name for item in tool_registry.by_category("memory")] == ["search_memory"]
    assert [item.name for item in tool_registry.search("weather")] == ["get_weather"]
    assert len(tool_registry) == 4


def test_set_enabled(tool_registry: ToolRegistry) -> None:
    tool_registry.set_enabled("calculate", False)
    assert "calculate" not in [item.name for item in tool_registry.list_enabled()]
    assert tool_registry.exists("calculate")

    with pytest.raises(ToolNotFoundError):
        tool_registry.set_enabled("missing", True)


@pytest.mark.asyncio
async def test_execute_wraps_plain_return_values() -> None:
    registry = ToolRegistry()
    registry.register_function(echo_handler)
    registry.register_function(plain_handler)
    ctx = ToolExecutionContext(user_id="u1")

    result = await registry.execute("echo", {"a": 1}, ctx)
    assert result.success is True
    assert result.status == "success"
    assert result.data == {"echo": {"a": 1}, "user": "u1"}

    sync_result = await registry.execute("plain_handler", {}, ctx)
    assert sync_result.data == "plain"


@pytest.mark.asyncio
async def test_execute_passes_through_invocation_results() -> None:
    def failing(params: dict[str, Any], ctx: ToolExecutionContext) -> ToolInvocationResult:
        return ToolInvocationResult(success=False, error="boom", status="rate_limited")

    registry = ToolRegistry([ToolSpec(name="failing", description="Always fails", handler=failing)])
    result = await registry.execute("failing", {}, ToolExecutionContext(user_id="u1"))
    assert result.success is False
    assert result.status == "rate_limited"


@pytest.mark.asyncio
async def test_execute_missing_or_disabled_tool(tool_registry: ToolRegistry) -> None:
    ctx = ToolExecutionContext(user_id="u1")
    missing = await tool_registry.execute("missing", {}, ctx)
    assert missing.success is False
    assert "not found" in (missing.error or "")

    tool_registry.set_enabled("calculate", False)
    disabled = await tool_registry.execute("calculate", {}, ctx)
    assert disabled.success is False
    assert "disabled" in (disabled.error or "")


@pytest.mark.asyncio
async def test_handler_exceptions_propagate() -> None:
    def explode(params: dict[str, Any], ctx: ToolExecutionContext) -> None:
        raise RuntimeError("handler failed")

    registry = ToolRegistry([ToolSpec(name="explode", description="Raises", handler=explode)])
    with pytest.raises(RuntimeError, match="handler failed"):
        await registry.execute("explode", {}, ToolExecutionContext(user_id="u1"))
