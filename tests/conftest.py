import sys
from pathlib import Path
from typing import Any

import pytest

# Ensure repository root is on sys.path for test imports.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from vicore.tools import ToolExecutionContext, ToolRegistry, tool  # noqa: E402


@tool(desc="List available tools", category="system")
def list_tools(params: dict[str, Any], ctx: ToolExecutionContext) -> dict[str, Any]:
    return {"tools": ["list_tools", "get_weather", "search_memory", "calculate"]}


@tool(desc="Get the weather for a location", category="information")
async def get_weather(params: dict[str, Any], ctx: ToolExecutionContext) -> dict[str, Any]:
    return {"location": params.get("location", "here"), "forecast": "sunny"}


@tool(desc="Search stored memories", category="memory")
async def search_memory(params: dict[str, Any], ctx: ToolExecutionContext) -> dict[str, Any]:
    return {"results": [{"text": "remembered"}]}


@tool(desc="Evaluate an arithmetic expression", category="math")
def calculate(params: dict[str, Any], ctx: ToolExecutionContext) -> dict[str, Any]:
    return {"value": 42}


@pytest.fixture()
def tool_registry() -> ToolRegistry:
    registry = ToolRegistry()
    for handler in (list_tools, get_weather, search_memory, calculate):
        registry.register_function(handler)
    return registry
