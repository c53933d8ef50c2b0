"""Tool catalog and invocation interfaces."""

from .catalog import ToolHandler, ToolRegistry, ToolSpec, spec_from_function, tool
from .protocols import (
    ToolCatalog,
    ToolExecutionContext,
    ToolInvocationResult,
    ToolInvoker,
    ToolMetadata,
)

__all__ = [
    "ToolCatalog",
    "ToolExecutionContext",
    "ToolHandler",
    "ToolInvocationResult",
    "ToolInvoker",
    "ToolMetadata",
    "ToolRegistry",
    "ToolSpec",
    "spec_from_function",
    "tool",
]
