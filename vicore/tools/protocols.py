"""Collaborator protocols for tool lookup and invocation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import BaseModel, Field

from ..types import ToolStatus


class ToolMetadata(BaseModel):
    """Discovery record for a registered tool."""

    name: str
    description: str
    category: str = "general"
    enabled: bool = True
    permissions: list[str] = Field(default_factory=list)


class ToolInvocationResult(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None
    status: ToolStatus | None = None
    citations: list[dict[str, Any]] | None = None


@dataclass(slots=True, frozen=True)
class ToolExecutionContext:
    """Per-call context handed to the invoker."""

    user_id: str
    session_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class ToolCatalog(Protocol):
    """Tool-existence oracle."""

    def exists(self, name: str) -> bool: ...

    def get(self, name: str) -> ToolMetadata | None: ...

    def list_metadata(self) -> Sequence[ToolMetadata]: ...


class ToolInvoker(Protocol):
    """Tool-invocation oracle."""

    async def execute(
        self,
        name: str,
        params: dict[str, Any],
        context: ToolExecutionContext,
    ) -> ToolInvocationResult: ...


__all__ = [
    "ToolCatalog",
    "ToolExecutionContext",
    "ToolInvocationResult",
    "ToolInvoker",
    "ToolMetadata",
]
