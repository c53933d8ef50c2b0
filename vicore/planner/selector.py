"""Deterministic tool selection for rule-based plans."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tools.protocols import ToolCatalog
from ..types import Intent

INTENT_TO_TOOLS: dict[str, tuple[str, ...]] = {
    "query": ("list_tools",),
    "command": ("execute_command", "send_email"),
    "conversation": (),
    "clarification": ("list_tools",),
    "feedback": (),
    "unknown": ("list_tools",),
}

# Order matters: the first keyword found in the description wins.
KEYWORD_TO_TOOL: tuple[tuple[str, str], ...] = (
    ("weather", "get_weather"),
    ("time", "get_current_time"),
    ("calculate", "calculate"),
    ("math", "calculate"),
    ("memory", "search_memory"),
    ("search", "search_memory"),
    ("remember", "store_memory"),
    ("tools", "list_tools"),
    ("help", "list_tools"),
    ("compute", "calculate"),
)

FALLBACK_TOOL = "list_tools"


@dataclass(frozen=True, slots=True)
class ToolSelection:
    tool_name: str
    confidence: float
    reasoning: str
    parameters: dict[str, Any] = field(default_factory=dict)


class ToolSelector:
    """Map intents to enabled catalog tools."""

    def __init__(
        self,
        catalog: ToolCatalog,
        *,
        intent_tools: dict[str, tuple[str, ...]] | None = None,
        keyword_tools: tuple[tuple[str, str], ...] | None = None,
    ) -> None:
        self._catalog = catalog
        self._intent_tools = intent_tools if intent_tools is not None else INTENT_TO_TOOLS
        self._keyword_tools = keyword_tools if keyword_tools is not None else KEYWORD_TO_TOOL

    def _enabled(self, name: str) -> bool:
        metadata = self._catalog.get(name)
        return metadata is not None and metadata.enabled

    def select_for_intent(self, intent: Intent) -> ToolSelection | None:
        description = (intent.description or "").lower()
        for keyword, tool_name in self._keyword_tools:
            if keyword in description and self._enabled(tool_name):
                return ToolSelection(
                    tool_name=tool_name,
                    confidence=0.9,
                    reasoning=f'Keyword "{keyword}" matches tool "{tool_name}"',
                )

        for tool_name in self._intent_tools.get(intent.category, ()):
            if self._enabled(tool_name):
                return ToolSelection(
                    tool_name=tool_name,
                    confidence=0.6,
                    reasoning=f'Intent category "{intent.category}" suggests "{tool_name}"',
                )

        if self._enabled(FALLBACK_TOOL):
            return ToolSelection(
                tool_name=FALLBACK_TOOL,
                confidence=0.3,
                reasoning="No specific tool matched; listing available tools",
            )
        return None

    def select_by_name(self, tool_name: str, parameters: dict[str, Any] | None = None) -> ToolSelection | None:
        if not self._enabled(tool_name):
            return None
        return ToolSelection(
            tool_name=tool_name,
            confidence=1.0,
            reasoning="Explicitly requested",
            parameters=dict(parameters or {}),
        )


__all__ = ["FALLBACK_TOOL", "INTENT_TO_TOOLS", "KEYWORD_TO_TOOL", "ToolSelection", "ToolSelector"]
