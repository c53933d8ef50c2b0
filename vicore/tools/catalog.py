"""In-memory tool catalog and invoker."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, cast

from ..errors import ToolNotFoundError, ToolRegistrationError
from .protocols import ToolExecutionContext, ToolInvocationResult, ToolMetadata

logger = logging.getLogger("vicore.tools")

ToolHandler = Callable[[dict[str, Any], ToolExecutionContext], Awaitable[Any] | Any]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Structured metadata describing an invocable tool."""

    name: str
    description: str
    handler: ToolHandler
    category: str = "general"
    permissions: Sequence[str] = field(default_factory=tuple)
    enabled: bool = True
    long_description: str | None = None

    def to_metadata(self) -> ToolMetadata:
        return ToolMetadata(
            name=self.name,
            description=self.description,
            category=self.category,
            enabled=self.enabled,
            permissions=list(self.permissions),
        )


def _normalise_sequence(value: Sequence[str] | None) -> tuple[str, ...]:
    if value is None:
        return ()
    return tuple(dict.fromkeys(value))


def tool(
    *,
    name: str | None = None,
    desc: str | None = None,
    category: str = "general",
    permissions: Sequence[str] | None = None,
    enabled: bool = True,
) -> Callable[[ToolHandler], ToolHandler]:
    """Annotate a handler function with catalog metadata."""

    payload: dict[str, Any] = {
        "name": name,
        "desc": desc,
        "category": category,
        "permissions": _normalise_sequence(permissions),
        "enabled": enabled,
    }

    def decorator(func: ToolHandler) -> ToolHandler:
        func_ref = cast(Any, func)
        func_ref.__vicore_tool__ = payload
        return func

    return decorator


def spec_from_function(func: ToolHandler) -> ToolSpec:
    """Derive a :class:`ToolSpec` from a (possibly decorated) handler."""

    raw: Mapping[str, Any] = getattr(func, "__vicore_tool__", None) or {}
    func_name = getattr(func, "__name__", "tool")
    doc = inspect.getdoc(func)
    return ToolSpec(
        name=raw.get("name") or func_name,
        description=raw.get("desc") or (doc.splitlines()[0] if doc else func_name),
        handler=func,
        category=raw.get("category", "general"),
        permissions=tuple(raw.get("permissions", ())),
        enabled=raw.get("enabled", True),
        long_description=doc,
    )


class ToolRegistry:
    """Central catalog of registered tools; also acts as the invoker."""

    def __init__(self, specs: Sequence[ToolSpec] = ()) -> None:
        self._specs: dict[str, ToolSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: ToolSpec) -> None:
        if not spec.name or not spec.name.strip():
            raise ToolRegistrationError("Tool must have a non-empty name")
        if spec.name in self._specs:
            raise ToolRegistrationError(f"Tool '{spec.name}' is already registered")
        if not spec.description or not spec.description.strip():
            raise ToolRegistrationError(f"Tool '{spec.name}' must have a description")
        if not callable(spec.handler):
            raise ToolRegistrationError(f"Tool '{spec.name}' handler must be callable")
        self._specs[spec.name] = spec

    def register_function(self, func: ToolHandler) -> ToolSpec:
        spec = spec_from_function(func)
        self.register(spec)
        return spec

    def unregister(self, name: str) -> bool:
        return self._specs.pop(name, None) is not None

    def set_enabled(self, name: str, enabled: bool) -> ToolSpec:
        spec = self._specs.get(name)
        if spec is None:
            raise ToolNotFoundError(f"Tool '{name}' is not registered")
        updated = replace(spec, enabled=enabled)
        self._specs[name] = updated
        return updated

    def exists(self, name: str) -> bool:
        return name in self._specs

    def get(self, name: str) -> ToolMetadata | None:
        spec = self._specs.get(name)
        return spec.to_metadata() if spec is not None else None

    def get_spec(self, name: str) -> ToolSpec | None:
        return self._specs.get(name)

    def list_metadata(self) -> list[ToolMetadata]:
        return [spec.to_metadata() for spec in self._specs.values()]

    def list_enabled(self) -> list[ToolMetadata]:
        return [spec.to_metadata() for spec in self._specs.values() if spec.enabled]

    def by_category(self, category: str) -> list[ToolMetadata]:
        return [spec.to_metadata() for spec in self._specs.values() if spec.category == category]

    def search(self, keyword: str) -> list[ToolMetadata]:
        needle = keyword.lower()
        matches: list[ToolMetadata] = []
        for spec in self._specs.values():
            haystacks = (spec.name, spec.description, spec.long_description or "")
            if any(needle in text.lower() for text in haystacks):
                matches.append(spec.to_metadata())
        return matches

    def __len__(self) -> int:
        return len(self._specs)

    async def execute(
        self,
        name: str,
        params: dict[str, Any],
        context: ToolExecutionContext,
    ) -> ToolInvocationResult:
        spec = self._specs.get(name)
        if spec is None:
            return ToolInvocationResult(success=False, error=f"Tool '{name}' not found", status="failure")
        if not spec.enabled:
            return ToolInvocationResult(success=False, error=f"Tool '{name}' is disabled", status="failure")

        logger.debug("tool_invoke", extra={"tool": name, "user_id": context.user_id})
        outcome = spec.handler(dict(params), context)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        if isinstance(outcome, ToolInvocationResult):
            return outcome
        return ToolInvocationResult(success=True, data=outcome, status="success")


__all__ = ["ToolHandler", "ToolRegistry", "ToolSpec", "spec_from_function", "tool"]
