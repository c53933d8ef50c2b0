"""Registry mapping tool names and verifier types to verifiers."""

from __future__ import annotations

import logging
from typing import Any

from .base import VerificationResult, Verifier
from .builtins import (
    DatabaseQueryVerifier,
    FileSystemVerifier,
    HttpRequestVerifier,
    SearchResultVerifier,
    ShellCommandVerifier,
    StatusVerifier,
)

logger = logging.getLogger("vicore.verification")


class VerifierRegistry:
    """Two keyed tables: per-tool verifiers and generic verifier types.

    Lookups never fall back between tables. Callers that want a default
    when nothing is registered use :attr:`default`, which mirrors the
    tool's own status.
    """

    def __init__(self, default: Verifier | None = None) -> None:
        self._tool_verifiers: dict[str, Verifier] = {}
        self._generic_verifiers: dict[str, Verifier] = {}
        self.default: Verifier = default or StatusVerifier()

    def register(self, tool_name: str, verifier: Verifier) -> None:
        self._tool_verifiers[tool_name] = verifier

    def get(self, tool_name: str) -> Verifier | None:
        return self._tool_verifiers.get(tool_name)

    def register_generic(self, verifier_type: str, verifier: Verifier) -> None:
        self._generic_verifiers[verifier_type] = verifier

    def get_generic(self, verifier_type: str) -> Verifier | None:
        return self._generic_verifiers.get(verifier_type)

    def resolve(self, tool_name: str, verifier_type: str | None = None) -> Verifier | None:
        """An explicit verifier type wins over the tool-name lookup."""

        if verifier_type:
            return self.get_generic(verifier_type)
        return self.get(tool_name)

    async def verify(self, tool_name: str, result: Any, expected: Any = None) -> VerificationResult:
        verifier = self.get(tool_name)
        if verifier is None:
            return VerificationResult(passed=False, errors=[f"No verifier registered for tool: {tool_name}"])
        return await verifier.verify(result, expected)

    async def verify_generic(self, verifier_type: str, result: Any, expected: Any = None) -> VerificationResult:
        verifier = self.get_generic(verifier_type)
        if verifier is None:
            return VerificationResult(
                passed=False,
                errors=[f"No generic verifier registered for type: {verifier_type}"],
            )
        return await verifier.verify(result, expected)

    def list_tool_verifiers(self) -> list[str]:
        return list(self._tool_verifiers)

    def list_generic_verifiers(self) -> list[str]:
        return list(self._generic_verifiers)


def _default_verifiers() -> list[tuple[str, Verifier]]:
    return [
        ("search", SearchResultVerifier()),
        ("shell", ShellCommandVerifier()),
        ("http", HttpRequestVerifier()),
        ("database", DatabaseQueryVerifier()),
        ("filesystem", FileSystemVerifier()),
    ]


def register_default_verifiers(registry: VerifierRegistry) -> VerifierRegistry:
    """Register the built-ins under tool names and generic types, keeping existing entries."""

    added: list[str] = []
    for key, verifier in _default_verifiers():
        if registry.get(key) is None:
            registry.register(key, verifier)
            added.append(key)
        if registry.get_generic(key) is None:
            registry.register_generic(key, verifier)
    if added:
        logger.debug("default_verifiers_registered", extra={"tools": added})
    return registry


__all__ = ["VerifierRegistry", "register_default_verifiers"]
