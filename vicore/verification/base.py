"""Verifier protocol and shared helpers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(slots=True)
class VerificationResult:
    passed: bool
    errors: list[str] | None = None
    details: dict[str, Any] | None = None


class Verifier(Protocol):
    """Checks that a tool result satisfies an expected contract."""

    name: str

    async def verify(self, result: Any, expected: Any = None) -> VerificationResult: ...


def lookup(source: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key; tool payloads mix snake_case and camelCase."""

    for key in keys:
        if key in source:
            return source[key]
    return default


def has_key(source: Mapping[str, Any], *keys: str) -> bool:
    return any(key in source for key in keys)


class BaseVerifier:
    """Converts unexpected errors in ``check`` into a failed result."""

    name: str = "base"
    label: str = "Result"

    async def verify(self, result: Any, expected: Any = None) -> VerificationResult:
        if not isinstance(result, Mapping):
            return VerificationResult(passed=False, errors=[f"{self.label} result must be an object"])
        criteria: Mapping[str, Any] = expected if isinstance(expected, Mapping) else {}
        try:
            return self.check(result, criteria)
        except Exception as exc:
            return VerificationResult(
                passed=False,
                errors=[f"{self.label} verification error: {exc}"],
            )

    def check(self, result: Mapping[str, Any], expected: Mapping[str, Any]) -> VerificationResult:
        raise NotImplementedError


__all__ = ["BaseVerifier", "VerificationResult", "Verifier", "has_key", "lookup"]
