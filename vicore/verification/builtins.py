"""Built-in verifiers for common tool result shapes.

Every verifier reports malformed input as ``passed=False`` with an error
message. Criteria keys are accepted in snake_case and camelCase
(``min_results``/``minResults``).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..types import ToolCallResult
from .base import BaseVerifier, VerificationResult, has_key, lookup


def _as_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{field_name} must be a number, got {type(value).__name__}")
    return int(value)


class SearchResultVerifier(BaseVerifier):
    name = "search-result"
    label = "Search"

    def check(self, result: Mapping[str, Any], expected: Mapping[str, Any]) -> VerificationResult:
        results = result.get("results")
        if not isinstance(results, list):
            return VerificationResult(passed=False, errors=["Search result must contain results array"])

        if has_key(expected, "min_results", "minResults"):
            minimum = _as_int(lookup(expected, "min_results", "minResults"), "min_results")
            if len(results) < minimum:
                return VerificationResult(
                    passed=False,
                    errors=[f"Expected at least {minimum} results, got {len(results)}"],
                )
        return VerificationResult(passed=True, details={"result_count": len(results)})


class ShellCommandVerifier(BaseVerifier):
    name = "shell-command"
    label = "Shell"

    def check(self, result: Mapping[str, Any], expected: Mapping[str, Any]) -> VerificationResult:
        if not has_key(result, "exit_code", "exitCode"):
            return VerificationResult(passed=False, errors=["Shell result must contain exit_code"])
        exit_code = _as_int(lookup(result, "exit_code", "exitCode"), "exit_code")
        stdout = str(result.get("stdout") or "")
        stderr = result.get("stderr")

        success_code = 0
        if has_key(expected, "success_exit_code", "successExitCode"):
            success_code = _as_int(lookup(expected, "success_exit_code", "successExitCode"), "success_exit_code")
            if exit_code != success_code:
                return VerificationResult(
                    passed=False,
                    errors=[f"Expected exit code {success_code}, got {exit_code}"],
                    details={"stdout": stdout, "stderr": stderr},
                )

        pattern = lookup(expected, "should_match", "shouldMatch")
        if pattern is not None and str(pattern) not in stdout:
            return VerificationResult(
                passed=False,
                errors=[f"Output does not contain: {pattern}"],
                details={"stdout": stdout},
            )

        details = {"exit_code": exit_code, "has_output": bool(stdout), "has_error": bool(stderr)}
        if exit_code != success_code:
            return VerificationResult(
                passed=False,
                errors=[f"Command exited with code {exit_code}"],
                details=details,
            )
        return VerificationResult(passed=True, details=details)


class HttpRequestVerifier(BaseVerifier):
    name = "http-request"
    label = "HTTP"

    def check(self, result: Mapping[str, Any], expected: Mapping[str, Any]) -> VerificationResult:
        if not has_key(result, "status_code", "statusCode"):
            return VerificationResult(passed=False, errors=["HTTP result must contain status_code"])
        status_code = _as_int(lookup(result, "status_code", "statusCode"), "status_code")
        details = {
            "status_code": status_code,
            "has_headers": bool(result.get("headers")),
            "has_body": bool(result.get("body")),
        }

        if has_key(expected, "expected_status_code", "expectedStatusCode"):
            wanted = _as_int(lookup(expected, "expected_status_code", "expectedStatusCode"), "expected_status_code")
            if status_code != wanted:
                return VerificationResult(
                    passed=False,
                    errors=[f"Expected status {wanted}, got {status_code}"],
                    details={"body": result.get("body")},
                )
            return VerificationResult(passed=True, details=details)

        if not 200 <= status_code < 300:
            return VerificationResult(
                passed=False,
                errors=[f"HTTP request failed with status {status_code}"],
                details={"body": result.get("body")},
            )
        return VerificationResult(passed=True, details=details)


class DatabaseQueryVerifier(BaseVerifier):
    name = "database-query"
    label = "Query"

    def check(self, result: Mapping[str, Any], expected: Mapping[str, Any]) -> VerificationResult:
        rows = result.get("rows")
        if not isinstance(rows, list):
            return VerificationResult(passed=False, errors=["Query result must contain rows array"])

        if has_key(expected, "min_rows", "minRows"):
            minimum = _as_int(lookup(expected, "min_rows", "minRows"), "min_rows")
            if len(rows) < minimum:
                return VerificationResult(
                    passed=False,
                    errors=[f"Expected at least {minimum} rows, got {len(rows)}"],
                )
        if has_key(expected, "max_rows", "maxRows"):
            maximum = _as_int(lookup(expected, "max_rows", "maxRows"), "max_rows")
            if len(rows) > maximum:
                return VerificationResult(
                    passed=False,
                    errors=[f"Expected at most {maximum} rows, got {len(rows)}"],
                )
        return VerificationResult(passed=True, details={"row_count": len(rows)})


class FileSystemVerifier(BaseVerifier):
    name = "file-system"
    label = "File"

    def check(self, result: Mapping[str, Any], expected: Mapping[str, Any]) -> VerificationResult:
        if "success" in result and not result["success"]:
            error = result.get("error")
            return VerificationResult(passed=False, errors=[str(error) if error else "File operation failed"])

        if has_key(expected, "should_exist", "shouldExist"):
            should_exist = bool(lookup(expected, "should_exist", "shouldExist"))
            exists = bool(result.get("exists"))
            if exists != should_exist:
                wanted = "exist" if should_exist else "not exist"
                actual = "does" if exists else "does not"
                return VerificationResult(
                    passed=False,
                    errors=[f"Expected file to {wanted}, but it {actual}"],
                )
        return VerificationResult(passed=True, details={"path": result.get("path"), "exists": result.get("exists")})


class StatusVerifier:
    """Default verifier: mirrors the tool's own reported status.

    Accepts a :class:`~vicore.types.ToolCallResult` or a mapping with
    ``status`` and ``error`` keys. A missing status counts as success.
    """

    name = "status"

    async def verify(self, result: Any, expected: Any = None) -> VerificationResult:
        if isinstance(result, ToolCallResult):
            status, error = result.status, result.error
        elif isinstance(result, Mapping):
            status, error = result.get("status"), result.get("error")
        else:
            return VerificationResult(passed=False, errors=["Status result must be a tool call result"])

        passed = status in (None, "success")
        errors = None
        if error:
            errors = [str(error)]
        elif not passed:
            errors = [f"Tool reported status {status}"]
        return VerificationResult(passed=passed, errors=errors, details={"status": status})


__all__ = [
    "DatabaseQueryVerifier",
    "FileSystemVerifier",
    "HttpRequestVerifier",
    "SearchResultVerifier",
    "ShellCommandVerifier",
    "StatusVerifier",
]
