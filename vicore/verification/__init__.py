"""Pluggable verification of tool results."""

from .base import BaseVerifier, VerificationResult, Verifier
from .builtins import (
    DatabaseQueryVerifier,
    FileSystemVerifier,
    HttpRequestVerifier,
    SearchResultVerifier,
    ShellCommandVerifier,
    StatusVerifier,
)
from .registry import VerifierRegistry, register_default_verifiers

__all__ = [
    "BaseVerifier",
    "DatabaseQueryVerifier",
    "FileSystemVerifier",
    "HttpRequestVerifier",
    "SearchResultVerifier",
    "ShellCommandVerifier",
    "StatusVerifier",
    "VerificationResult",
    "Verifier",
    "VerifierRegistry",
    "register_default_verifiers",
]
