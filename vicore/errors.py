"""Exceptions raised by vicore collaborators.

Expected outcomes (invalid plans, denials, failed verification) are returned
as typed results and never raised.
"""

from __future__ import annotations


class VicoreError(RuntimeError):
    """Base class for vicore errors."""


class LockedFactError(VicoreError):
    """Raised when a lower-authority write targets a locked fact."""


class RelationshipNotFoundError(VicoreError, LookupError):
    """Raised when updating a relationship row that does not exist."""


class ToolRegistrationError(VicoreError, ValueError):
    """Raised when a tool spec is malformed or already registered."""


class ToolNotFoundError(VicoreError, LookupError):
    """Raised when changing the state of a tool that is not registered."""


__all__ = [
    "LockedFactError",
    "RelationshipNotFoundError",
    "ToolNotFoundError",
    "ToolRegistrationError",
    "VicoreError",
]
