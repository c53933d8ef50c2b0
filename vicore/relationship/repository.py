"""Persistence interface for relationship rows."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Protocol

from ..errors import RelationshipNotFoundError
from .models import DEFAULT_RELATIONSHIP, RelationshipPatch, RelationshipRow


class RelationshipRepository(Protocol):
    """Storage for per-user posture rows.

    Updates must come from an authorised caller, never from inference over
    chat content.
    """

    async def get(self, user_id: str) -> RelationshipRow | None: ...

    async def get_or_create_default(self, user_id: str) -> tuple[RelationshipRow, bool]: ...

    async def update(self, user_id: str, patch: RelationshipPatch) -> RelationshipRow: ...

    async def delete(self, user_id: str) -> bool: ...


class InMemoryRelationshipRepository:
    """Process-local repository, suitable for tests and single-node use."""

    def __init__(self) -> None:
        self._rows: dict[str, RelationshipRow] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: str) -> RelationshipRow | None:
        row = self._rows.get(user_id)
        return row.model_copy() if row is not None else None

    async def get_or_create_default(self, user_id: str) -> tuple[RelationshipRow, bool]:
        async with self._lock:
            existing = self._rows.get(user_id)
            if existing is not None:
                return existing.model_copy(), False
            row = RelationshipRow(vi_user_id=user_id, **DEFAULT_RELATIONSHIP)
            self._rows[user_id] = row
            return row.model_copy(), True

    async def update(self, user_id: str, patch: RelationshipPatch) -> RelationshipRow:
        async with self._lock:
            current = self._rows.get(user_id)
            if current is None:
                raise RelationshipNotFoundError(f"No relationship record exists for user {user_id}")
            changes = patch.model_dump(exclude_none=True)
            if not changes:
                return current.model_copy()
            # model_validate re-runs the trust clamp
            updated = RelationshipRow.model_validate(
                {**current.model_dump(), **changes, "updated_at": datetime.now(UTC)}
            )
            self._rows[user_id] = updated
            return updated.model_copy()

    async def delete(self, user_id: str) -> bool:
        async with self._lock:
            return self._rows.pop(user_id, None) is not None


__all__ = ["InMemoryRelationshipRepository", "RelationshipRepository"]
