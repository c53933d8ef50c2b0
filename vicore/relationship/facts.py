"""User fact source interface and in-memory store."""

from __future__ import annotations

import asyncio
import uuid
from datetime import UTC, datetime
from typing import Protocol

from ..errors import LockedFactError
from .models import AUTHORITY_ORDER, FactScope, UserFact

_AUTHORITY_RANK = {authority: index for index, authority in enumerate(AUTHORITY_ORDER)}


def order_facts(facts: list[UserFact]) -> list[UserFact]:
    """Locked before explicit before inferred before ephemeral, newest first."""

    by_recency = sorted(facts, key=lambda fact: fact.updated_at, reverse=True)
    return sorted(by_recency, key=lambda fact: _AUTHORITY_RANK.get(fact.authority, len(AUTHORITY_ORDER)))


class UserFactSource(Protocol):
    async def list_locked_facts(self, user_id: str) -> list[UserFact]: ...

    async def list_facts_ordered(self, user_id: str) -> list[UserFact]: ...


class InMemoryUserFactStore:
    """Fact store keyed by ``(user, fact_key, scope)``."""

    def __init__(self) -> None:
        self._facts: dict[tuple[str, str, str], UserFact] = {}
        self._lock = asyncio.Lock()

    def _live(self, user_id: str) -> list[UserFact]:
        now = datetime.now(UTC)
        return [
            fact
            for (owner, _key, _scope), fact in self._facts.items()
            if owner == user_id and not fact.is_expired(now)
        ]

    async def list_by_user(self, user_id: str) -> list[UserFact]:
        return sorted(self._live(user_id), key=lambda fact: fact.updated_at, reverse=True)

    async def list_locked_facts(self, user_id: str) -> list[UserFact]:
        facts = [fact for fact in self._live(user_id) if fact.authority == "locked"]
        return sorted(facts, key=lambda fact: fact.updated_at, reverse=True)

    async def list_facts_ordered(self, user_id: str) -> list[UserFact]:
        return order_facts(self._live(user_id))

    async def upsert_fact(self, fact: UserFact) -> UserFact:
        key = (fact.vi_user_id, fact.fact_key, fact.scope)
        async with self._lock:
            existing = self._facts.get(key)
            if existing is not None and existing.authority == "locked" and fact.authority != "locked":
                raise LockedFactError(
                    f"Locked fact '{fact.fact_key}' cannot be overridden by {fact.authority} authority"
                )
            now = datetime.now(UTC)
            stored = fact.model_copy(
                update={
                    "fact_id": existing.fact_id if existing is not None else (fact.fact_id or uuid.uuid4().hex),
                    "created_at": existing.created_at if existing is not None else fact.created_at,
                    "updated_at": now,
                }
            )
            self._facts[key] = stored
            return stored

    async def revoke_fact(self, user_id: str, fact_key: str, scope: FactScope = "global") -> bool:
        async with self._lock:
            return self._facts.pop((user_id, fact_key, scope), None) is not None


__all__ = ["InMemoryUserFactStore", "UserFactSource", "order_facts"]
