"""Deterministic authority resolution.

Resolution order, highest priority first:

1. locked ``relationship_type`` facts
2. explicit per-call settings
3. the persisted row (a default public row is created when missing)
4. history heuristics, additive on top of (3) only

The guarded-mode clamp runs after all of them. Resolution never infers an
owner tier from chat content and never writes posture back, apart from
creating the default row.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from ..config import RelationshipConfig
from .layers import DEFAULT_LAYERS, PostureLayer, ResolutionInputs, apply_layers
from .models import (
    ExplicitSettings,
    HistorySignal,
    RelationshipContext,
    UserFact,
    default_context,
    is_relationship_type,
)
from .repository import RelationshipRepository

logger = logging.getLogger("vicore.relationship")

_VALID_SOURCES = frozenset({"locked_fact", "explicit", "db", "db_default"})


class AuthorityResolver:
    """Computes a :class:`RelationshipContext` from layered sources."""

    def __init__(
        self,
        repository: RelationshipRepository,
        *,
        config: RelationshipConfig | None = None,
        layers: Sequence[PostureLayer] = DEFAULT_LAYERS,
    ) -> None:
        self._repository = repository
        self._config = config or RelationshipConfig()
        self._layers = tuple(layers)

    async def resolve(
        self,
        user_id: str,
        facts: Sequence[UserFact] = (),
        *,
        explicit: ExplicitSettings | None = None,
        history: Sequence[HistorySignal] = (),
    ) -> RelationshipContext:
        start = time.monotonic()
        try:
            row, was_created = await self._repository.get_or_create_default(user_id)
        except Exception as exc:
            logger.error(
                "relationship_resolve_failed",
                extra={"user_id": user_id, "error": repr(exc)},
                exc_info=exc,
            )
            return default_context()

        base = RelationshipContext(
            relationship_type=row.relationship_type,
            trust_level=row.trust_level,
            interaction_mode=row.interaction_mode,
            tone_preference=row.tone_preference,
            voice_profile=row.voice_profile,
            source="db_default" if was_created else "db",
        )
        inputs = ResolutionInputs(
            facts=tuple(facts),
            explicit=explicit,
            history=tuple(history),
            strict_types=self._config.strict_types,
            success_threshold=self._config.success_threshold,
            success_trust_floor=self._config.success_trust_floor,
        )
        context = apply_layers(base, inputs, self._layers)

        logger.info(
            "relationship_resolved",
            extra={
                "user_id": user_id,
                "relationship_type": context.relationship_type,
                "source": context.source,
                "was_created": was_created,
                "duration_ms": (time.monotonic() - start) * 1000,
            },
        )
        return context

    @staticmethod
    def validate(context: RelationshipContext, *, strict: bool = False) -> None:
        """Raise ``ValueError`` when a context is outside the allowed ranges."""

        if not is_relationship_type(context.relationship_type, strict=strict):
            raise ValueError(f"Invalid relationship_type: {context.relationship_type}")
        if not 0 <= context.trust_level <= 100:
            raise ValueError(f"Invalid trust_level: {context.trust_level} (must be 0-100)")
        if context.source not in _VALID_SOURCES:
            raise ValueError(f"Invalid source: {context.source}")


__all__ = ["AuthorityResolver"]
