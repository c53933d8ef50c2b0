"""Ordered posture layers.

Each layer is a pure function ``(context, inputs) -> context | None`` that
overwrites only the fields it owns; ``None`` means the layer did not apply.
Layers run lowest priority first so higher layers win:

1. history heuristics (additive on top of the persisted row)
2. explicit per-call settings
3. locked ``relationship_type`` fact
4. guarded-mode clamp (always last)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .models import (
    ExplicitSettings,
    HistorySignal,
    RelationshipContext,
    UserFact,
    clamp_trust_level,
    is_relationship_type,
    select_voice_profile,
)


@dataclass(slots=True, frozen=True)
class ResolutionInputs:
    facts: Sequence[UserFact] = ()
    explicit: ExplicitSettings | None = None
    history: Sequence[HistorySignal] = ()
    strict_types: bool = True
    success_threshold: int = 3
    success_trust_floor: int = 50


PostureLayer = Callable[[RelationshipContext, ResolutionInputs], RelationshipContext | None]


def locked_relationship_fact(facts: Sequence[UserFact], *, strict: bool = True) -> UserFact | None:
    for fact in facts:
        if fact.fact_key != "relationship_type" or fact.authority != "locked":
            continue
        if is_relationship_type(fact.value.get("type"), strict=strict):
            return fact
    return None


def _has_explicit(inputs: ResolutionInputs) -> bool:
    return inputs.explicit is not None and bool(inputs.explicit.model_dump(exclude_none=True))


def history_layer(context: RelationshipContext, inputs: ResolutionInputs) -> RelationshipContext | None:
    if not inputs.history:
        return None
    if _has_explicit(inputs) or locked_relationship_fact(inputs.facts, strict=inputs.strict_types):
        return None

    updates: dict[str, Any] = {}
    successes = sum(1 for signal in inputs.history if signal.type == "session_success")
    if successes >= inputs.success_threshold and context.trust_level < inputs.success_trust_floor:
        updates["trust_level"] = inputs.success_trust_floor

    if any(signal.type == "console_owner" for signal in inputs.history):
        updates["relationship_type"] = "owner"
        updates["tone_preference"] = "direct"
        # guarded stays guarded; operator mode is only granted outside it
        if context.interaction_mode != "guarded":
            updates["interaction_mode"] = "operator"
        updates["voice_profile"] = select_voice_profile("owner", updates.get("interaction_mode", context.interaction_mode))

    if not updates:
        return None
    return context.model_copy(update=updates)


def explicit_layer(context: RelationshipContext, inputs: ResolutionInputs) -> RelationshipContext | None:
    if not _has_explicit(inputs):
        return None
    assert inputs.explicit is not None
    settings = inputs.explicit.model_dump(exclude_none=True)

    relationship_type = settings.pop("relationship_type", None)
    if relationship_type is not None and not is_relationship_type(relationship_type, strict=inputs.strict_types):
        relationship_type = None

    updates: dict[str, Any] = dict(settings)
    if "trust_level" in updates:
        updates["trust_level"] = clamp_trust_level(updates["trust_level"])
    if relationship_type is not None:
        updates["relationship_type"] = relationship_type
        if "voice_profile" not in updates:
            mode = updates.get("interaction_mode", context.interaction_mode)
            updates["voice_profile"] = select_voice_profile(relationship_type, mode)
    if not updates:
        return None
    updates["source"] = "explicit"
    return context.model_copy(update=updates)


def locked_fact_layer(context: RelationshipContext, inputs: ResolutionInputs) -> RelationshipContext | None:
    fact = locked_relationship_fact(inputs.facts, strict=inputs.strict_types)
    if fact is None:
        return None
    relationship_type = fact.value["type"]
    return context.model_copy(
        update={
            "relationship_type": relationship_type,
            "voice_profile": select_voice_profile(relationship_type, context.interaction_mode),
            "source": "locked_fact",
        }
    )


def guarded_clamp(context: RelationshipContext, inputs: ResolutionInputs) -> RelationshipContext | None:
    del inputs
    if context.interaction_mode != "guarded":
        return None
    return context.model_copy(update={"voice_profile": "public_elegant", "tone_preference": "neutral"})


DEFAULT_LAYERS: tuple[PostureLayer, ...] = (
    history_layer,
    explicit_layer,
    locked_fact_layer,
    guarded_clamp,
)


def apply_layers(
    base: RelationshipContext,
    inputs: ResolutionInputs,
    layers: Sequence[PostureLayer] = DEFAULT_LAYERS,
) -> RelationshipContext:
    context = base
    for layer in layers:
        updated = layer(context, inputs)
        if updated is None:
            continue
        context = updated.model_copy(update={"trust_level": clamp_trust_level(updated.trust_level)})
    return context


__all__ = [
    "DEFAULT_LAYERS",
    "PostureLayer",
    "ResolutionInputs",
    "apply_layers",
    "explicit_layer",
    "guarded_clamp",
    "history_layer",
    "locked_fact_layer",
    "locked_relationship_fact",
]
