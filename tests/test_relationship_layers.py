from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from vicore.errors import LockedFactError
from vicore.relationship import (
    ExplicitSettings,
    HistorySignal,
    InMemoryUserFactStore,
    RelationshipContext,
    ResolutionInputs,
    UserFact,
    apply_layers,
    clamp_trust_level,
    explicit_layer,
    guarded_clamp,
    history_layer,
    order_facts,
    select_voice_profile,
)


def _context(**overrides: object) -> RelationshipContext:
    data: dict[str, object] = {
        "relationship_type": "public",
        "trust_level": 0,
        "interaction_mode": "default",
        "tone_preference": "neutral",
        "voice_profile": "public_elegant",
        "source": "db",
    }
    data.update(overrides)
    return RelationshipContext(**data)


def _fact(key: str, authority: str, *, scope: str = "global", **extra: object) -> UserFact:
    return UserFact(
        fact_id=f"{key}-{authority}",
        vi_user_id="u1",
        fact_key=key,
        authority=authority,
        scope=scope,
        **extra,
    )


def test_clamp_trust_level() -> None:
    assert clamp_trust_level(-10) == 0
    assert clamp_trust_level(150) == 100
    assert clamp_trust_level(42.9) == 42
    assert clamp_trust_level(clamp_trust_level(150)) == 100
    assert clamp_trust_level(float("inf")) == 100
    assert clamp_trust_level(float("-inf")) == 0
    assert clamp_trust_level(float("nan")) == 0


def test_context_clamps_on_construction() -> None:
    assert _context(trust_level=500).trust_level == 100


def test_select_voice_profile() -> None:
    assert select_voice_profile("owner", "default") == "owner_luxury"
    assert select_voice_profile("owner", "guarded") == "public_elegant"
    assert select_voice_profile("public", "companion") == "public_elegant"


def test_history_layer_raises_trust_floor() -> None:
    signals = [HistorySignal(type="session_success") for _ in range(3)]
    updated = history_layer(_context(trust_level=10), ResolutionInputs(history=signals))
    assert updated is not None
    assert updated.trust_level == 50

    untouched = history_layer(_context(trust_level=80), ResolutionInputs(history=signals))
    assert untouched is None


def test_history_layer_skipped_with_explicit_settings() -> None:
    inputs = ResolutionInputs(
        history=[HistorySignal(type="console_owner")],
        explicit=ExplicitSettings(tone_preference="formal"),
    )
    assert history_layer(_context(), inputs) is None


def test_history_layer_keeps_guarded_mode() -> None:
    inputs = ResolutionInputs(history=[HistorySignal(type="console_owner")])
    updated = history_layer(_context(interaction_mode="guarded"), inputs)
    assert updated is not None
    assert updated.relationship_type == "owner"
    assert updated.interaction_mode == "guarded"
    assert updated.voice_profile == "public_elegant"


def test_explicit_layer_computes_voice_and_clamps() -> None:
    inputs = ResolutionInputs(explicit=ExplicitSettings(relationship_type="owner", trust_level=250))
    updated = explicit_layer(_context(), inputs)
    assert updated is not None
    assert updated.relationship_type == "owner"
    assert updated.voice_profile == "owner_luxury"
    assert updated.trust_level == 100
    assert updated.source == "explicit"


def test_explicit_layer_ignores_legacy_tier_in_strict_mode() -> None:
    inputs = ResolutionInputs(explicit=ExplicitSettings(relationship_type="restricted"))
    assert explicit_layer(_context(), inputs) is None


def test_guarded_clamp_never_touches_relationship_type() -> None:
    context = _context(
        relationship_type="owner",
        interaction_mode="guarded",
        tone_preference="playful",
        voice_profile="owner_luxury",
    )
    clamped = guarded_clamp(context, ResolutionInputs())
    assert clamped is not None
    assert clamped.relationship_type == "owner"
    assert clamped.voice_profile == "public_elegant"
    assert clamped.tone_preference == "neutral"
    assert guarded_clamp(_context(), ResolutionInputs()) is None


def test_apply_layers_runs_in_order() -> None:
    seen: list[str] = []

    def first(context: RelationshipContext, inputs: ResolutionInputs) -> RelationshipContext:
        seen.append("first")
        return context.model_copy(update={"tone_preference": "warm"})

    def second(context: RelationshipContext, inputs: ResolutionInputs) -> None:
        seen.append("second")
        return None

    def third(context: RelationshipContext, inputs: ResolutionInputs) -> RelationshipContext:
        seen.append("third")
        return context.model_copy(update={"tone_preference": "formal", "trust_level": 900})

    result = apply_layers(_context(), ResolutionInputs(), [first, second, third])
    assert seen == ["first", "second", "third"]
    assert result.tone_preference == "formal"
    assert result.trust_level == 100


@pytest.mark.asyncio
async def test_fact_store_orders_by_authority_then_recency() -> None:
    store = InMemoryUserFactStore()
    await store.upsert_fact(_fact("tone", "inferred"))
    await store.upsert_fact(_fact("nickname", "explicit"))
    await store.upsert_fact(_fact("never_guess", "locked"))
    await store.upsert_fact(_fact("mood", "ephemeral"))
    await store.upsert_fact(_fact("language", "explicit"))

    ordered = await store.list_facts_ordered("u1")
    assert [fact.authority for fact in ordered] == ["locked", "explicit", "explicit", "inferred", "ephemeral"]

    locked = await store.list_locked_facts("u1")
    assert [fact.fact_key for fact in locked] == ["never_guess"]


@pytest.mark.asyncio
async def test_fact_store_protects_locked_facts() -> None:
    store = InMemoryUserFactStore()
    await store.upsert_fact(_fact("relationship_type", "locked", value={"type": "owner"}))

    with pytest.raises(LockedFactError):
        await store.upsert_fact(_fact("relationship_type", "explicit", value={"type": "public"}))

    replaced = await store.upsert_fact(_fact("relationship_type", "locked", value={"type": "public"}))
    assert replaced.value == {"type": "public"}

    other_scope = await store.upsert_fact(_fact("relationship_type", "explicit", scope="session"))
    assert other_scope.scope == "session"

    assert await store.revoke_fact("u1", "relationship_type") is True
    assert await store.revoke_fact("u1", "relationship_type") is False


@pytest.mark.asyncio
async def test_fact_store_excludes_expired_facts() -> None:
    store = InMemoryUserFactStore()
    past = datetime.now(UTC) - timedelta(minutes=1)
    await store.upsert_fact(_fact("stale", "ephemeral", expires_at=past))
    await store.upsert_fact(_fact("fresh", "ephemeral"))

    keys = [fact.fact_key for fact in await store.list_facts_ordered("u1")]
    assert keys == ["fresh"]


def test_order_facts_prefers_recent_within_authority() -> None:
    now = datetime.now(UTC)
    older = _fact("nickname", "explicit", updated_at=now - timedelta(hours=1))
    newer = _fact("language", "explicit", updated_at=now)
    locked = _fact("never_guess", "locked", updated_at=now - timedelta(days=1))

    ordered = order_facts([older, newer, locked])
    assert [fact.fact_key for fact in ordered] == ["never_guess", "language", "nickname"]
