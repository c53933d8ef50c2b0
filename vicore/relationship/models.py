"""Relationship posture models.

Posture is deterministic: the default is always ``public`` and only explicit
signals promote a user to ``owner``. Posture affects tone and voice, never
factual content.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# owner|public is the strict model; trusted|normal|restricted are legacy tiers.
RelationshipType = Literal["owner", "public", "trusted", "normal", "restricted"]
InteractionMode = Literal["default", "guarded", "assistant", "companion", "operator", "lorekeeper"]
TonePreference = Literal["neutral", "direct", "warm", "formal", "elegant", "playful"]
VoiceProfile = Literal["public_elegant", "owner_luxury"]
ContextSource = Literal["locked_fact", "explicit", "db", "db_default"]

FactAuthority = Literal["locked", "explicit", "inferred", "ephemeral"]
FactScope = Literal["global", "project", "session"]
FactType = Literal["rule", "preference", "context", "history"]
FactSource = Literal["user", "system", "correction"]

STRICT_RELATIONSHIP_TYPES: frozenset[str] = frozenset({"owner", "public"})
LEGACY_RELATIONSHIP_TYPES: frozenset[str] = frozenset({"owner", "trusted", "normal", "restricted"})
AUTHORITY_ORDER: tuple[str, ...] = ("locked", "explicit", "inferred", "ephemeral")


def _utc_now() -> datetime:
    return datetime.now(UTC)


def clamp_trust_level(level: float) -> int:
    """Clamp a trust score into ``[0, 100]``. NaN counts as no trust."""

    if math.isnan(level):
        return 0
    return math.floor(max(0.0, min(100.0, level)))


def is_relationship_type(value: Any, *, strict: bool = True) -> bool:
    if not isinstance(value, str):
        return False
    if strict:
        return value in STRICT_RELATIONSHIP_TYPES
    return value in STRICT_RELATIONSHIP_TYPES or value in LEGACY_RELATIONSHIP_TYPES


def select_voice_profile(relationship_type: str, interaction_mode: str) -> VoiceProfile:
    if interaction_mode == "guarded":
        return "public_elegant"
    return "owner_luxury" if relationship_type == "owner" else "public_elegant"


class RelationshipContext(BaseModel):
    """Resolved behavioural posture for one user."""

    relationship_type: RelationshipType
    trust_level: int
    interaction_mode: InteractionMode
    tone_preference: TonePreference
    voice_profile: VoiceProfile
    computed_at: str = Field(default_factory=lambda: _utc_now().isoformat())
    source: ContextSource

    @field_validator("trust_level", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return clamp_trust_level(float(value))


class RelationshipRow(BaseModel):
    """Persisted posture row."""

    vi_user_id: str
    relationship_type: RelationshipType = "public"
    trust_level: int = 0
    tone_preference: TonePreference = "neutral"
    voice_profile: VoiceProfile = "public_elegant"
    interaction_mode: InteractionMode = "default"
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    @field_validator("trust_level", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return clamp_trust_level(float(value))


class RelationshipPatch(BaseModel):
    """Partial update for a persisted row."""

    relationship_type: RelationshipType | None = None
    trust_level: float | None = None
    tone_preference: TonePreference | None = None
    voice_profile: VoiceProfile | None = None
    interaction_mode: InteractionMode | None = None


class ExplicitSettings(BaseModel):
    """One-off posture override supplied by the caller; never persisted."""

    relationship_type: RelationshipType | None = None
    trust_level: float | None = None
    tone_preference: TonePreference | None = None
    voice_profile: VoiceProfile | None = None
    interaction_mode: InteractionMode | None = None


class HistorySignal(BaseModel):
    type: str
    timestamp: datetime = Field(default_factory=_utc_now)
    data: dict[str, Any] = Field(default_factory=dict)


class UserFact(BaseModel):
    model_config = ConfigDict(frozen=True)

    fact_id: str
    vi_user_id: str
    fact_key: str
    fact_type: FactType = "rule"
    authority: FactAuthority
    scope: FactScope = "global"
    value: dict[str, Any] = Field(default_factory=dict)
    confidence: float = 1.0
    source: FactSource = "user"
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or _utc_now())


DEFAULT_RELATIONSHIP: dict[str, Any] = {
    "relationship_type": "public",
    "trust_level": 0,
    "tone_preference": "neutral",
    "voice_profile": "public_elegant",
    "interaction_mode": "default",
}


def default_context() -> RelationshipContext:
    """Safe public posture used for new users and degraded resolution."""

    return RelationshipContext(**DEFAULT_RELATIONSHIP, source="db_default")


__all__ = [
    "AUTHORITY_ORDER",
    "ContextSource",
    "DEFAULT_RELATIONSHIP",
    "ExplicitSettings",
    "FactAuthority",
    "FactScope",
    "FactSource",
    "FactType",
    "HistorySignal",
    "InteractionMode",
    "RelationshipContext",
    "RelationshipPatch",
    "RelationshipRow",
    "RelationshipType",
    "TonePreference",
    "UserFact",
    "VoiceProfile",
    "clamp_trust_level",
    "default_context",
    "is_relationship_type",
    "select_voice_profile",
]
