"""Per-user behavioural authority resolution."""

from .facts import InMemoryUserFactStore, UserFactSource, order_facts
from .layers import (
    DEFAULT_LAYERS,
    PostureLayer,
    ResolutionInputs,
    apply_layers,
    explicit_layer,
    guarded_clamp,
    history_layer,
    locked_fact_layer,
)
from .models import (
    DEFAULT_RELATIONSHIP,
    ExplicitSettings,
    HistorySignal,
    RelationshipContext,
    RelationshipPatch,
    RelationshipRow,
    UserFact,
    clamp_trust_level,
    default_context,
    is_relationship_type,
    select_voice_profile,
)
from .repository import InMemoryRelationshipRepository, RelationshipRepository
from .resolver import AuthorityResolver

__all__ = [
    "AuthorityResolver",
    "DEFAULT_LAYERS",
    "DEFAULT_RELATIONSHIP",
    "ExplicitSettings",
    "HistorySignal",
    "InMemoryRelationshipRepository",
    "InMemoryUserFactStore",
    "PostureLayer",
    "RelationshipContext",
    "RelationshipPatch",
    "RelationshipRepository",
    "RelationshipRow",
    "ResolutionInputs",
    "UserFact",
    "UserFactSource",
    "apply_layers",
    "clamp_trust_level",
    "default_context",
    "explicit_layer",
    "guarded_clamp",
    "history_layer",
    "is_relationship_type",
    "locked_fact_layer",
    "order_facts",
    "select_voice_profile",
]
