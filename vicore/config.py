"""Core configuration models and YAML loading."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped,unused-ignore]
from pydantic import BaseModel, Field, ValidationError, field_validator

BLOCKLIST_ENV_VAR = "POLICY_TOOL_BLOCKLIST"


class PolicyConfig(BaseModel):
    """Policy engine settings."""

    tool_blocklist: frozenset[str] = frozenset()
    audit_log_max_entries: int = Field(default=10_000, ge=1)

    @field_validator("tool_blocklist", mode="before")
    @classmethod
    def _normalise_blocklist(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(item).strip() for item in value if str(item).strip())
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PolicyConfig:
        env = os.environ if environ is None else environ
        return cls(tool_blocklist=env.get(BLOCKLIST_ENV_VAR, ""))


class PlannerConfig(BaseModel):
    max_candidates: int = Field(default=3, ge=1, le=3)
    require_registered_tools: bool = True
    strict_validation: bool = False
    """Discard plan-source plans that fail schema validation."""


class ExecutorConfig(BaseModel):
    tool_timeout_s: float | None = Field(default=None, gt=0)
    """Optional bound on a single tool invocation; a timeout fails that step."""


class RelationshipConfig(BaseModel):
    strict_types: bool = True
    """Accept only ``owner``/``public``; legacy tiers are ignored when set."""

    success_threshold: int = Field(default=3, ge=1)
    success_trust_floor: int = Field(default=50, ge=0, le=100)


class CoreConfig(BaseModel):
    """Top-level configuration for all vicore components."""

    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    planner: PlannerConfig = Field(default_factory=PlannerConfig)
    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    relationship: RelationshipConfig = Field(default_factory=RelationshipConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, env: str | None = None) -> CoreConfig:
        payload = dict(data)
        if env is not None:
            envs = payload.get("environments")
            if isinstance(envs, Mapping) and env in envs:
                payload = _deep_merge(payload, envs[env])
        payload.pop("environments", None)
        _validate_sections(payload)
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise ValueError(f"Invalid vicore config: {_format_errors(exc)}") from exc


def load_core_config(path: str | Path, *, env: str | None = None) -> CoreConfig:
    """Load a YAML config file, applying the ``environments.<env>`` overlay."""

    source = Path(path)
    data = yaml.safe_load(source.read_text(encoding="utf-8"))
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError("Config file must be a mapping")
    return CoreConfig.from_mapping(data, env=env)


def _validate_sections(payload: Mapping[str, Any]) -> None:
    known = set(CoreConfig.model_fields)
    for key, value in payload.items():
        if key not in known:
            raise ValueError(f"Unknown config section: {key}")
        if not isinstance(value, Mapping):
            raise ValueError(f"{key} must be a mapping")


def _format_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{loc}: {error.get('msg')}")
    return "; ".join(parts)


def _deep_merge(base: Mapping[str, Any], overlay: Any) -> dict[str, Any]:
    merged = dict(base)
    if not isinstance(overlay, Mapping):
        return merged
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


__all__ = [
    "BLOCKLIST_ENV_VAR",
    "CoreConfig",
    "ExecutorConfig",
    "PlannerConfig",
    "PolicyConfig",
    "RelationshipConfig",
    "load_core_config",
]
