from __future__ import annotations

import textwrap

import pytest

from vicore.config import CoreConfig, PolicyConfig, load_core_config


def test_defaults() -> None:
    config = CoreConfig()
    assert config.policy.tool_blocklist == frozenset()
    assert config.policy.audit_log_max_entries == 10_000
    assert config.planner.max_candidates == 3
    assert config.planner.require_registered_tools is True
    assert config.executor.tool_timeout_s is None
    assert config.relationship.success_threshold == 3
    assert config.relationship.success_trust_floor == 50


def test_load_core_config_env_override(tmp_path) -> None:
    content = textwrap.dedent(
        """
        policy:
          tool_blocklist: ["shell"]
        planner:
          max_candidates: 3
        environments:
          dev:
            policy:
              tool_blocklist: ["shell", "http"]
            planner:
              max_candidates: 1
        """
    )
    path = tmp_path / "vicore.yaml"
    path.write_text(content, encoding="utf-8")

    base = load_core_config(path)
    assert base.policy.tool_blocklist == frozenset({"shell"})
    assert base.planner.max_candidates == 3

    dev = load_core_config(path, env="dev")
    assert dev.policy.tool_blocklist == frozenset({"shell", "http"})
    assert dev.planner.max_candidates == 1


def test_load_core_config_empty_file(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_core_config(path) == CoreConfig()


def test_unknown_section_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown config section: telemetry"):
        CoreConfig.from_mapping({"telemetry": {}})


def test_invalid_value_names_key() -> None:
    with pytest.raises(ValueError, match="max_candidates"):
        CoreConfig.from_mapping({"planner": {"max_candidates": 7}})


def test_non_mapping_file_rejected(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_core_config(path)


def test_policy_config_from_env() -> None:
    config = PolicyConfig.from_env({"POLICY_TOOL_BLOCKLIST": "shell, http ,,"})
    assert config.tool_blocklist == frozenset({"shell", "http"})
    assert PolicyConfig.from_env({}).tool_blocklist == frozenset()
