"""Tests for agent profile loading and integrity."""

import pytest

from app.config import BASE_DIR
from app.core.agent import AgentProfile, AgentProfileManager
from app.core.agent.profiles import AUTO_PROGRESS_INSTRUCTION


EXPECTED_PROFILES = {"bridging", "transaction", "dex", "utility"}


def test_shipped_profiles_load(profiles):
    assert set(profiles.list_profiles()) == EXPECTED_PROFILES


def test_every_profile_tool_is_registered(profiles, registry):
    for name in EXPECTED_PROFILES:
        for tool in profiles.get_profile(name).tools:
            assert registry.has_tool(tool), f"{name} references {tool}"


def test_info_only_utility_profile(profiles, registry):
    utility = profiles.get_profile("utility")
    assert all(not registry.get_tool(tool).category.is_action for tool in utility.tools)


def test_bridging_profile_defaults(profiles):
    bridging = profiles.get_profile("bridging")
    assert bridging.default_chain_id == 42161
    assert bridging.auto_progress is True
    assert AUTO_PROGRESS_INSTRUCTION in bridging.prompt
    assert "Arbitrum One" in bridging.prompt


def test_auto_progress_off_leaves_prompt_alone(profiles):
    utility = profiles.get_profile("utility")
    assert AUTO_PROGRESS_INSTRUCTION not in utility.prompt


@pytest.mark.parametrize("agent_id", [None, "", "unknown-agent"])
def test_unknown_ids_fall_back_to_default(profiles, agent_id):
    assert profiles.get_profile(agent_id).name == "utility"


def test_unregistered_tool_fails_fast(registry):
    bad = AgentProfile(name="utility", display_name="Bad", system_prompt="x", tools=["get_edu_balance", "launch_rocket"])
    with pytest.raises(ValueError, match="launch_rocket"):
        AgentProfileManager(registry=registry, profiles=[bad], default_profile="utility")


def test_missing_default_profile_fails_fast(registry):
    only = AgentProfile(name="dex", display_name="DEX", system_prompt="x", tools=[])
    with pytest.raises(ValueError, match="utility"):
        AgentProfileManager(registry=registry, profiles=[only], default_profile="utility")


def test_missing_directory_uses_fallback_profiles(registry, tmp_path):
    manager = AgentProfileManager(registry=registry, profiles_dir=tmp_path / "absent", default_profile="utility")
    assert manager.has_profile("utility")
    assert manager.has_profile("bridging")


def test_broken_yaml_file_is_skipped(registry, tmp_path):
    (tmp_path / "broken.yaml").write_text("name: [unterminated\n", encoding="utf-8")
    (tmp_path / "utility.yaml").write_text(
        (BASE_DIR / "profiles" / "utility.yaml").read_text(encoding="utf-8"),
        encoding="utf-8",
    )

    manager = AgentProfileManager(registry=registry, profiles_dir=tmp_path, default_profile="utility")

    assert set(manager.list_profiles()) == {"utility"}
