"""Tests for environment-driven settings."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from skillcore.core.config import (
    DEFAULT_SEARCH_PATHS,
    EngineConfig,
    ExecutionConfig,
    Settings,
    SkillsConfig,
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith(Settings.ENV_PREFIX):
            monkeypatch.delenv(key)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.skills_enabled is True
        assert settings.skills_search_paths == []
        assert settings.tool_max_parallel == 5
        assert settings.max_tool_chains == 25

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENT_SKILLS_ENABLED", "false")
        monkeypatch.setenv("AGENT_SKILLS_SEARCH_PATHS", "/srv/skills, ./local ,")
        monkeypatch.setenv("AGENT_ALLOWED_TOOLS", "skill_mail,mail_search")
        monkeypatch.setenv("AGENT_SKILL_TIMEOUT_SECONDS", "12.5")

        settings = Settings()

        assert settings.skills_enabled is False
        assert settings.skills_search_paths == [Path("/srv/skills"), Path("./local")]
        assert settings.allowed_tools == ["skill_mail", "mail_search"]
        assert settings.skill_timeout_seconds == 12.5

    def test_json_mappings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENT_SKILL_ENVIRONMENT", '{"MAIL_HOST": "imap.local"}')
        monkeypatch.setenv("AGENT_SKILL_ALLOWED_ACTIONS", '{"mail": ["search", "read"]}')

        settings = Settings()

        assert settings.skill_environment == {"MAIL_HOST": "imap.local"}
        assert settings.skill_allowed_actions == {"mail": ["search", "read"]}

    def test_blank_json_mapping_is_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENT_SKILL_ENVIRONMENT", "  ")

        assert Settings().skill_environment == {}

    def test_keyword_arguments_win_over_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("AGENT_MAX_TOOL_CHAINS", "3")

        assert Settings(max_tool_chains=7).max_tool_chains == 7

    def test_skills_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENT_SKILL_CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("AGENT_SKILL_ALLOWED_ACTIONS", '{"mail": []}')

        config = Settings().skills_config()

        assert config.cache.ttl_seconds == 60
        assert config.execution.allowed_actions == {"mail": []}
        assert config.resolved_search_paths() == list(DEFAULT_SEARCH_PATHS)

    def test_non_positive_values_fall_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENT_SKILL_TIMEOUT_SECONDS", "0")
        monkeypatch.setenv("AGENT_SKILL_CACHE_TTL_SECONDS", "-5")
        monkeypatch.setenv("AGENT_TOOL_MAX_PARALLEL", "0")
        monkeypatch.setenv("AGENT_TOOL_TIMEOUT_SECONDS", "-1")
        monkeypatch.setenv("AGENT_MAX_TOOL_CHAINS", "0")

        settings = Settings()
        skills = settings.skills_config()
        engine = settings.engine_config()

        assert skills.execution.timeout_seconds == 30
        assert skills.cache.ttl_seconds == 3600
        assert engine.max_parallel == 5
        assert engine.timeout_seconds == 120
        assert engine.max_chains == 25


class TestSubConfigs:
    def test_explicit_search_paths(self, tmp_path: Path) -> None:
        config = SkillsConfig(search_paths=[tmp_path])

        assert config.resolved_search_paths() == [tmp_path]

    def test_execution_defaults(self) -> None:
        config = ExecutionConfig()

        assert config.timeout_seconds == 30
        assert config.environment == {}
        assert config.allowed_actions == {}

    def test_engine_config_keeps_valid_values(self) -> None:
        config = EngineConfig(max_parallel=2, timeout_seconds=0.5, max_chains=1)

        assert (config.max_parallel, config.timeout_seconds, config.max_chains) == (2, 0.5, 1)
