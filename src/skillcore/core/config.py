"""Configuration management for the skill runtime."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, ClassVar, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Ensure .env values are loaded before settings initialisation.
load_dotenv()

DEFAULT_SEARCH_PATHS: tuple[Path, ...] = (
    Path("skills"),
    Path("~/.agent/skills").expanduser(),
    Path("/opt/agent/skills"),
)
DEFAULT_SKILL_TIMEOUT_SECONDS = 30
DEFAULT_CACHE_TTL_SECONDS = 3600
DEFAULT_SECRETS_FILE = "~/.agent-secrets.env"
DEFAULT_MAX_PARALLEL = 5
DEFAULT_TOOL_TIMEOUT_SECONDS = 120.0
DEFAULT_MAX_CHAINS = 25


class ExecutionConfig(BaseModel):
    """Execution defaults applied to every skill invocation."""

    timeout_seconds: float = DEFAULT_SKILL_TIMEOUT_SECONDS
    environment: dict[str, str] = Field(default_factory=dict)
    allowed_actions: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        return value if value > 0 else DEFAULT_SKILL_TIMEOUT_SECONDS


class CacheConfig(BaseModel):
    """TTL cache behaviour for discovered skills."""

    enabled: bool = True
    ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS

    @field_validator("ttl_seconds")
    @classmethod
    def _positive_ttl(cls, value: float) -> float:
        return value if value > 0 else DEFAULT_CACHE_TTL_SECONDS


class SkillsConfig(BaseModel):
    """Configuration consumed by :class:`skillcore.skills.manager.SkillManager`."""

    enabled: bool = True
    search_paths: list[Path] = Field(default_factory=list)
    secrets_file: str = DEFAULT_SECRETS_FILE
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    def resolved_search_paths(self) -> list[Path]:
        """Return the configured search paths, or the defaults when empty."""

        return list(self.search_paths) if self.search_paths else list(DEFAULT_SEARCH_PATHS)


class EngineConfig(BaseModel):
    """Configuration consumed by :class:`skillcore.runtime.execution.ExecutionEngine`."""

    max_parallel: int = DEFAULT_MAX_PARALLEL
    timeout_seconds: float = DEFAULT_TOOL_TIMEOUT_SECONDS
    max_chains: int = DEFAULT_MAX_CHAINS
    allowed_tools: list[str] = Field(default_factory=list)

    @field_validator("max_parallel")
    @classmethod
    def _positive_parallel(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_MAX_PARALLEL

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        return value if value > 0 else DEFAULT_TOOL_TIMEOUT_SECONDS

    @field_validator("max_chains")
    @classmethod
    def _positive_chains(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_MAX_CHAINS


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    ENV_PREFIX: ClassVar[str] = "AGENT_"

    model_config = ConfigDict(extra="ignore")

    app_name: str = Field(default="Agent Skill Runtime", description="Human friendly name.")
    environment: Literal["development", "production", "test"] = Field(
        default="development",
        description="Runtime environment used for logging and diagnostics.",
    )
    log_level: str = Field(default="INFO", description="Python logging level.")
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format; 'text' switches to the rich console handler.",
    )

    skills_enabled: bool = Field(default=True, description="Master switch for skills.")
    skills_search_paths: list[Path] = Field(
        default_factory=list,
        description="Directories scanned for skill folders (comma separated in env).",
    )
    skill_timeout_seconds: float = Field(
        default=DEFAULT_SKILL_TIMEOUT_SECONDS,
        description="Timeout applied around a single skill invocation.",
    )
    skill_environment: dict[str, str] = Field(
        default_factory=dict,
        description="Extra environment variables injected into skill subprocesses (JSON in env).",
    )
    skill_allowed_actions: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Per-skill action allow-lists; skills not listed allow every action.",
    )
    skill_cache_enabled: bool = Field(default=True, description="Cache discovered skills.")
    skill_cache_ttl_seconds: float = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        description="Lifetime of the discovered skill cache.",
    )
    skill_secrets_file: str = Field(
        default=DEFAULT_SECRETS_FILE,
        description="Secrets file sourced when a manifest references it.",
    )

    tool_max_parallel: int = Field(
        default=DEFAULT_MAX_PARALLEL,
        description="Maximum number of tool calls executed concurrently per batch.",
    )
    tool_timeout_seconds: float = Field(
        default=DEFAULT_TOOL_TIMEOUT_SECONDS,
        description="Deadline applied to each batch of tool calls.",
    )
    max_tool_chains: int = Field(
        default=DEFAULT_MAX_CHAINS,
        description="Maximum tool-calling rounds in one conversation turn.",
    )
    allowed_tools: list[str] = Field(
        default_factory=list,
        description="Tool allow-list enforced by the security middleware (empty allows all).",
    )

    def __init__(self, **data: Any) -> None:  # noqa: D401 - inherited docstring
        env_values = type(self)._load_environment_values()
        env_values.update(data)
        super().__init__(**env_values)

    @classmethod
    def _load_environment_values(cls) -> dict[str, Any]:
        """Return field values sourced from the current environment."""

        values: dict[str, Any] = {}
        for field_name in cls.model_fields:
            env_key = f"{cls.ENV_PREFIX}{field_name.upper()}"
            if env_key in os.environ:
                values[field_name] = os.environ[env_key]
        return values

    @field_validator("skills_search_paths", "allowed_tools", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("skill_environment", "skill_allowed_actions", mode="before")
    @classmethod
    def _parse_json_mapping(cls, value: Any) -> Any:
        if isinstance(value, str):
            if not value.strip():
                return {}
            return json.loads(value)
        return value

    def skills_config(self) -> SkillsConfig:
        """Build the typed skills configuration."""

        return SkillsConfig(
            enabled=self.skills_enabled,
            search_paths=[path.expanduser() for path in self.skills_search_paths],
            secrets_file=self.skill_secrets_file,
            execution=ExecutionConfig(
                timeout_seconds=self.skill_timeout_seconds,
                environment=self.skill_environment,
                allowed_actions=self.skill_allowed_actions,
            ),
            cache=CacheConfig(
                enabled=self.skill_cache_enabled,
                ttl_seconds=self.skill_cache_ttl_seconds,
            ),
        )

    def engine_config(self) -> EngineConfig:
        """Build the typed execution engine configuration."""

        return EngineConfig(
            max_parallel=self.tool_max_parallel,
            timeout_seconds=self.tool_timeout_seconds,
            max_chains=self.max_tool_chains,
            allowed_tools=self.allowed_tools,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a singleton instance of :class:`Settings`."""

    return Settings()


__all__ = [
    "CacheConfig",
    "EngineConfig",
    "ExecutionConfig",
    "Settings",
    "SkillsConfig",
    "get_settings",
]
