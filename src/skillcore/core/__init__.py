"""Configuration for the skill runtime."""

from skillcore.core.config import (
    CacheConfig,
    EngineConfig,
    ExecutionConfig,
    Settings,
    SkillsConfig,
    get_settings,
)

__all__ = [
    "CacheConfig",
    "EngineConfig",
    "ExecutionConfig",
    "Settings",
    "SkillsConfig",
    "get_settings",
]
