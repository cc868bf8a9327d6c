"""Skill registry with a TTL cache."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from skillcore.core.config import SkillsConfig
from skillcore.observability.error_codes import ErrorCode
from skillcore.skills.adapter import SkillToolGenerator
from skillcore.skills.discovery import SkillDiscovery
from skillcore.skills.errors import RequirementsError, SkillNotFoundError
from skillcore.skills.executor import SkillExecutor
from skillcore.skills.models import Skill, SkillStatus
from skillcore.skills.validator import SkillValidator
from skillcore.tools.base import Tool, ToolResult

LOGGER = logging.getLogger(__name__)


class SkillManager:
    """Owns the set of available skills and executes their actions.

    The discovered set is cached for ``config.cache.ttl_seconds``. Readers
    work on an immutable snapshot and never wait on each other; the lock is
    only taken to refresh the cache, and a refresh re-checks freshness once
    it holds the lock so concurrent misses run discovery once.

    Usage:
        manager = SkillManager(settings.skills_config())
        await manager.initialize()
        tools = await manager.generate_tools()
    """

    def __init__(
        self,
        config: SkillsConfig | None = None,
        *,
        validator: SkillValidator | None = None,
        discovery: SkillDiscovery | None = None,
        executor: SkillExecutor | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or SkillsConfig()
        self._validator = validator or SkillValidator()
        self._discovery = discovery or SkillDiscovery(
            self._config.resolved_search_paths(), validator=self._validator
        )
        self._executor = executor or SkillExecutor(
            self._config.execution, secrets_file=self._config.secrets_file
        )
        self._generator = SkillToolGenerator(self.execute_skill)
        self._clock = clock

        self._lock = asyncio.Lock()
        self._skills: tuple[Skill, ...] | None = None
        self._expires_at = 0.0
        self._initialized = False

    @property
    def config(self) -> SkillsConfig:
        return self._config

    def is_enabled(self) -> bool:
        return self._config.enabled

    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Run discovery eagerly and fill the cache. Does nothing when disabled."""

        if not self.is_enabled():
            LOGGER.info("Skills system disabled")
            return

        async with self._lock:
            skills = await self._refresh()
            self._initialized = True
        LOGGER.info("Skills manager initialized with %d skills", len(skills))

    async def get_available_skills(self) -> list[Skill]:
        """Return the available skills, rediscovering when the cache has expired."""

        if not self.is_enabled():
            return []

        snapshot = self._fresh_snapshot()
        if snapshot is None:
            async with self._lock:
                snapshot = self._fresh_snapshot()
                if snapshot is None:
                    snapshot = await self._refresh()
        return list(snapshot)

    async def get_skill(self, name: str) -> Skill:
        """Look up an available skill by name.

        Raises:
            SkillNotFoundError: If no available skill has that name.
        """
        for skill in await self.get_available_skills():
            if skill.name == name:
                return skill
        raise SkillNotFoundError(name)

    async def execute_skill(
        self,
        name: str,
        action: str,
        args: Mapping[str, Any] | None = None,
    ) -> ToolResult:
        """Execute ``action`` of skill ``name``.

        Unknown skills and disallowed actions are returned as failed results.
        """
        if not self.is_enabled():
            return ToolResult.failure("skills system is disabled", ErrorCode.SKILL_DISABLED)

        try:
            skill = await self.get_skill(name)
        except SkillNotFoundError as exc:
            return ToolResult.failure(str(exc), ErrorCode.SKILL_NOT_FOUND)

        allowed = self._config.execution.allowed_actions.get(name)
        if allowed is not None and action not in allowed:
            LOGGER.warning("Action %s rejected for skill %s", action, name)
            return ToolResult.failure(
                f"action '{action}' not allowed for skill '{name}'",
                ErrorCode.SKILL_ACTION_NOT_ALLOWED,
            )

        return await self._executor.execute(skill, action, args)

    async def generate_tools(self) -> list[Tool]:
        """Build the tools for every available skill."""

        return self._generator.generate_tools(await self.get_available_skills())

    async def build_system_prompt_context(self) -> str:
        return self._generator.build_skills_context(await self.get_available_skills())

    async def reload_skills(self) -> list[Skill]:
        """Drop the cache and rediscover, regardless of the TTL."""

        async with self._lock:
            self._skills = None
            skills = await self._refresh()
        LOGGER.info("Reloaded %d skills", len(skills))
        return list(skills)

    async def validate_skill_requirements(self, name: str) -> None:
        """Run the gating requirement check for a discovered skill.

        Raises:
            SkillNotFoundError: If no manifest with that name parses.
            RequirementsError: If the skill's prerequisites are not met.
        """
        skills = await asyncio.to_thread(self._discovery.discover_all)
        for skill in skills:
            if skill.name == name:
                self._validator.validate_requirements(skill.requirements)
                return
        raise SkillNotFoundError(name)

    async def get_skill_status(self) -> list[SkillStatus]:
        """Report every parseable skill, including the unavailable ones."""

        statuses: list[SkillStatus] = []
        for skill in await asyncio.to_thread(self._discovery.discover_all):
            error: str | None = None
            try:
                self._validator.validate_skill_structure(skill)
                self._validator.validate_requirements(skill.requirements)
            except RequirementsError as exc:
                error = str(exc)

            statuses.append(
                SkillStatus(
                    name=skill.name,
                    description=skill.description,
                    location=str(skill.location) if skill.location else "",
                    available=error is None,
                    actions=list(skill.actions),
                    error=error,
                    missing_requirements=self._validator.get_missing_requirements(
                        skill.requirements
                    ),
                )
            )
        return statuses

    def describe(self) -> dict[str, Any]:
        """Snapshot of the manager state for status output."""

        expires_at: str | None = None
        if self._skills is not None:
            remaining = self._expires_at - self._clock()
            expires_at = (datetime.now(UTC) + timedelta(seconds=remaining)).isoformat()
        return {
            "enabled": self.is_enabled(),
            "initialized": self._initialized,
            "skill_count": len(self._skills) if self._skills is not None else 0,
            "search_paths": [str(path) for path in self._discovery.search_paths],
            "cache_expires_at": expires_at,
        }

    def _fresh_snapshot(self) -> tuple[Skill, ...] | None:
        if not self._config.cache.enabled or self._skills is None:
            return None
        if self._clock() >= self._expires_at:
            return None
        return self._skills

    async def _refresh(self) -> tuple[Skill, ...]:
        # Caller holds the lock.
        skills = tuple(await asyncio.to_thread(self._discovery.discover))
        self._skills = skills
        self._expires_at = self._clock() + self._config.cache.ttl_seconds
        return skills


__all__ = ["SkillManager"]
