"""Exceptions raised while loading and validating skills."""

from __future__ import annotations


class SkillError(RuntimeError):
    """Base class for skill failures."""


class ManifestError(SkillError):
    """Raised when a SKILL.md file cannot be parsed into a skill."""


class SkillNotFoundError(SkillError):
    """Raised when a skill name does not resolve to an available skill."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"skill not found: {name}")


class RequirementsError(SkillError):
    """Raised when a skill's prerequisites are not satisfied."""

    def __init__(self, message: str, missing: dict[str, list[str]] | None = None) -> None:
        self.missing = missing or {}
        super().__init__(message)


__all__ = ["ManifestError", "RequirementsError", "SkillError", "SkillNotFoundError"]
