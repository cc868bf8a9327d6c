"""Skill data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ExecutionMethod(str, Enum):
    """How a skill's actions are carried out."""

    SCRIPT = "script"
    SUBPROCESS = "subprocess"


@dataclass(frozen=True, slots=True)
class SkillRequirements:
    """Prerequisites a skill declares in its frontmatter.

    Each class is checked independently: ``any_bins`` needs one resolvable
    binary, ``all_bins`` needs every binary, ``files`` must exist and ``env``
    variables must be non-empty.
    """

    any_bins: tuple[str, ...] = ()
    all_bins: tuple[str, ...] = ()
    files: tuple[str, ...] = ()
    env: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.any_bins or self.all_bins or self.files or self.env)


@dataclass(frozen=True, slots=True)
class SkillScript:
    name: str
    path: str
    language: str


@dataclass(frozen=True, slots=True)
class SkillReference:
    name: str
    path: str
    type: str


@dataclass(frozen=True, slots=True)
class Skill:
    """A discovered skill. Instances are immutable and replaced on reload."""

    name: str
    description: str
    content: str = ""
    emoji: str = ""
    location: Path | None = None
    requirements: SkillRequirements = field(default_factory=SkillRequirements)
    scripts: tuple[SkillScript, ...] = ()
    references: tuple[SkillReference, ...] = ()
    actions: tuple[str, ...] = ()
    execution_method: ExecutionMethod = ExecutionMethod.SUBPROCESS


@dataclass(slots=True)
class SkillStatus:
    """Diagnostic view of one discovered skill."""

    name: str
    description: str
    location: str
    available: bool
    actions: list[str] = field(default_factory=list)
    error: str | None = None
    missing_requirements: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "available": self.available,
            "actions": list(self.actions),
        }
        if self.error:
            payload["error"] = self.error
        if self.missing_requirements:
            payload["missing_requirements"] = dict(self.missing_requirements)
        return payload


__all__ = [
    "ExecutionMethod",
    "Skill",
    "SkillReference",
    "SkillRequirements",
    "SkillScript",
    "SkillStatus",
]
